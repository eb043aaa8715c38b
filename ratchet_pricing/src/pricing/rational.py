# -*- coding: utf-8 -*-
"""
Rational 1팩터 모형 스왑션 가격
===============================

만기 T에서 스왑 가치의 분자는 A(T)에 대해 선형입니다::

    V(T) ∝ c0 + c1 A(T),   A(T) = Y - 1,   Y = exp(a √T X - a² T / 2)

따라서 옵션 가치는 E[(c0 - c1 + c1 Y)^+] 이며 Y 는 평균 1 의 로그정규이므로
Black 공식(선도 |c1|, 변동성 a)으로 계산됩니다.
"""

from .black import black_swaption_price
from ..models.rational import RationalOneFactorParameters
from ..products.swaption import Swaption, SwaptionTrade


def swap_coefficients(option: Swaption, rates, model: RationalOneFactorParameters):
    """지급 스왑(고정 지급, Ibor 수취)의 (c0 - c1, c1)."""
    notional = option.notional
    c0 = 0.0
    c1 = 0.0
    for start, end, accrual in zip(option.ibor_start_dates, option.ibor_end_dates, option.ibor_accruals):
        forward = rates.ibor_forward(start, end, accrual)
        c0 += notional * accrual * forward * rates.discount_factor(end)
        c1 += notional * accrual * model.b1(start, end, accrual)
    for pay, accrual in zip(option.fixed_payment_dates, option.fixed_accruals):
        c0 -= notional * option.strike * accrual * rates.discount_factor(pay)
        c1 -= notional * option.strike * accrual * model.b0(pay)
    if not option.is_payer:
        c0, c1 = -c0, -c1
    return c0 - c1, c1


def swaption_price(option: Swaption, rates, model: RationalOneFactorParameters) -> float:
    c0, c1 = swap_coefficients(option, rates, model)
    if c0 >= 0.0 and c1 >= 0.0:
        pv = c0 + c1
    elif c0 <= 0.0 and c1 <= 0.0:
        pv = 0.0
    else:
        omega = 1.0 if c1 > 0.0 else -1.0
        expiry = model.relative_time(option.expiry_date)
        pv = black_swaption_price(omega * c1, -omega * c0, model.a, expiry, 1.0, is_payer=c1 > 0.0)
    return pv if option.is_long else -pv


def swaption_trade_price(trade: SwaptionTrade, rates, model: RationalOneFactorParameters) -> float:
    premium_pv = trade.premium * rates.discount_factor(trade.premium_date) if trade.premium else 0.0
    return swaption_price(trade.swaption, rates, model) - premium_pv
