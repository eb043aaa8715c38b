# -*- coding: utf-8 -*-
"""
Hull-White 1팩터 해석적 가격결정
================================

* 스왑션: 다중 곡선 현금흐름 동등치(cash-flow equivalent)와 Jamshidian 형태의
  단일 κ 방정식 Σ c_i P_i exp(-α_i κ - α_i²/2) = 0 을 풉니다::

      Receiver = Σ c_i P_i N(κ + α_i)
      Payer    = Σ (-c_i) P_i N(-κ - α_i)

* 캡렛: β P_s N(-κ) - (1 + δK) P_e N(-κ - α),
  κ = (ln((1 + δK) P_e / (β P_s)) - α²/2) / α

``swaption_trade_price`` 는 프리미엄을 차감한 거래 가치로, 보정의 목표가 0 입니다.
"""

from collections import defaultdict
from typing import Iterable, List, Tuple

import numpy as np
from scipy.optimize import brentq
from scipy.stats import norm

from ..errors import NumericalDomainError
from ..models.hull_white import HullWhiteOneFactorParameters, alpha
from ..products.swaption import Swaption, SwaptionTrade


def cash_flow_equivalent(option: Swaption, rates) -> Tuple[List, np.ndarray]:
    """고정금리 수취 스왑의 현금흐름 동등치 (날짜, 금액)."""
    flows = defaultdict(float)
    notional = option.notional
    for start, end, accrual in zip(option.ibor_start_dates, option.ibor_end_dates, option.ibor_accruals):
        beta = rates.ibor_spread(start, end, accrual)
        flows[start] -= notional * beta
        flows[end] += notional
    for pay, accrual in zip(option.fixed_payment_dates, option.fixed_accruals):
        flows[pay] += notional * option.strike * accrual
    dates = sorted(flows)
    return dates, np.array([flows[d] for d in dates])


def bracket_root(function, low: float = -2.0, high: float = 2.0, limit: float = 1.0E3) -> float:
    """부호가 바뀌는 구간을 넓혀 가며 brentq 로 근을 찾습니다."""
    f_low, f_high = function(low), function(high)
    while f_low * f_high > 0.0:
        if high - low > limit:
            raise NumericalDomainError(f"[{low}, {high}] 에서 근의 구간을 찾지 못했습니다.")
        low, high = 2.0 * low, 2.0 * high
        f_low, f_high = function(low), function(high)
    return brentq(function, low, high, xtol=1.0E-14)


def swaption_price(option: Swaption, rates, model: HullWhiteOneFactorParameters) -> float:
    expiry = model.relative_time(option.expiry_date)
    dates, amounts = cash_flow_equivalent(option, rates)
    times = np.array([model.relative_time(d) for d in dates])
    discounted = amounts * np.array([rates.discount_factor(d) for d in dates])
    alphas = np.array([alpha(model, 0.0, expiry, expiry, t) for t in times])

    kappa = bracket_root(lambda k: float(np.sum(discounted * np.exp(-0.5 * alphas ** 2 - alphas * k))))
    omega = -1.0 if option.is_payer else 1.0
    pv = float(np.sum(omega * discounted * norm.cdf(omega * (kappa + alphas))))
    return pv if option.is_long else -pv


def swaption_trade_price(trade: SwaptionTrade, rates, model: HullWhiteOneFactorParameters) -> float:
    """옵션 가치 - 프리미엄 현재가치."""
    premium_pv = trade.premium * rates.discount_factor(trade.premium_date) if trade.premium else 0.0
    return swaption_price(trade.swaption, rates, model) - premium_pv


def caplet_price(rates, model: HullWhiteOneFactorParameters,
                 fixing_date, start_date, end_date, accrual: float,
                 strike: float, notional: float = 1.0, is_cap: bool = True) -> float:
    """기간 말 지급 캡렛(플로어렛) 가격."""
    t_fix = model.relative_time(fixing_date)
    t_start = model.relative_time(start_date)
    t_end = model.relative_time(end_date)
    df_start = rates.discount_factor(start_date)
    df_end = rates.discount_factor(end_date)
    beta = rates.ibor_spread(start_date, end_date, accrual)
    strike_factor = 1.0 + accrual * strike
    if t_fix <= 0.0:
        payoff = beta * df_start - strike_factor * df_end
        return notional * max(payoff if is_cap else -payoff, 0.0)
    a = alpha(model, 0.0, t_fix, t_start, t_end)
    kappa = (np.log(strike_factor * df_end / (beta * df_start)) - 0.5 * a * a) / a
    omega = 1.0 if is_cap else -1.0
    price = omega * (beta * df_start * norm.cdf(-omega * kappa)
                     - strike_factor * df_end * norm.cdf(-omega * (kappa + a)))
    return float(notional * price)


def cap_leg_price(periods: Iterable, rates, model: HullWhiteOneFactorParameters,
                  strike: float, is_cap: bool = True) -> float:
    """래칫 다리의 기간들(고정일/시작일/종료일/기간 비율/액면)을 캡 다리로 평가합니다."""
    return sum(caplet_price(rates, model, p.fixing_date, p.start_date, p.end_date, p.accrual,
                            strike, p.notional, is_cap)
               for p in periods)


def ibor_leg_price(periods: Iterable, rates) -> float:
    """Σ N δ L P(지급일)"""
    return sum(p.notional * p.accrual * rates.ibor_forward(p.start_date, p.end_date, p.accrual)
               * rates.discount_factor(p.payment_date)
               for p in periods)
