# -*- coding: utf-8 -*-
"""
Black 모델 스왑션 가격
======================

시장 ATM 변동성 표면을 스왑션 프리미엄으로 변환합니다. 변환된 거래는
프리미엄이 포함되어 있어 보정의 목표 가격이 0 이 됩니다.
"""

from math import log, sqrt
from typing import Iterable, List, Tuple

from scipy.stats import norm

from ..products.swaption import Swaption, SwaptionTrade, swaption_trade

LABEL_TO_MONTHS = {"1M": 1, "3M": 3, "6M": 6, "1Y": 12, "2Y": 24, "3Y": 36, "5Y": 60, "10Y": 120}


def black_swaption_price(forward_swap_rate: float,
                         strike: float,
                         volatility: float,
                         expiry: float,
                         annuity: float,
                         is_payer: bool = True) -> float:
    """Black 모델을 이용한 스왑션 가격을 계산합니다.

    변동성이나 만기가 0 이하이면 내재가치를 반환합니다.
    """
    if forward_swap_rate <= 0.0 or strike <= 0.0:
        raise ValueError(f"Black 공식은 양의 선도({forward_swap_rate})와 행사가({strike})가 필요합니다.")
    if volatility <= 1e-9 or expiry <= 1e-9:
        intrinsic = forward_swap_rate - strike if is_payer else strike - forward_swap_rate
        return annuity * max(intrinsic, 0.0)

    # 등가격 옵션에서 log(1)=0 처리
    if abs(forward_swap_rate - strike) < 1e-12:
        d1 = 0.5 * volatility * sqrt(expiry)
    else:
        d1 = (log(forward_swap_rate / strike) + 0.5 * volatility ** 2 * expiry) / (volatility * sqrt(expiry))

    d2 = d1 - volatility * sqrt(expiry)

    if is_payer:  # Payer 스왑션 (금리 상승에 베팅)
        price = annuity * (forward_swap_rate * norm.cdf(d1) - strike * norm.cdf(d2))
    else:  # Receiver 스왑션 (금리 하락에 베팅)
        price = annuity * (strike * norm.cdf(-d2) - forward_swap_rate * norm.cdf(-d1))
    return float(price)


def forward_swap_rate(option: Swaption, rates) -> Tuple[float, float]:
    """평가일의 곡선으로 선도 스왑 금리와 애뉴어티(annuity)를 계산합니다."""
    annuity = sum(acc * rates.discount_factor(d)
                  for d, acc in zip(option.fixed_payment_dates, option.fixed_accruals))
    floating_pv = sum(acc * rates.ibor_forward(s, e, acc) * rates.discount_factor(e)
                      for s, e, acc in zip(option.ibor_start_dates, option.ibor_end_dates, option.ibor_accruals))
    return floating_pv / annuity, annuity


def build_market_prices_from_vol_surface(surface_pct: Iterable[Iterable[float]],
                                         expiry_labels: List[str],
                                         tenors: List[int],
                                         rates,
                                         notional: float = 1.0) -> List[SwaptionTrade]:
    """변동성 표면과 할인 곡선으로 프리미엄을 포함한 ATM 지급 스왑션 거래 목록을 만듭니다.

    Args:
        surface_pct: % 단위의 ATM Black 변동성 2차원 배열 (만기 × 테너).
    """
    trades = []
    for label, row in zip(expiry_labels, surface_pct):
        months = LABEL_TO_MONTHS[label]
        for tenor, vol_pct in zip(tenors, row):
            # 행사가는 선도 금리 (ATM)
            atm = swaption_trade(rates.valuation_date, months, tenor, 0.01, notional)
            forward, annuity = forward_swap_rate(atm.swaption, rates)
            trade = swaption_trade(rates.valuation_date, months, tenor, forward, notional)
            expiry = rates.relative_time(trade.swaption.expiry_date)
            premium = notional * black_swaption_price(forward, forward, vol_pct / 100.0, expiry, annuity)
            trades.append(SwaptionTrade(trade.swaption, premium, trade.premium_date))
    return trades
