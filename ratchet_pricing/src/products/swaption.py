# -*- coding: utf-8 -*-
"""
스왑션 상품
===========

실물 인도 유럽형 스왑션과 프리미엄이 포함된 거래(trade)를 정의합니다.
보정 상품으로 사용할 때 프리미엄이 거래에 포함되므로 목표 가격은 0 입니다.
"""

from dataclasses import dataclass
from datetime import date
from typing import Optional, Tuple

from .schedule import add_business_days, add_months, period_dates, to_date, year_fraction


@dataclass(frozen=True)
class Swaption:
    """스왑 고정 다리와 Ibor 다리 일정을 가진 스왑션.

    ``is_payer`` 는 고정금리 지급 스왑에 대한 옵션 여부, ``is_long`` 은 매수 여부.
    """

    expiry_date: date
    fixed_payment_dates: Tuple[date, ...]
    fixed_accruals: Tuple[float, ...]
    ibor_start_dates: Tuple[date, ...]
    ibor_end_dates: Tuple[date, ...]
    ibor_accruals: Tuple[float, ...]
    strike: float
    notional: float
    is_payer: bool = True
    is_long: bool = True

    @property
    def start_date(self) -> date:
        return self.ibor_start_dates[0]

    @property
    def end_date(self) -> date:
        return self.ibor_end_dates[-1]


@dataclass(frozen=True)
class SwaptionTrade:
    swaption: Swaption
    premium: float = 0.0
    premium_date: Optional[date] = None


def swaption(valuation_date,
             expiry_months: int,
             tenor_years: int,
             strike: float,
             notional: float,
             is_payer: bool = True,
             is_long: bool = True,
             fixed_frequency_months: int = 12,
             ibor_frequency_months: int = 6,
             spot_lag_days: int = 2) -> Swaption:
    """평가일 기준 만기(개월)와 테너(년)로 스왑션을 만듭니다."""
    expiry = add_months(valuation_date, expiry_months)
    start = add_business_days(expiry, spot_lag_days)
    end = add_months(start, 12 * tenor_years)
    fixed_dates = period_dates(start, end, fixed_frequency_months)
    ibor_dates = period_dates(start, end, ibor_frequency_months)
    return Swaption(
        expiry_date=expiry,
        fixed_payment_dates=tuple(fixed_dates[1:]),
        fixed_accruals=tuple(year_fraction(s, e) for s, e in zip(fixed_dates[:-1], fixed_dates[1:])),
        ibor_start_dates=tuple(ibor_dates[:-1]),
        ibor_end_dates=tuple(ibor_dates[1:]),
        ibor_accruals=tuple(year_fraction(s, e) for s, e in zip(ibor_dates[:-1], ibor_dates[1:])),
        strike=float(strike),
        notional=float(notional),
        is_payer=is_payer,
        is_long=is_long,
    )


def swaption_trade(valuation_date,
                   expiry_months: int,
                   tenor_years: int,
                   strike: float,
                   notional: float,
                   premium: float = 0.0,
                   premium_date=None,
                   **kwargs) -> SwaptionTrade:
    """프리미엄 지급일 기본값은 평가일의 현물일(T+2)."""
    option = swaption(valuation_date, expiry_months, tenor_years, strike, notional, **kwargs)
    if premium_date is None:
        premium_date = add_business_days(valuation_date, 2)
    return SwaptionTrade(option, float(premium), to_date(premium_date))
