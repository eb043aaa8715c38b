# -*- coding: utf-8 -*-
"""
Ibor 래칫 다리
==============

각 쿠폰 금리는 직전 쿠폰 금리와 현재 Ibor 고정치에 의존합니다::

    main  = c0_m · 직전 + c1_m · ibor + c2_m
    floor = c0_f · 직전 + c1_f · ibor + c2_f
    cap   = c0_c · 직전 + c1_c · ibor + c2_c
    rate  = min(max(main, floor), cap)

첫 쿠폰은 직전 금리에 의존할 수 없으므로 세 계수 모두 c0 = 0 이어야 합니다.

예::

    Ibor 동등   : main (0, 1, 0),  floor (0, 0, -1), cap (0, 0, 1)
    2% 캡 Ibor  : main (0, 1, 0),  floor (0, 0, -1), cap (0, 0, 0.02)
"""

from dataclasses import dataclass, replace
from datetime import date
from typing import Optional, Sequence, Tuple, Union

import numpy as np

from .schedule import (
    CashflowEquivalent,
    CashflowSchedule,
    fixing_date,
    period_dates,
    year_fraction,
)
from ..errors import UnsupportedConfigurationError
from ...config.settings import DEFAULT_CURRENCY


@dataclass(frozen=True)
class RatchetCoefficients:
    """직전 금리, Ibor, 상수 항의 선형 결합 계수."""

    previous: float = 0.0
    ibor: float = 0.0
    fixed: float = 0.0

    def value(self, previous, ibor):
        return self.previous * previous + self.ibor * ibor + self.fixed


@dataclass(frozen=True)
class RatchetPeriod:
    fixing_date: date
    start_date: date
    end_date: date
    payment_date: date
    accrual: float
    notional: float
    main: RatchetCoefficients
    floor: RatchetCoefficients
    cap: RatchetCoefficients

    @property
    def amount(self) -> float:
        return self.accrual * self.notional

    def rate(self, previous, ibor):
        """경로별 벡터 연산 지원."""
        main = self.main.value(previous, ibor)
        floor = self.floor.value(previous, ibor)
        cap = self.cap.value(previous, ibor)
        return np.minimum(np.maximum(main, floor), cap)


@dataclass(frozen=True)
class RatchetLeg:
    periods: Tuple[RatchetPeriod, ...]
    currency: str = DEFAULT_CURRENCY

    def __post_init__(self):
        if not self.periods:
            raise ValueError("래칫 다리에는 최소 한 개의 기간이 필요합니다.")
        first = self.periods[0]
        for name in ("main", "floor", "cap"):
            if getattr(first, name).previous != 0.0:
                raise ValueError(f"첫 쿠폰의 {name} 계수는 직전 금리에 의존할 수 없습니다.")

    def cashflow_schedule(self) -> CashflowSchedule:
        return CashflowSchedule(tuple(
            CashflowEquivalent(p.fixing_date, p.start_date, p.payment_date, p.amount)
            for p in self.periods
        ))


Coefficients = Union[RatchetCoefficients, Sequence[RatchetCoefficients]]


def _per_period(coefficients: Coefficients, count: int) -> list:
    if isinstance(coefficients, RatchetCoefficients):
        return [coefficients] * count
    coefficients = list(coefficients)
    if len(coefficients) != count:
        raise ValueError(f"계수 개수({len(coefficients)})가 기간 수({count})와 다릅니다.")
    return coefficients


def ratchet_leg(start,
                end,
                frequency_months: int,
                notional: float,
                main: Coefficients,
                floor: Coefficients,
                cap: Coefficients,
                first: Optional[Tuple[RatchetCoefficients, RatchetCoefficients, RatchetCoefficients]] = None,
                fixing_lag_days: int = 2,
                in_arrears: bool = False,
                currency: str = DEFAULT_CURRENCY) -> RatchetLeg:
    """기간별 계수로 래칫 다리를 만듭니다.

    계수가 하나만 주어지면 모든 기간에 사용하며, 첫 기간은 직전 금리 계수를 0 으로 둡니다.
    ``first`` 가 주어지면 첫 기간의 (main, floor, cap) 계수를 대신합니다.
    """
    if in_arrears:
        raise UnsupportedConfigurationError("후취(in arrears) 고정 래칫은 지원하지 않습니다.")
    dates = period_dates(start, end, frequency_months)
    count = len(dates) - 1
    coefficients = []
    for given in (main, floor, cap):
        values = _per_period(given, count)
        if isinstance(given, RatchetCoefficients):
            values[0] = replace(given, previous=0.0)
        coefficients.append(values)
    if first is not None:
        for values, given in zip(coefficients, first):
            values[0] = given
    periods = tuple(
        RatchetPeriod(
            fixing_date=fixing_date(s, fixing_lag_days),
            start_date=s,
            end_date=e,
            payment_date=e,
            accrual=year_fraction(s, e),
            notional=float(notional),
            main=coefficients[0][i],
            floor=coefficients[1][i],
            cap=coefficients[2][i],
        )
        for i, (s, e) in enumerate(zip(dates[:-1], dates[1:]))
    )
    return RatchetLeg(periods, currency)
