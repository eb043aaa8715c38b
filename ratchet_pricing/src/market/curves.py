# -*- coding: utf-8 -*-
"""
할인 곡선과 시장 데이터 제공자
==============================

* ``DiscountCurve``: 연속복리 제로 금리를 Cubic Spline으로 보간한 할인 곡선.
* ``RatesProvider``: 평가일, 할인 곡선, Ibor 의사할인 곡선을 묶은 시장 데이터.
  보정과 몬테카를로 가격결정에서 ``market`` 인자로 전달됩니다.

시간은 평가일로부터 ACT/365F 연 단위이며 모형의 시간 측정과 일치합니다.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional, Union

import numpy as np
from scipy.interpolate import CubicSpline

from ...config.settings import (
    DAYS_PER_YEAR,
    DEFAULT_CURRENCY,
    IBOR_SPREAD_BP,
    VALUATION_DATE_STR,
    ZERO_RATES_PCT,
)

DateLike = Union[date, datetime]


class DiscountCurve:
    """제로 금리 곡선 z(t)로부터 P(t) = exp(-z(t) t)를 계산합니다."""

    def __init__(self, times, zero_rates):
        times = np.asarray(times, dtype=float)
        zero_rates = np.asarray(zero_rates, dtype=float)
        if times.shape != zero_rates.shape or times.ndim != 1:
            raise ValueError("times와 zero_rates는 같은 길이의 1차원 배열이어야 합니다.")
        if np.any(np.diff(times) <= 0.0) or times[0] <= 0.0:
            raise ValueError("곡선 노드 시점은 양수이며 증가해야 합니다.")
        self.times = times
        self.zero_rates = zero_rates
        # 첫 노드 이전은 평탄하게 외삽
        if len(times) == 1:
            self._spline = None
        else:
            self._spline = CubicSpline(times, zero_rates, bc_type="natural")

    @classmethod
    def flat(cls, rate: float) -> "DiscountCurve":
        return cls([1.0], [rate])

    @classmethod
    def from_rates_pct(cls, rates_pct: dict, shift_bp: float = 0.0) -> "DiscountCurve":
        """{만기: %} 딕셔너리에서 곡선을 만듭니다."""
        times = sorted(float(t) for t in rates_pct)
        rates = [rates_pct[t] / 100.0 + shift_bp * 1.0E-4 for t in sorted(rates_pct)]
        return cls(times, rates)

    def zero_rate(self, t):
        t = np.asarray(t, dtype=float)
        if self._spline is None:
            return np.full_like(t, self.zero_rates[0])
        clipped = np.clip(t, self.times[0], self.times[-1])
        return self._spline(clipped)

    def discount_factor(self, t):
        t = np.asarray(t, dtype=float)
        df = np.exp(-self.zero_rate(t) * t)
        if df.ndim == 0:
            return float(df)
        return df


@dataclass(frozen=True)
class RatesProvider:
    """평가일 기준 할인/Ibor 곡선 묶음.

    ``ibor_curve``가 없으면 할인 곡선을 Ibor 의사할인 곡선으로 사용합니다
    (단일 곡선, 곱셈 스프레드 = 1).
    """

    valuation_date: date
    discount_curve: DiscountCurve
    ibor_curve: Optional[DiscountCurve] = None
    currency: str = DEFAULT_CURRENCY
    day_count_basis: float = field(default=DAYS_PER_YEAR)

    def relative_time(self, value: DateLike) -> float:
        if isinstance(value, datetime):
            value = value.date()
        return (value - self.valuation_date).days / self.day_count_basis

    def _time(self, value) -> float:
        if isinstance(value, (date, datetime)):
            return self.relative_time(value)
        return float(value)

    def discount_factor(self, value) -> float:
        return float(self.discount_curve.discount_factor(self._time(value)))

    def ibor_discount_factor(self, value) -> float:
        curve = self.ibor_curve if self.ibor_curve is not None else self.discount_curve
        return float(curve.discount_factor(self._time(value)))

    def ibor_forward(self, start, end, accrual: float) -> float:
        """Ibor 선도 금리 L = (Pi(s)/Pi(e) - 1) / delta."""
        return (self.ibor_discount_factor(start) / self.ibor_discount_factor(end) - 1.0) / accrual

    def ibor_spread(self, start, end, accrual: float) -> float:
        """곱셈 스프레드 beta = (1 + delta L) P(e) / P(s)."""
        forward = self.ibor_forward(start, end, accrual)
        return (1.0 + accrual * forward) * self.discount_factor(end) / self.discount_factor(start)


def rates_from_settings(valuation_date=None) -> RatesProvider:
    """settings의 제로 금리와 Ibor 스프레드로 시장 데이터를 구성합니다."""
    valuation = valuation_date or datetime.strptime(VALUATION_DATE_STR, "%Y-%m-%d").date()
    return RatesProvider(
        valuation_date=valuation,
        discount_curve=DiscountCurve.from_rates_pct(ZERO_RATES_PCT),
        ibor_curve=DiscountCurve.from_rates_pct(ZERO_RATES_PCT, shift_bp=IBOR_SPREAD_BP),
    )
