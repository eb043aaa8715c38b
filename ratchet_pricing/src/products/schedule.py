# -*- coding: utf-8 -*-
"""
일정(schedule) 유틸리티
=======================

* ``period_dates``: 시작일부터 ``frequency_months`` 개월 간격의 날짜 목록.
* ``fixing_date``: 시작일 이전 영업일 기준 고정일.
* ``CashflowSchedule``: 몬테카를로 집계기가 사용하는 상품 독립적인 일정.
  각 항목은 (고정일, 기간 시작일, 지급일, 지급 금액 = 기간 비율 × 액면) 입니다.
"""

from dataclasses import dataclass
from datetime import date
from typing import List, Tuple

import pandas as pd

from ..errors import UnsupportedConfigurationError
from ...config.settings import DAYS_PER_YEAR


def to_date(value) -> date:
    return pd.Timestamp(value).date()


def year_fraction(start: date, end: date) -> float:
    """ACT/365F"""
    return (end - start).days / DAYS_PER_YEAR


def add_months(value, months: int) -> date:
    return (pd.Timestamp(value) + pd.DateOffset(months=months)).date()


def add_business_days(value, days: int) -> date:
    return (pd.Timestamp(value) + pd.offsets.BDay(days)).date()


def period_dates(start, end, frequency_months: int) -> List[date]:
    """시작일 기준 월 단위 일정. 불완전 기간(stub)은 지원하지 않습니다."""
    start, end = to_date(start), to_date(end)
    if end <= start:
        raise ValueError("종료일은 시작일 이후여야 합니다.")
    dates = [start]
    k = 1
    while dates[-1] < end:
        dates.append(add_months(start, k * frequency_months))
        k += 1
    if dates[-1] != end:
        raise UnsupportedConfigurationError(
            f"{start} ~ {end} 구간은 {frequency_months}개월 주기로 나누어지지 않습니다 (stub 미지원).")
    return dates


def fixing_date(effective_date, lag_days: int) -> date:
    return add_business_days(effective_date, -lag_days)


@dataclass(frozen=True)
class CashflowEquivalent:
    fixing_date: date
    effective_date: date
    payment_date: date
    amount: float


@dataclass(frozen=True)
class CashflowSchedule:
    entries: Tuple[CashflowEquivalent, ...]

    def __len__(self) -> int:
        return len(self.entries)

    @property
    def fixing_dates(self) -> List[date]:
        return [e.fixing_date for e in self.entries]

    @property
    def effective_dates(self) -> List[date]:
        return [e.effective_date for e in self.entries]

    @property
    def payment_dates(self) -> List[date]:
        return [e.payment_date for e in self.entries]

    @property
    def amounts(self) -> List[float]:
        return [e.amount for e in self.entries]
