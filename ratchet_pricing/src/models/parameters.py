# -*- coding: utf-8 -*-
"""
모형 파라미터 공통 정의
=======================

모든 모형 파라미터(Hull-White, G2++, LMM, Rational)가 공유하는 계약입니다.

* ``ScaledSecondTime``: 날짜/시각을 연 단위 상대 시간으로 변환합니다.
  시각(datetime)은 경과 초 / 31,536,000, 날짜(date)는 경과 일수 / 365.
* ``ModelParameters``: 파라미터 개수, 통화, 평가 시각, ``relative_time`` 을
  제공하는 불변 객체의 기본 클래스. ``ModelTemplate.generate`` 로만 생성됩니다.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from typing import Union

import numpy as np

from ...config.settings import DAYS_PER_YEAR, SECONDS_PER_YEAR

DateLike = Union[date, datetime]


@dataclass(frozen=True)
class ScaledSecondTime:
    """경과 시간을 연 단위로 환산하는 시간 측정."""

    seconds_per_year: float = SECONDS_PER_YEAR
    days_per_year: float = DAYS_PER_YEAR

    def relative_time(self, start: datetime, end: DateLike) -> float:
        if isinstance(end, datetime):
            if end.tzinfo is None:
                end = end.replace(tzinfo=start.tzinfo)
            return (end - start).total_seconds() / self.seconds_per_year
        return (end - start.date()).days / self.days_per_year


DEFAULT_TIME_MEASURE = ScaledSecondTime()


def valuation_datetime_of(valuation: DateLike) -> datetime:
    """날짜가 주어지면 정오(UTC) 시각으로 변환합니다."""
    if isinstance(valuation, datetime):
        if valuation.tzinfo is None:
            return valuation.replace(tzinfo=timezone.utc)
        return valuation
    return datetime.combine(valuation, time(12, 0), tzinfo=timezone.utc)


def frozen_array(values, ndim: int = 1) -> np.ndarray:
    """읽기 전용 float 배열을 만듭니다."""
    array = np.array(values, dtype=float, ndmin=ndim)
    array.setflags(write=False)
    return array


class ModelParameters(ABC):
    """단일 통화 모형 파라미터의 공통 계약.

    하위 클래스는 frozen dataclass이며 ``currency``, ``valuation_datetime``,
    ``time_measure`` 필드를 가집니다.
    """

    @property
    @abstractmethod
    def parameters_count(self) -> int:
        ...

    @abstractmethod
    def parameter_array(self) -> np.ndarray:
        """템플릿 순서의 전체 파라미터 벡터."""

    def parameter(self, index: int) -> float:
        return float(self.parameter_array()[index])

    @property
    def valuation_date(self) -> date:
        return self.valuation_datetime.date()

    def relative_time(self, value: DateLike) -> float:
        return self.time_measure.relative_time(self.valuation_datetime, value)
