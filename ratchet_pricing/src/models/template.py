# -*- coding: utf-8 -*-
"""
모형 템플릿과 파라미터 변환
===========================

보정기가 사용하는 파라미터 벡터 계약을 정의합니다.

* 전체 파라미터 벡터 = 초기 추정값(``initial_guess``)과 같은 길이.
* ``fixed`` 마스크가 True인 위치는 보정하지 않으며 초기 추정값을 그대로 유지합니다.
* 자유 파라미터 부분벡터만 최적화 대상이며, 각 파라미터의 정의역은
  ``ParameterLimitsTransform`` 으로 제약 없는 공간으로 변환됩니다.

변환 공식::

    x > a        : y = ln(exp(x - a) - 1),         x = a + ln(1 + exp(y))
    x < a        : y = ln(exp(a - x) - 1),         x = a - ln(1 + exp(y))
    lo < x < hi  : y = atanh((2x - lo - hi)/(hi - lo)), x = (lo + hi)/2 + (hi - lo)/2 tanh(y)
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Callable, List, Sequence

import numpy as np

from .parameters import DEFAULT_TIME_MEASURE, ModelParameters, valuation_datetime_of
from ...config.settings import DEFAULT_CURRENCY

# exp 오버플로 방지 경계
EXP_MAX = 50.0
TANH_MAX = 25.0


class LimitType(Enum):
    GREATER_THAN = 1
    LESS_THAN = -1


class ParameterLimitsTransform(ABC):
    """모형 공간 x ↔ 적합 공간 y 변환."""

    @abstractmethod
    def transform(self, x):
        ...

    @abstractmethod
    def inverse_transform(self, y):
        ...

    @abstractmethod
    def is_valid(self, x) -> bool:
        ...


class NullTransform(ParameterLimitsTransform):

    def transform(self, x):
        return x

    def inverse_transform(self, y):
        return y

    def is_valid(self, x) -> bool:
        return bool(np.all(np.isfinite(x)))


class SingleRangeLimitTransform(ParameterLimitsTransform):
    """한쪽 경계 (x > limit 또는 x < limit)."""

    def __init__(self, limit: float, limit_type: LimitType = LimitType.GREATER_THAN):
        self.limit = float(limit)
        self.sign = float(limit_type.value)

    def is_valid(self, x) -> bool:
        return bool(np.all(self.sign * (np.asarray(x, dtype=float) - self.limit) > 0.0))

    def transform(self, x):
        if not self.is_valid(x):
            raise ValueError(f"값 {x}이(가) 경계 {self.limit}를 벗어났습니다.")
        r = self.sign * (np.asarray(x, dtype=float) - self.limit)
        y = np.where(r > EXP_MAX, r, np.log(np.expm1(np.minimum(r, EXP_MAX))))
        return y if y.ndim else float(y)

    def inverse_transform(self, y):
        # softplus: ln(1 + e^y)
        x = self.limit + self.sign * np.logaddexp(0.0, np.asarray(y, dtype=float))
        return x if x.ndim else float(x)


class DoubleRangeLimitTransform(ParameterLimitsTransform):
    """양쪽 경계 lower < x < upper."""

    def __init__(self, lower: float, upper: float):
        if not lower < upper:
            raise ValueError("하한은 상한보다 작아야 합니다.")
        self.lower = float(lower)
        self.upper = float(upper)
        self.mid = 0.5 * (lower + upper)
        self.scale = 0.5 * (upper - lower)

    def is_valid(self, x) -> bool:
        x = np.asarray(x, dtype=float)
        return bool(np.all((x > self.lower) & (x < self.upper)))

    def transform(self, x):
        if not self.is_valid(x):
            raise ValueError(f"값 {x}이(가) 구간 ({self.lower}, {self.upper})을 벗어났습니다.")
        y = np.arctanh((np.asarray(x, dtype=float) - self.mid) / self.scale)
        y = np.clip(y, -TANH_MAX, TANH_MAX)
        return y if y.ndim else float(y)

    def inverse_transform(self, y):
        x = self.mid + self.scale * np.tanh(np.asarray(y, dtype=float))
        return x if x.ndim else float(x)


class UncoupledParameterTransforms:
    """자유 파라미터 부분벡터에 파라미터별 변환을 적용합니다."""

    def __init__(self, transforms: Sequence[ParameterLimitsTransform], fixed):
        fixed = np.asarray(fixed, dtype=bool)
        if len(transforms) != len(fixed):
            raise ValueError("변환 개수와 fixed 마스크 길이가 다릅니다.")
        self.free_transforms: List[ParameterLimitsTransform] = [
            t for t, is_fixed in zip(transforms, fixed) if not is_fixed
        ]

    @property
    def fitting_parameters_count(self) -> int:
        return len(self.free_transforms)

    def transform(self, free) -> np.ndarray:
        free = np.asarray(free, dtype=float)
        return np.array([t.transform(v) for t, v in zip(self.free_transforms, free)], dtype=float)

    def inverse_transform(self, fitting) -> np.ndarray:
        fitting = np.asarray(fitting, dtype=float)
        return np.array([t.inverse_transform(v) for t, v in zip(self.free_transforms, fitting)], dtype=float)


def expand_free_to_full(free, initial_guess, fixed) -> np.ndarray:
    """자유 파라미터를 전체 벡터에 채워 넣습니다. 고정 위치는 초기값 그대로."""
    full = np.array(initial_guess, dtype=float, copy=True)
    fixed = np.asarray(fixed, dtype=bool)
    free = np.asarray(free, dtype=float)
    if free.shape != (int(np.count_nonzero(~fixed)),):
        raise ValueError(f"자유 파라미터 길이 {free.shape}가 마스크와 맞지 않습니다.")
    full[~fixed] = free
    return full


def collapse_full_to_free(full, fixed) -> np.ndarray:
    """전체 벡터에서 자유 파라미터만 추출합니다."""
    full = np.asarray(full, dtype=float)
    fixed = np.asarray(fixed, dtype=bool)
    if full.shape != fixed.shape:
        raise ValueError("전체 벡터와 마스크의 길이가 다릅니다.")
    return full[~fixed].copy()


class ModelTemplate(ABC):
    """모형 파라미터 템플릿.

    하위 클래스는 ``parameters_count``, ``generate``, ``parameter_transforms``,
    ``parameter_constraints`` 를 구현합니다. 결합 제약이 필요한 경우
    ``joint_constraint`` 를 재정의합니다.
    """

    def __init__(self,
                 initial_guess,
                 fixed=None,
                 valuation_datetime=None,
                 time_measure=DEFAULT_TIME_MEASURE,
                 currency: str = DEFAULT_CURRENCY):
        initial_guess = np.array(initial_guess, dtype=float)
        initial_guess.setflags(write=False)
        if fixed is None:
            fixed = np.zeros(len(initial_guess), dtype=bool)
        fixed = np.array(fixed, dtype=bool)
        fixed.setflags(write=False)
        if len(fixed) != len(initial_guess):
            raise ValueError(
                f"fixed 길이({len(fixed)})와 initial_guess 길이({len(initial_guess)})가 다릅니다."
            )
        self._initial_guess = initial_guess
        self._fixed = fixed
        self.valuation_datetime = valuation_datetime_of(valuation_datetime) if valuation_datetime else None
        self.time_measure = time_measure
        self.currency = currency
        if self.parameters_count() != len(initial_guess):
            raise ValueError(
                f"initial_guess 길이({len(initial_guess)})가 파라미터 수({self.parameters_count()})와 다릅니다."
            )

    @abstractmethod
    def parameters_count(self) -> int:
        ...

    @abstractmethod
    def generate(self, parameters) -> ModelParameters:
        """전체 파라미터 벡터로부터 불변 모형 파라미터를 생성합니다."""

    @abstractmethod
    def parameter_transforms(self) -> List[ParameterLimitsTransform]:
        """전체 파라미터 순서의 파라미터별 변환."""

    @abstractmethod
    def parameter_constraints(self) -> List[Callable[[float], bool]]:
        """전체 파라미터 순서의 파라미터별 제약."""

    def joint_constraint(self, full: np.ndarray) -> bool:
        return True

    def initial_guess(self) -> np.ndarray:
        return self._initial_guess

    def fixed(self) -> np.ndarray:
        return self._fixed

    def free_parameters_count(self) -> int:
        return int(len(self._fixed) - np.count_nonzero(self._fixed))

    def expand(self, free) -> np.ndarray:
        return expand_free_to_full(free, self._initial_guess, self._fixed)

    def collapse(self, full) -> np.ndarray:
        return collapse_full_to_free(full, self._fixed)

    def constraints(self) -> Callable[[np.ndarray], bool]:
        """자유 부분벡터에 대한 제약 술어."""
        free_checks = [c for c, is_fixed in zip(self.parameter_constraints(), self._fixed) if not is_fixed]

        def predicate(free) -> bool:
            free = np.asarray(free, dtype=float)
            if not np.all(np.isfinite(free)):
                return False
            if not all(check(v) for check, v in zip(free_checks, free)):
                return False
            return bool(self.joint_constraint(self.expand(free)))

        return predicate

    def transform(self) -> UncoupledParameterTransforms:
        return UncoupledParameterTransforms(self.parameter_transforms(), self._fixed)

    def __repr__(self):
        return (f"{type(self).__name__}(initial_guess={self._initial_guess.tolist()}, "
                f"fixed={self._fixed.tolist()})")
