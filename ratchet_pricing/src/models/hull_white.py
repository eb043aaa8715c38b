# -*- coding: utf-8 -*-
"""
Hull-White 1팩터 모형 (구간별 상수 변동성)
==========================================

단기 금리 r(t) = x(t) + φ(t), dx = -a x dt + σ(t) dW 이며 σ(t)는
``volatility_time`` 경계 사이에서 상수입니다.

함수 설명
---------

* ``alpha``: 할인채 비율의 로그 분산 제곱근. 스왑션/캡 공식에 사용됩니다::

      α(θ0, θ1, t, u) = (e^{-a t} - e^{-a u}) sqrt( Σ σ_i² (e^{2a s_{i+1}} - e^{2a s_i}) / (2a³) )

* ``short_rate_variance``: 구간 [s, t]에서 x의 조건부 분산::

      Var = e^{-2a t} Σ σ_i² (e^{2a s_{i+1}} - e^{2a s_i}) / (2a)

* ``HullWhiteOneFactorTemplate``: 평균회귀와 변동성들을 보정하기 위한 템플릿.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Tuple

import numpy as np

from .parameters import (
    DEFAULT_TIME_MEASURE,
    ModelParameters,
    ScaledSecondTime,
    frozen_array,
    valuation_datetime_of,
)
from .template import LimitType, ModelTemplate, SingleRangeLimitTransform
from ...config.settings import DEFAULT_CURRENCY, LIMIT_0, VOLATILITY_TIME_INFINITY


@dataclass(frozen=True, eq=False)
class HullWhiteOneFactorParameters(ModelParameters):
    """파라미터 벡터 순서: [a, σ_0, ..., σ_{n-1}]."""

    mean_reversion: float
    volatility: np.ndarray
    volatility_time: np.ndarray
    valuation_datetime: datetime
    time_measure: ScaledSecondTime = DEFAULT_TIME_MEASURE
    currency: str = DEFAULT_CURRENCY

    def __post_init__(self):
        object.__setattr__(self, "volatility", frozen_array(self.volatility))
        object.__setattr__(self, "volatility_time", frozen_array(self.volatility_time))
        if len(self.volatility_time) != len(self.volatility) + 1:
            raise ValueError("volatility_time 길이는 volatility 길이 + 1 이어야 합니다.")
        if np.any(np.diff(self.volatility_time) <= 0.0):
            raise ValueError("volatility_time은 증가해야 합니다.")

    @classmethod
    def of(cls, mean_reversion, volatility, volatility_time_inner, valuation, **kwargs):
        """내부 경계 시점에 0과 무한대 시점을 덧붙여 생성합니다."""
        times = np.concatenate(([0.0], np.asarray(volatility_time_inner, dtype=float),
                                [VOLATILITY_TIME_INFINITY]))
        return cls(float(mean_reversion), volatility, times, valuation_datetime_of(valuation), **kwargs)

    @property
    def parameters_count(self) -> int:
        return 1 + len(self.volatility)

    def parameter_array(self) -> np.ndarray:
        return np.concatenate(([self.mean_reversion], self.volatility))


def _volatility_pieces(params: HullWhiteOneFactorParameters,
                       start: float,
                       end: float) -> Tuple[np.ndarray, np.ndarray]:
    """[start, end]를 변동성 경계로 나눈 시점 s와 구간별 σ."""
    if end <= start:
        return np.array([start]), np.array([])
    vt = params.volatility_time
    i0 = int(np.searchsorted(vt, start, side="right")) - 1
    i1 = int(np.searchsorted(vt, end, side="left"))
    s = np.concatenate(([start], vt[i0 + 1:i1], [end]))
    return s, params.volatility[i0:i1]


def _integrated_variance(params: HullWhiteOneFactorParameters, start: float, end: float) -> float:
    """Σ σ_i² (e^{2a s_{i+1}} - e^{2a s_i})"""
    s, vols = _volatility_pieces(params, start, end)
    if len(vols) == 0:
        return 0.0
    exp2as = np.exp(2.0 * params.mean_reversion * s)
    return float(np.sum(vols ** 2 * np.diff(exp2as)))


def alpha(params: HullWhiteOneFactorParameters,
          start_expiry: float,
          end_expiry: float,
          numeraire_time: float,
          bond_maturity: float) -> float:
    a = params.mean_reversion
    factor1 = np.exp(-a * numeraire_time) - np.exp(-a * bond_maturity)
    factor2 = _integrated_variance(params, start_expiry, end_expiry)
    return float(factor1 * np.sqrt(factor2 / (2.0 * a ** 3)))


def short_rate_variance(params: HullWhiteOneFactorParameters, start_time: float, end_time: float) -> float:
    a = params.mean_reversion
    return float(np.exp(-2.0 * a * end_time) * _integrated_variance(params, start_time, end_time) / (2.0 * a))


class HullWhiteOneFactorTemplate(ModelTemplate):
    """파라미터 [a, σ_0..σ_n]; 내부 변동성 경계 ``volatility_times`` (n개)."""

    def __init__(self, volatility_times, initial_guess, fixed=None, valuation_datetime=None,
                 time_measure=DEFAULT_TIME_MEASURE, currency=DEFAULT_CURRENCY):
        self.volatility_times = np.asarray(volatility_times, dtype=float)
        super().__init__(initial_guess, fixed, valuation_datetime, time_measure, currency)

    def parameters_count(self) -> int:
        return len(self.volatility_times) + 2

    def generate(self, parameters) -> HullWhiteOneFactorParameters:
        parameters = np.asarray(parameters, dtype=float)
        return HullWhiteOneFactorParameters.of(
            parameters[0], parameters[1:], self.volatility_times, self.valuation_datetime,
            time_measure=self.time_measure, currency=self.currency)

    def parameter_transforms(self):
        return [SingleRangeLimitTransform(LIMIT_0, LimitType.GREATER_THAN)
                for _ in range(self.parameters_count())]

    def parameter_constraints(self):
        return [lambda p: p > 0.0 for _ in range(self.parameters_count())]
