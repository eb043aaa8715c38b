# -*- coding: utf-8 -*-
"""
변위 확산 LMM (결정적 스프레드)
===============================

할인(OIS) 선도금리 f_i 를 Ibor 기간 [t_i, t_{i+1}] 마다 모형화하는
Libor Market Model 입니다. 각 금리는 변위 a_i 만큼 이동한 로그정규 확산을
따르며 변동성은 γ_i · exp(κ t) 입니다.

Ibor 금리는 결정적 곱셈 스프레드 β_i 로 할인 선도금리에서 얻습니다::

    1 + δ_i L_i = β_i (1 + δ_i f_i)

빌더
----

* ``lmm_hw``: Hull-White 1팩터와 동등한 LMM (변위 1/δ_i).
* ``lmm_2_angle``: 각도 형태의 2팩터 변동성 구조.
* ``LmmHullWhiteShapedTemplate``: [κ, σ] 두 파라미터로 ``lmm_hw`` 를 생성하는 템플릿.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Sequence

import numpy as np

from .parameters import (
    DEFAULT_TIME_MEASURE,
    ModelParameters,
    ScaledSecondTime,
    frozen_array,
    valuation_datetime_of,
)
from .template import LimitType, ModelTemplate, SingleRangeLimitTransform
from ...config.settings import DEFAULT_CURRENCY, LIMIT_0, LMM_TIME_TOLERANCE


@dataclass(frozen=True, eq=False)
class LiborMarketModelParameters(ModelParameters):
    """LMM 파라미터. 기간 수 N, 팩터 수 m.

    * ``ibor_times``: N+1 개의 Ibor 시점
    * ``accrual_factors``, ``multiplicative_spreads``, ``displacements``: N 개
    * ``volatilities``: N x m 행렬
    """

    ibor_times: np.ndarray
    accrual_factors: np.ndarray
    multiplicative_spreads: np.ndarray
    displacements: np.ndarray
    volatilities: np.ndarray
    mean_reversion: float
    valuation_datetime: datetime
    time_tolerance: float = LMM_TIME_TOLERANCE
    time_measure: ScaledSecondTime = DEFAULT_TIME_MEASURE
    currency: str = DEFAULT_CURRENCY

    def __post_init__(self):
        for name in ("ibor_times", "accrual_factors", "multiplicative_spreads", "displacements"):
            object.__setattr__(self, name, frozen_array(getattr(self, name)))
        object.__setattr__(self, "volatilities", frozen_array(self.volatilities, ndim=2))
        n = len(self.accrual_factors)
        if len(self.ibor_times) != n + 1:
            raise ValueError("ibor_times 길이는 기간 수 + 1 이어야 합니다.")
        if len(self.multiplicative_spreads) != n or len(self.displacements) != n:
            raise ValueError("스프레드와 변위의 길이는 기간 수와 같아야 합니다.")
        if self.volatilities.shape[0] != n:
            raise ValueError(f"변동성 행렬의 행 수({self.volatilities.shape[0]})가 기간 수({n})와 다릅니다.")
        if np.any(np.diff(self.ibor_times) <= 0.0):
            raise ValueError("ibor_times는 증가해야 합니다.")

    @property
    def ibor_periods_count(self) -> int:
        return len(self.accrual_factors)

    @property
    def factor_count(self) -> int:
        return self.volatilities.shape[1]

    @property
    def parameters_count(self) -> int:
        return self.volatilities.size + len(self.displacements)

    def parameter_array(self) -> np.ndarray:
        return np.concatenate((self.volatilities.ravel(), self.displacements))

    def ibor_time_index(self, times) -> np.ndarray:
        """각 시점에 해당하는 Ibor 기간 인덱스 (허용오차 내 일치 포함)."""
        times = np.asarray(times, dtype=float)
        return np.searchsorted(self.ibor_times, times - self.time_tolerance, side="left")

    def ibor_rate_from_dsc_forward(self, forward, index):
        """할인 선도금리에서 Ibor 금리: (β(1 + δ f) - 1)/δ"""
        delta = self.accrual_factors[index]
        return (self.multiplicative_spreads[index] * (1.0 + delta * forward) - 1.0) / delta


def _lmm_grid(ibor_dates: Sequence, rates):
    times = np.array([rates.relative_time(d) for d in ibor_dates])
    accruals = np.diff(times)
    spreads = np.array([rates.ibor_spread(ibor_dates[i], ibor_dates[i + 1], accruals[i])
                        for i in range(len(accruals))])
    return times, accruals, spreads


def lmm_hw(mean_reversion: float,
           sigma: float,
           ibor_dates: Sequence,
           rates,
           time_measure=DEFAULT_TIME_MEASURE) -> LiborMarketModelParameters:
    """Hull-White(κ, σ)와 동등한 1팩터 LMM을 만듭니다."""
    times, accruals, spreads = _lmm_grid(ibor_dates, rates)
    a = mean_reversion
    gamma = sigma / a * (np.exp(-a * times[:-1]) - np.exp(-a * times[1:]))
    return LiborMarketModelParameters(
        ibor_times=times,
        accrual_factors=accruals,
        multiplicative_spreads=spreads,
        displacements=1.0 / accruals,
        volatilities=gamma[:, np.newaxis],
        mean_reversion=a,
        valuation_datetime=valuation_datetime_of(rates.valuation_date),
        time_measure=time_measure,
        currency=rates.currency,
    )


def lmm_2_angle(mean_reversion: float,
                vol_level: float,
                angle: float,
                vol_angle: float,
                displacement: float,
                ibor_dates: Sequence,
                rates,
                time_measure=DEFAULT_TIME_MEASURE) -> LiborMarketModelParameters:
    """2팩터 각도 변동성 구조의 LMM."""
    times, accruals, spreads = _lmm_grid(ibor_dates, rates)
    theta = times[:-1] / 20.0 * angle
    vols = np.column_stack((vol_level + vol_angle * np.cos(theta),
                            vol_level + vol_angle * np.sin(theta)))
    return LiborMarketModelParameters(
        ibor_times=times,
        accrual_factors=accruals,
        multiplicative_spreads=spreads,
        displacements=np.full(len(accruals), float(displacement)),
        volatilities=vols,
        mean_reversion=mean_reversion,
        valuation_datetime=valuation_datetime_of(rates.valuation_date),
        time_measure=time_measure,
        currency=rates.currency,
    )


class LmmHullWhiteShapedTemplate(ModelTemplate):
    """파라미터 [κ, σ]; ``lmm_hw`` 로 LMM 파라미터를 생성합니다."""

    def __init__(self, ibor_dates, rates, initial_guess, fixed=None, time_measure=DEFAULT_TIME_MEASURE):
        self.ibor_dates = list(ibor_dates)
        self.rates = rates
        super().__init__(initial_guess, fixed, rates.valuation_date, time_measure, rates.currency)

    def parameters_count(self) -> int:
        return 2

    def generate(self, parameters) -> LiborMarketModelParameters:
        return lmm_hw(float(parameters[0]), float(parameters[1]), self.ibor_dates, self.rates,
                      time_measure=self.time_measure)

    def parameter_transforms(self):
        return [SingleRangeLimitTransform(LIMIT_0, LimitType.GREATER_THAN),
                SingleRangeLimitTransform(LIMIT_0, LimitType.GREATER_THAN)]

    def parameter_constraints(self):
        return [lambda p: p > 0.0, lambda p: p > 0.0]
