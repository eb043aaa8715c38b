# -*- coding: utf-8 -*-
"""
G2++ 금리모형
=============

G2++ 모형은 두 개의 Ornstein-Uhlenbeck 프로세스 x(t), y(t)와 드리프트 함수
φ(t)로 단기 금리를 나타냅니다::

    r(t) = x(t) + y(t) + φ(t)
    dx = -a x dt + σ dW₁
    dy = -b y dt + η dW₂
    dW₁·dW₂ = ρ dt

여기에서 a, b는 평균회귀 속도, σ, η는 변동성, ρ는 상관계수입니다.

함수 설명
---------

* ``B``: Brigo & Mercurio 공식의 B 함수.
* ``calculate_V``: V(t,T) 보조 함수. 할인계수의 분산 항에 사용됩니다.
* ``factor_covariance``: [s, t] 구간에서 (x, y)의 조건부 공분산 행렬.
* ``G2ppParameters`` / ``G2ppTemplate``: 보정을 위한 파라미터와 템플릿.
"""

from dataclasses import dataclass
from datetime import datetime
from functools import lru_cache

import numpy as np

from .parameters import DEFAULT_TIME_MEASURE, ModelParameters, ScaledSecondTime, valuation_datetime_of
from .template import (
    DoubleRangeLimitTransform,
    LimitType,
    ModelTemplate,
    SingleRangeLimitTransform,
)
from ...config.settings import DEFAULT_CURRENCY, LIMIT_0, LIMIT_A

PARAMETER_NAMES = ("a", "b", "sigma", "eta", "rho")


@dataclass(frozen=True)
class G2ppParameters(ModelParameters):
    """파라미터 벡터 순서: [a, b, sigma, eta, rho]."""

    a: float
    b: float
    sigma: float
    eta: float
    rho: float
    valuation_datetime: datetime
    time_measure: ScaledSecondTime = DEFAULT_TIME_MEASURE
    currency: str = DEFAULT_CURRENCY

    @classmethod
    def from_dict(cls, params: dict, valuation, **kwargs) -> "G2ppParameters":
        return cls(*(float(params[name]) for name in PARAMETER_NAMES),
                   valuation_datetime=valuation_datetime_of(valuation), **kwargs)

    @property
    def parameters_count(self) -> int:
        return 5

    def parameter_array(self) -> np.ndarray:
        return np.array([self.a, self.b, self.sigma, self.eta, self.rho])


@lru_cache(maxsize=2048)
def B(z: float, t: float, T: float) -> float:
    """Brigo & Mercurio 공식의 B 함수: B_z(t,T) = (1 - e^{-z(T-t)})/z"""
    if abs(z) < 1e-12:
        return T - t
    return float((1 - np.exp(-z * (T - t))) / z)


@lru_cache(maxsize=4096)
def _calculate_V_cached(t: float, T: float,
                        a: float, b: float, sigma: float, eta: float, rho: float) -> float:
    """Brigo & Mercurio의 V(t,T) 계산 (캐시용, 해시가능 인자만 받음)."""
    T_m_t = T - t

    if abs(a) < 1e-9:
        term1 = (sigma**2 / 2) * T_m_t**2
    else:
        term1 = (sigma**2 / a**2) * (T_m_t + (2 / a) * np.exp(-a * T_m_t)
                                     - (1 / (2 * a)) * np.exp(-2 * a * T_m_t) - 3 / (2 * a))

    if abs(b) < 1e-9:
        term2 = (eta**2 / 2) * T_m_t**2
    else:
        term2 = (eta**2 / b**2) * (T_m_t + (2 / b) * np.exp(-b * T_m_t)
                                   - (1 / (2 * b)) * np.exp(-2 * b * T_m_t) - 3 / (2 * b))

    term3 = (2 * rho * sigma * eta / (a * b)) * (T_m_t + (np.exp(-a * T_m_t) - 1) / a
                                                 + (np.exp(-b * T_m_t) - 1) / b
                                                 - (np.exp(-(a + b) * T_m_t) - 1) / (a + b))

    return float(term1 + term2 + term3)


def calculate_V(t: float, T: float, params: G2ppParameters) -> float:
    """파라미터 객체를 캐시 가능한 튜플로 풀어 V(t,T)를 계산합니다."""
    return _calculate_V_cached(float(t), float(T), params.a, params.b, params.sigma, params.eta, params.rho)


def factor_covariance(params: G2ppParameters, dt: float) -> np.ndarray:
    """길이 dt 구간에서 (x, y) 조건부 공분산 (정확한 OU 전이)."""
    a, b = params.a, params.b
    var_x = params.sigma**2 * (1.0 - np.exp(-2.0 * a * dt)) / (2.0 * a)
    var_y = params.eta**2 * (1.0 - np.exp(-2.0 * b * dt)) / (2.0 * b)
    cov = params.rho * params.sigma * params.eta * (1.0 - np.exp(-(a + b) * dt)) / (a + b)
    return np.array([[var_x, cov], [cov, var_y]])


class G2ppTemplate(ModelTemplate):
    """G2++ 상수 파라미터 템플릿."""

    def parameters_count(self) -> int:
        return 5

    def generate(self, parameters) -> G2ppParameters:
        a, b, sigma, eta, rho = (float(p) for p in parameters)
        return G2ppParameters(a, b, sigma, eta, rho, self.valuation_datetime,
                              time_measure=self.time_measure, currency=self.currency)

    def parameter_transforms(self):
        return [
            SingleRangeLimitTransform(LIMIT_A, LimitType.GREATER_THAN),
            SingleRangeLimitTransform(LIMIT_A, LimitType.GREATER_THAN),
            SingleRangeLimitTransform(LIMIT_0, LimitType.GREATER_THAN),
            SingleRangeLimitTransform(LIMIT_0, LimitType.GREATER_THAN),
            DoubleRangeLimitTransform(-1.0, 1.0),
        ]

    def parameter_constraints(self):
        positive = lambda p: p > 0.0
        return [positive, positive, positive, positive, lambda p: abs(p) < 1.0]
