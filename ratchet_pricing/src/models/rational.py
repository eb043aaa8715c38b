# -*- coding: utf-8 -*-
"""
Rational 1팩터 모형 (Hull-White 형태 b0)
=======================================

Crepey, Macrina, Nguyen, Skovmand (2015)의 rational multi-curve 모형의
단순화된 1팩터 버전입니다. 할인계수는::

    P(t,u) = (P(0,u) + b0(u) A(t)) / (P(0,t) + b0(t) A(t))
    A(t)   = exp(a √t X - a² t / 2) - 1

이며 b0 는 Hull-White 형태를 가집니다::

    b0(u) = (b00 + η/(a κ) (1 - e^{-κ u})) P(0,u)
    b1(s, e) = (b0(s) - b0(e)) / δ
"""

from dataclasses import dataclass
from datetime import datetime

import numpy as np

from .parameters import DEFAULT_TIME_MEASURE, ModelParameters, ScaledSecondTime
from .template import (
    DoubleRangeLimitTransform,
    LimitType,
    ModelTemplate,
    SingleRangeLimitTransform,
)
from ...config.settings import DEFAULT_CURRENCY, LIMIT_0, LIMIT_A


@dataclass(frozen=True, eq=False)
class RationalOneFactorParameters(ModelParameters):
    """파라미터 벡터 순서: [a, b00, eta, kappa]."""

    a: float
    b00: float
    eta: float
    kappa: float
    rates: object
    valuation_datetime: datetime
    time_measure: ScaledSecondTime = DEFAULT_TIME_MEASURE
    currency: str = DEFAULT_CURRENCY

    @property
    def parameters_count(self) -> int:
        return 4

    def parameter_array(self) -> np.ndarray:
        return np.array([self.a, self.b00, self.eta, self.kappa])

    def b0(self, value) -> float:
        u = self.relative_time(value)
        shape = self.b00 + self.eta / (self.a * self.kappa) * (1.0 - np.exp(-self.kappa * u))
        return float(shape * self.rates.discount_factor(value))

    def b1(self, start, end, accrual: float) -> float:
        return (self.b0(start) - self.b0(end)) / accrual


class RationalOneFactorTemplate(ModelTemplate):

    def __init__(self, rates, initial_guess, fixed=None, time_measure=DEFAULT_TIME_MEASURE):
        self.rates = rates
        super().__init__(initial_guess, fixed, rates.valuation_date, time_measure, rates.currency)

    def parameters_count(self) -> int:
        return 4

    def generate(self, parameters) -> RationalOneFactorParameters:
        a, b00, eta, kappa = (float(p) for p in parameters)
        return RationalOneFactorParameters(a, b00, eta, kappa, self.rates, self.valuation_datetime,
                                           time_measure=self.time_measure, currency=self.currency)

    def parameter_transforms(self):
        return [
            SingleRangeLimitTransform(LIMIT_A, LimitType.GREATER_THAN),
            DoubleRangeLimitTransform(0.0, 1.0),
            SingleRangeLimitTransform(LIMIT_0, LimitType.GREATER_THAN),
            SingleRangeLimitTransform(LIMIT_0, LimitType.GREATER_THAN),
        ]

    def parameter_constraints(self):
        return [
            lambda p: p > 0.0,
            lambda p: 0.0 < p < 1.0,
            lambda p: p > 0.0,
            lambda p: p > 0.0,
        ]

    def joint_constraint(self, full) -> bool:
        # 장기 b0 / P(0,u) 가 1 미만이어야 할인계수가 양수
        a, b00, eta, kappa = full
        return b00 + eta / (a * kappa) < 1.0
