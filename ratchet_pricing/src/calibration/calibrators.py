# -*- coding: utf-8 -*-
"""
모형 보정기
===========

두 보정기 모두 ``ModelTemplate`` 과 외부 가격결정 함수
``pricer(instrument, market, model_parameters) -> float`` 를 사용합니다.
프리미엄이 상품에 포함되어 있으므로 목표 가격은 모든 상품에 대해 0 입니다.

* ``RootFindingCalibrator.calibrate_exact``: 상품 수 = 자유 파라미터 수.
  scipy ``root`` (hybr, Broyden 갱신) 근 찾기로 모든 상품의 모형 가격을 0 으로 맞춥니다.
* ``LeastSquaresCalibrator.calibrate_least_squares``: 상품 수 제한 없음.
  변환된 공간에서 scipy ``leastsq`` (Levenberg-Marquardt)로 가중 잔차 제곱합을 최소화합니다.
"""

import logging
from typing import Callable, Optional, Sequence

import numpy as np

from .differentiation import FiniteDifferenceConfig, FiniteDifferenceJacobian
from .least_squares import LeastSquareConfig, LeastSquareResults, LevenbergMarquardtSolver
from .root_finder import BroydenVectorRootFinder, RootFinderConfig
from ..errors import DimensionMismatchError
from ..models.parameters import ModelParameters
from ..models.template import ModelTemplate

logger = logging.getLogger(__name__)

Pricer = Callable[[object, object, ModelParameters], float]


def _price_vector(template: ModelTemplate, instruments: Sequence, market, pricer: Pricer):
    """자유 파라미터 → 상품별 모형 가격 벡터 함수."""

    def objective(free: np.ndarray) -> np.ndarray:
        model = template.generate(template.expand(free))
        return np.array([pricer(instrument, market, model) for instrument in instruments], dtype=float)

    return objective


class RootFindingCalibrator:

    def __init__(self,
                 template: ModelTemplate,
                 config: Optional[RootFinderConfig] = None,
                 jacobian_config: Optional[FiniteDifferenceConfig] = None):
        self.template = template
        self.root_finder = BroydenVectorRootFinder(config, FiniteDifferenceJacobian(jacobian_config))

    def calibrate_exact(self, instruments: Sequence, market, pricer: Pricer) -> ModelParameters:
        template = self.template
        free_count = template.free_parameters_count()
        if len(instruments) != free_count:
            raise DimensionMismatchError(len(instruments), free_count)
        logger.info("정확 보정 시작: %s, 상품 %d개", type(template).__name__, len(instruments))

        objective = _price_vector(template, instruments, market, pricer)
        start = template.collapse(template.initial_guess())
        root = self.root_finder.find_root(objective, start)

        logger.info("정확 보정 완료: 스텝 %d, 자유 파라미터 %s", self.root_finder.steps, root.tolist())
        return template.generate(template.expand(root))


class LeastSquaresCalibrator:

    def __init__(self,
                 template: ModelTemplate,
                 config: Optional[LeastSquareConfig] = None,
                 jacobian_config: Optional[FiniteDifferenceConfig] = None):
        self.template = template
        self.solver = LevenbergMarquardtSolver(config, FiniteDifferenceJacobian(jacobian_config))
        self.last_results: Optional[LeastSquareResults] = None

    def calibrate_least_squares(self, instruments: Sequence, market, pricer: Pricer,
                                weights=None) -> ModelParameters:
        template = self.template
        if len(instruments) == 0:
            raise ValueError("보정할 상품이 없습니다.")
        sigma = np.ones(len(instruments)) if weights is None else np.asarray(weights, dtype=float)
        logger.info("최소제곱 보정 시작: %s, 상품 %d개, 자유 파라미터 %d개",
                    type(template).__name__, len(instruments), template.free_parameters_count())

        objective = _price_vector(template, instruments, market, pricer)
        start = template.collapse(template.initial_guess())
        results = self.solver.solve(
            objective,
            observed=np.zeros(len(instruments)),
            sigma=sigma,
            start=start,
            transform=template.transform(),
            constraint=template.constraints(),
        )
        self.last_results = results

        logger.info("최소제곱 보정 완료: 반복 %d, chi2 = %.6e", results.iterations, results.chi_square)
        return template.generate(template.expand(results.fit_parameters))
