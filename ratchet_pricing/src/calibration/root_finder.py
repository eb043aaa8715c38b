# -*- coding: utf-8 -*-
"""
Broyden 벡터 근 찾기
====================

정사각 비선형 연립방정식 F(x) = 0 을 ``scipy.optimize.root`` 의 ``hybr``
(MINPACK hybrj: Powell dogleg 신뢰영역 + Broyden 랭크-1 야코비안 갱신)로 풉니다.
야코비안은 ``FiniteDifferenceJacobian`` 을 명시적 ``jac`` 로 넘깁니다.

1. 시작점에서 ||F||₂ < abs 이면 그대로 반환
2. 시작점 야코비안의 특이값 검사 (특이하면 SingularJacobianError)
3. hybr 실행 (xtol = rel, 함수 평가 상한 = max_steps)
4. ||F||₂ < abs 이면 수렴. 아니면 새 야코비안으로 재시작하며, 한 라운드에서
   ||F|| 가 절반 이하로 줄지 않았으면 NonConvergenceError

hybr 는 ||F|| 를 줄이는 스텝만 채택합니다.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

import numpy as np
from scipy import optimize

from .differentiation import FiniteDifferenceJacobian, check_jacobian
from ..errors import NonConvergenceError, NumericalDomainError
from ...config.settings import (
    ROOT_STEP_MAX,
    ROOT_TOLERANCE_ABS,
    ROOT_TOLERANCE_REL,
    SINGULAR_VALUE_CUTOFF,
)

logger = logging.getLogger(__name__)

# 재시작은 직전 라운드가 ||F|| 를 이 비율 이하로 줄였을 때만
RESTART_REDUCTION = 0.5


@dataclass(frozen=True)
class RootFinderConfig:
    absolute_tolerance: float = ROOT_TOLERANCE_ABS
    relative_tolerance: float = ROOT_TOLERANCE_REL
    max_steps: int = ROOT_STEP_MAX
    singular_value_cutoff: float = SINGULAR_VALUE_CUTOFF


class BroydenVectorRootFinder:

    def __init__(self, config: Optional[RootFinderConfig] = None,
                 jacobian: Optional[FiniteDifferenceJacobian] = None):
        self.config = config or RootFinderConfig()
        self.jacobian = jacobian or FiniteDifferenceJacobian()
        self.steps = 0

    @staticmethod
    def _checked(function: Callable) -> Callable:
        def evaluate(x):
            fx = np.asarray(function(x), dtype=float)
            if not np.all(np.isfinite(fx)):
                raise NumericalDomainError(f"근 찾기 중 유한하지 않은 함수 값: {fx} (x = {x})")
            return fx
        return evaluate

    def find_root(self, function: Callable[[np.ndarray], np.ndarray], start) -> np.ndarray:
        cfg = self.config
        evaluate = self._checked(function)
        x = np.array(start, dtype=float)
        fx = evaluate(x)
        if fx.shape != x.shape:
            raise ValueError(f"함수 값의 차원 {fx.shape}이 변수 차원 {x.shape}과 다릅니다.")
        norm = float(np.linalg.norm(fx))
        self.steps = 0
        if norm < cfg.absolute_tolerance:
            return x

        cache = {"x": x.copy(), "jac": self.jacobian(evaluate, x, fx)}
        check_jacobian(cache["jac"], cfg.singular_value_cutoff)

        def jacobian(point):
            if not np.array_equal(point, cache["x"]):
                cache["x"], cache["jac"] = np.array(point, dtype=float), self.jacobian(evaluate, point)
            return cache["jac"]

        while True:
            remaining = cfg.max_steps - self.steps
            if remaining <= 0:
                raise NonConvergenceError(f"근 찾기가 수렴하지 않았습니다 (|F| = {norm:.6e})", self.steps)
            solution = optimize.root(evaluate, x, jac=jacobian, method="hybr",
                                     options={"xtol": cfg.relative_tolerance, "maxfev": remaining})
            self.steps += int(solution.nfev)
            new_norm = float(np.linalg.norm(solution.fun))
            logger.debug("hybr 라운드 종료: |F| = %.6e, 평가 %d회, 상태 %d (%s)",
                         new_norm, solution.nfev, solution.status, solution.message)
            if new_norm < cfg.absolute_tolerance:
                return np.asarray(solution.x, dtype=float)
            if new_norm > RESTART_REDUCTION * norm:
                raise NonConvergenceError(
                    f"근 찾기가 더 진행되지 않습니다 (|F| = {new_norm:.6e}): {solution.message}", self.steps)
            x, norm = np.asarray(solution.x, dtype=float), new_norm
