# -*- coding: utf-8 -*-
"""
Levenberg-Marquardt 비선형 최소제곱
===================================

가중 잔차 제곱합 χ² = Σ ((model_i - observed_i) / σ_i)² 을
``scipy.optimize.leastsq`` (MINPACK lmder)로 최소화합니다. 야코비안은
``FiniteDifferenceJacobian`` 을 ``Dfun`` 으로 넘깁니다.

* 탐색은 파라미터 변환 후의 제약 없는 공간(적합 공간)에서 진행합니다.
* 첫 스텝은 모형 공간에서 파라미터별로 |Δx_i| ≤ max_jump_ratio·|x_i| (기본 5%)
  를 넘지 않습니다. 이 한계를 적합 공간 반폭 r_i 로 옮겨 MINPACK 의 스케일
  ``diag = 1/r`` 과 초기 반경 ``factor`` 로 지정합니다.
* χ² 를 감소시키는 스텝만 채택하므로 χ² 이력(야코비안 평가 지점)은 단조 감소입니다.
* 제약 술어를 위반하는 시도점은 큰 잔차를 돌려받아 기각됩니다.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional, Tuple

import numpy as np
from scipy import optimize

from .differentiation import FiniteDifferenceJacobian, check_jacobian
from ..errors import NonConvergenceError
from ...config.settings import (
    LEAST_SQUARE_MAX_JUMP_RATIO,
    LEAST_SQUARE_STEP_MAX,
    LEAST_SQUARE_TOLERANCE_ABS,
    LEAST_SQUARE_TOLERANCE_REL,
    SINGULAR_VALUE_CUTOFF,
)

logger = logging.getLogger(__name__)

CONSTRAINT_PENALTY = 1.0E10
# lmpar 는 ||D p|| 가 반경의 110% 인 스텝까지 받아들임
INITIAL_SCALED_RADIUS = 0.9
# MINPACK 수렴(1-4)과 허용오차 과소(6-8: 더 줄일 수 없음)
ACCEPTED_STATUS = (1, 2, 3, 4, 6, 7, 8)
MAX_FEV_STATUS = 5


@dataclass(frozen=True)
class LeastSquareConfig:
    absolute_tolerance: float = LEAST_SQUARE_TOLERANCE_ABS
    relative_tolerance: float = LEAST_SQUARE_TOLERANCE_REL
    max_steps: int = LEAST_SQUARE_STEP_MAX
    max_jump_ratio: float = LEAST_SQUARE_MAX_JUMP_RATIO
    singular_value_cutoff: float = SINGULAR_VALUE_CUTOFF


@dataclass(frozen=True)
class LeastSquareResults:
    """최소제곱 결과. ``fit_parameters`` 는 모형 공간의 자유 파라미터."""

    fit_parameters: np.ndarray
    fitting_parameters: np.ndarray
    chi_square: float
    chi_square_history: Tuple[float, ...] = field(default_factory=tuple)
    iterations: int = 0


def fitting_step_bounds(transform, start, ratio: float) -> np.ndarray:
    """모형 공간 한계 |Δx_i| ≤ ratio·|x_i| (x_i = 0 이면 ratio) 에 대응하는 적합 공간 반폭.

    변환은 단조이므로 x_i ± b_i 의 상(image)까지 거리 중 작은 쪽을 택하면
    |Δy_i| ≤ r_i 인 모든 스텝이 모형 공간 한계를 지킵니다. x_i ± b_i 가
    정의역 밖이면 b_i 를 절반씩 줄입니다.
    """
    start = np.asarray(start, dtype=float)
    bounds = ratio * np.where(start != 0.0, np.abs(start), 1.0)
    if transform is None:
        return bounds
    widths = np.empty_like(bounds)
    for i, (t, x, b) in enumerate(zip(transform.free_transforms, start, bounds)):
        y = t.transform(x)
        candidates = []
        while not candidates and x + b != x:
            candidates = [abs(t.transform(x + s) - y) for s in (b, -b) if t.is_valid(x + s)]
            b *= 0.5
        if not candidates or min(candidates) <= 0.0:
            raise ValueError(f"시작점 {x} 이(가) 정의역 경계에 너무 가깝습니다.")
        widths[i] = min(candidates)
    return widths


class LevenbergMarquardtSolver:

    def __init__(self, config: Optional[LeastSquareConfig] = None,
                 jacobian: Optional[FiniteDifferenceJacobian] = None):
        self.config = config or LeastSquareConfig()
        self.jacobian = jacobian or FiniteDifferenceJacobian()

    def solve(self,
              function: Callable[[np.ndarray], np.ndarray],
              observed,
              sigma,
              start,
              transform=None,
              constraint: Optional[Callable[[np.ndarray], bool]] = None) -> LeastSquareResults:
        """``function`` 은 모형 공간 자유 파라미터 → 모형 값 벡터.

        ``transform`` 은 ``free_transforms`` 를 가진 파라미터별 변환
        (``UncoupledParameterTransforms``) 이며 None 이면 모형 공간에서 풉니다.
        """
        cfg = self.config
        observed = np.asarray(observed, dtype=float)
        sigma = np.asarray(sigma, dtype=float)
        if observed.shape != sigma.shape:
            raise ValueError("observed와 sigma의 길이가 다릅니다.")
        if np.any(sigma <= 0.0):
            raise ValueError("sigma는 양수여야 합니다.")

        to_model = transform.inverse_transform if transform is not None else (lambda y: np.asarray(y))
        start = np.asarray(start, dtype=float)
        # MINPACK 은 잔차 수 ≥ 파라미터 수를 요구: 모자라면 0 잔차로 채움
        count = max(len(observed), len(start))

        def residual(y: np.ndarray) -> np.ndarray:
            x = to_model(y)
            if constraint is not None and not constraint(x):
                return np.full(count, CONSTRAINT_PENALTY)
            r = np.zeros(count)
            r[:len(observed)] = (np.asarray(function(x), dtype=float) - observed) / sigma
            if not np.all(np.isfinite(r)):
                return np.full(count, CONSTRAINT_PENALTY)
            return r

        y0 = transform.transform(start) if transform is not None else start.copy()
        r0 = residual(y0)
        chi2 = float(r0 @ r0)
        history = [chi2]
        if chi2 <= cfg.absolute_tolerance:
            return LeastSquareResults(to_model(y0), y0, chi2, tuple(history), 0)

        jac0 = self.jacobian(residual, y0, r0)
        check_jacobian(jac0[:len(observed)], cfg.singular_value_cutoff)
        last = {"y": y0.copy(), "r": r0}

        def objective(y):
            r = residual(y)
            last["y"], last["r"] = np.array(y, dtype=float), r
            return r

        def jacobian(y):
            if np.array_equal(y, y0):
                return jac0
            r = last["r"] if np.array_equal(y, last["y"]) else residual(y)
            # lmder 는 채택된 점에서만 야코비안을 다시 계산함
            history.append(float(r @ r))
            logger.debug("LM 반복 %d: chi2 = %.6e", len(history) - 1, history[-1])
            return self.jacobian(residual, y, r)

        widths = fitting_step_bounds(transform, start, cfg.max_jump_ratio)
        diag = 1.0 / widths
        scaled = float(np.linalg.norm(diag * y0))
        factor = INITIAL_SCALED_RADIUS / scaled if scaled > 0.0 else INITIAL_SCALED_RADIUS

        y, _, info, message, status = optimize.leastsq(
            objective, y0, Dfun=jacobian, full_output=True,
            ftol=cfg.relative_tolerance, xtol=cfg.relative_tolerance, gtol=0.0,
            maxfev=cfg.max_steps + 1, factor=factor, diag=diag)
        iterations = int(info["nfev"]) - 1
        residuals = np.asarray(info["fvec"], dtype=float)
        chi2 = float(residuals @ residuals)
        logger.debug("leastsq 종료: 상태 %d (%s), chi2 = %.6e, 시도 %d회", status, message, chi2, iterations)

        if status == MAX_FEV_STATUS:
            raise NonConvergenceError(f"최소제곱이 수렴하지 않았습니다 (chi2 = {chi2:.6e})", iterations)
        if status not in ACCEPTED_STATUS:
            raise ValueError(f"leastsq 입력 오류: {message}")
        if chi2 < history[-1]:
            history.append(chi2)
        y = np.atleast_1d(np.asarray(y, dtype=float))
        return LeastSquareResults(to_model(y), y, chi2, tuple(history), iterations)
