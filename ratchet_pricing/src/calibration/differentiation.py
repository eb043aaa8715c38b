# -*- coding: utf-8 -*-
"""
유한차분 야코비안
=================

벡터 함수 F: R^n → R^m 의 야코비안을 자유 차원별 섭동으로 근사합니다.
보정에서 가장 비용이 큰 단계이며, 각 열(섭동)은 서로 독립이므로
joblib 스레드로 병렬 평가할 수 있습니다.

* ``forward``  : (F(x + h e_j) - F(x)) / h       (n 회 추가 평가)
* ``central``  : (F(x + h e_j) - F(x - h e_j)) / 2h (2n 회)
* ``backward`` : (F(x) - F(x - h e_j)) / h       (n 회)
"""

from dataclasses import dataclass
from typing import Callable, Optional

import numpy as np
from joblib import Parallel, delayed
from scipy import linalg

from ..errors import SingularJacobianError, UnsupportedConfigurationError
from ...config.settings import FINITE_DIFFERENCE_EPS, FINITE_DIFFERENCE_TYPE, N_JOBS

DIFFERENCE_TYPES = ("forward", "central", "backward")


@dataclass(frozen=True)
class FiniteDifferenceConfig:
    eps: float = FINITE_DIFFERENCE_EPS
    difference_type: str = FINITE_DIFFERENCE_TYPE
    n_jobs: int = N_JOBS


class FiniteDifferenceJacobian:
    """함수와 점을 받아 m x n 야코비안 행렬을 돌려주는 호출 가능 객체."""

    def __init__(self, config: Optional[FiniteDifferenceConfig] = None):
        self.config = config or FiniteDifferenceConfig()
        if self.config.difference_type not in DIFFERENCE_TYPES:
            raise UnsupportedConfigurationError(
                f"지원하지 않는 유한차분 방식: {self.config.difference_type}")
        if self.config.eps <= 0.0:
            raise ValueError("eps는 양수여야 합니다.")

    def _evaluate(self, function: Callable, points) -> list:
        return Parallel(n_jobs=self.config.n_jobs, prefer="threads")(
            delayed(function)(p) for p in points
        )

    def __call__(self, function: Callable[[np.ndarray], np.ndarray],
                 x: np.ndarray,
                 fx: Optional[np.ndarray] = None) -> np.ndarray:
        x = np.asarray(x, dtype=float)
        n = len(x)
        eps = self.config.eps
        shifts = eps * np.eye(n)
        kind = self.config.difference_type

        if kind == "central":
            values = self._evaluate(function, [x + s for s in shifts] + [x - s for s in shifts])
            up = np.array(values[:n], dtype=float)
            down = np.array(values[n:], dtype=float)
            return ((up - down) / (2.0 * eps)).T

        if fx is None:
            fx = np.asarray(function(x), dtype=float)
        if kind == "forward":
            bumped = np.array(self._evaluate(function, [x + s for s in shifts]), dtype=float)
            return ((bumped - fx) / eps).T
        bumped = np.array(self._evaluate(function, [x - s for s in shifts]), dtype=float)
        return ((fx - bumped) / eps).T


def check_jacobian(jacobian: np.ndarray, cutoff: float) -> None:
    """영 열 또는 (m ≥ n 에서) 랭크 부족이면 SingularJacobianError."""
    if not np.all(np.isfinite(jacobian)):
        raise SingularJacobianError("야코비안에 유한하지 않은 값이 있습니다.")
    zero_columns = np.flatnonzero(np.linalg.norm(jacobian, axis=0) == 0.0)
    if zero_columns.size:
        raise SingularJacobianError(f"파라미터 {zero_columns.tolist()} 에 대한 민감도가 0 입니다.")
    m, n = jacobian.shape
    if m >= n:
        s = linalg.svd(jacobian, compute_uv=False)
        if s[-1] <= cutoff * s[0]:
            raise SingularJacobianError(f"야코비안 랭크 부족 (특이값: {s.tolist()}).")
