# -*- coding: utf-8 -*-
"""
`calibration` 패키지는 모형 보정 엔진을 제공합니다.

* ``differentiation``: 유한차분 야코비안
* ``root_finder``: Broyden 벡터 근 찾기 (scipy hybr)
* ``least_squares``: Levenberg-Marquardt 최소제곱 (scipy leastsq)
* ``calibrators``: 정확(근 찾기) 보정과 최소제곱 보정
"""

from .differentiation import FiniteDifferenceConfig, FiniteDifferenceJacobian
from .root_finder import BroydenVectorRootFinder, RootFinderConfig
from .least_squares import LeastSquareConfig, LeastSquareResults, LevenbergMarquardtSolver
from .calibrators import LeastSquaresCalibrator, RootFindingCalibrator

__all__ = [
    "FiniteDifferenceConfig",
    "FiniteDifferenceJacobian",
    "BroydenVectorRootFinder",
    "RootFinderConfig",
    "LeastSquareConfig",
    "LeastSquareResults",
    "LevenbergMarquardtSolver",
    "LeastSquaresCalibrator",
    "RootFindingCalibrator",
]
