# -*- coding: utf-8 -*-
"""
`models` 패키지는 금리 모형의 파라미터, 템플릿, 공식을 포함합니다.

* ``parameters``: 시간 측정과 모형 파라미터 공통 계약
* ``template``: 모형 템플릿, 고정/자유 파라미터 분할, 정의역 변환
* ``hull_white``: Hull-White 1팩터 (구간별 상수 변동성)
* ``g2pp``: G2++ 2팩터 모형
* ``lmm``: 변위 확산 LMM (결정적 스프레드)
* ``rational``: Rational 1팩터 모형
"""

from .parameters import ModelParameters, ScaledSecondTime
from .template import (
    DoubleRangeLimitTransform,
    LimitType,
    ModelTemplate,
    NullTransform,
    SingleRangeLimitTransform,
    UncoupledParameterTransforms,
    collapse_full_to_free,
    expand_free_to_full,
)
from .hull_white import (
    HullWhiteOneFactorParameters,
    HullWhiteOneFactorTemplate,
    alpha,
    short_rate_variance,
)
from .g2pp import G2ppParameters, G2ppTemplate, B, calculate_V
from .lmm import LiborMarketModelParameters, LmmHullWhiteShapedTemplate, lmm_2_angle, lmm_hw
from .rational import RationalOneFactorParameters, RationalOneFactorTemplate

__all__ = [
    "ModelParameters",
    "ScaledSecondTime",
    "DoubleRangeLimitTransform",
    "LimitType",
    "ModelTemplate",
    "NullTransform",
    "SingleRangeLimitTransform",
    "UncoupledParameterTransforms",
    "collapse_full_to_free",
    "expand_free_to_full",
    "HullWhiteOneFactorParameters",
    "HullWhiteOneFactorTemplate",
    "alpha",
    "short_rate_variance",
    "G2ppParameters",
    "G2ppTemplate",
    "B",
    "calculate_V",
    "LiborMarketModelParameters",
    "LmmHullWhiteShapedTemplate",
    "lmm_2_angle",
    "lmm_hw",
    "RationalOneFactorParameters",
    "RationalOneFactorTemplate",
]
