# -*- coding: utf-8 -*-
"""
`pricing` 모듈은 상품 가격결정 기능을 제공합니다.

* 해석적 스왑션/캡 가격: 보정의 목적 함수이자 몬테카를로 검증 기준
  (Black, Hull-White, G2++, Rational, LMM 명시적 근사)
* LMM 몬테카를로 래칫 가격결정
"""

from .black import black_swaption_price, build_market_prices_from_vol_surface, forward_swap_rate
from .ratchet import LmmRatchetMonteCarloPricer, present_value_monte_carlo

__all__ = [
    "black_swaption_price",
    "build_market_prices_from_vol_surface",
    "forward_swap_rate",
    "LmmRatchetMonteCarloPricer",
    "present_value_monte_carlo",
]
