# -*- coding: utf-8 -*-
"""몬테카를로 상태 전개와 블록 기반 가격결정기."""

from .evolution import G2ppEvolution, HullWhiteEvolution, LmmEvolution, draw_normals
from .pricer import MonteCarloMultiDatesPricer, MonteCarloResult

__all__ = [
    "LmmEvolution",
    "HullWhiteEvolution",
    "G2ppEvolution",
    "draw_normals",
    "MonteCarloMultiDatesPricer",
    "MonteCarloResult",
]
