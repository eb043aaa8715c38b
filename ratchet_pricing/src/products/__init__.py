# -*- coding: utf-8 -*-
"""
`products` 패키지는 보정 상품(스왑션)과 래칫 상품, 일정 빌더를 제공합니다.
"""

from .schedule import CashflowEquivalent, CashflowSchedule, period_dates, year_fraction
from .swaption import Swaption, SwaptionTrade, swaption, swaption_trade
from .ratchet import RatchetCoefficients, RatchetLeg, RatchetPeriod, ratchet_leg

__all__ = [
    "CashflowEquivalent",
    "CashflowSchedule",
    "period_dates",
    "year_fraction",
    "Swaption",
    "SwaptionTrade",
    "swaption",
    "swaption_trade",
    "RatchetCoefficients",
    "RatchetLeg",
    "RatchetPeriod",
    "ratchet_leg",
]
