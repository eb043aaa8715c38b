# -*- coding: utf-8 -*-
"""
`market` 모듈은 시장 데이터(할인 곡선, Ibor 곡선, 평가일)를 제공합니다.
곡선 부트스트래핑은 범위 밖이며, 제로 금리 노드에서 곡선을 직접 구성합니다.
"""

from .curves import DiscountCurve, RatesProvider, rates_from_settings

__all__ = [
    "DiscountCurve",
    "RatesProvider",
    "rates_from_settings",
]
