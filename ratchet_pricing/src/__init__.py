"""
`src` 서브패키지는 ratchet pricing 프로젝트의 핵심 로직을 포함합니다.
시장 데이터, 모형 정의, 보정 엔진, 상품 정의, 가격결정, 몬테카를로
엔진을 이곳에서 찾을 수 있습니다.
"""

__all__ = [
    "errors",
    "market",
    "models",
    "calibration",
    "products",
    "pricing",
    "montecarlo",
]
