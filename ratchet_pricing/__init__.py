"""
ratchet_pricing 패키지는 금리 모형 보정과 래칫(ratchet) 쿠폰의 몬테카를로
가격결정 기능을 제공합니다.

이 패키지는 시장 곡선 구성, 모형 파라미터 템플릿(Hull-White, G2++, LMM,
Rational), 정확/최소제곱 보정 엔진, 해석적 가격결정, 몬테카를로 전개와
경로 집계 모듈을 포함합니다.

디렉터리 구조와 각 모듈의 역할은 DESIGN.md를 참고하세요.
"""

__all__ = [
    "config",
    "src",
]
