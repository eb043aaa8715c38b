# ratchet_pricing/config/settings.py

import logging

## 로그 설정 (스크립트에서 basicConfig에 사용)
LOG_LEVEL = logging.INFO
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

## 시간 측정 상수
# ScaledSecondTime: 초 단위 경과 시간 / (365 * 24 * 3600)
SECONDS_PER_YEAR = 31_536_000
DAYS_PER_YEAR = 365.0

## 통화 기본값
DEFAULT_CURRENCY = "EUR"

## 근 찾기(Broyden, scipy hybr) 기본값
# 절대 허용오차는 상품 가격 단위에 의존함 (액면 1e6 기준 0.1)
ROOT_TOLERANCE_ABS = 1.0E-1
# hybr xtol: 연속 반복점 사이의 상대 오차
ROOT_TOLERANCE_REL = 1.0E-4
# 함수 평가 횟수 상한
ROOT_STEP_MAX = 250

## 최소제곱(Levenberg-Marquardt, scipy leastsq) 기본값
LEAST_SQUARE_TOLERANCE_ABS = 1.0E-8
LEAST_SQUARE_TOLERANCE_REL = 1.0E-10
# 초기 점 이후 시도 스텝 수 상한
LEAST_SQUARE_STEP_MAX = 250
# 첫 스텝: 파라미터별 |Δx_i| ≤ 5% |x_i| (모형 공간)
LEAST_SQUARE_MAX_JUMP_RATIO = 0.05

## 유한차분 야코비안
FINITE_DIFFERENCE_EPS = 1.0E-5
FINITE_DIFFERENCE_TYPE = "forward"

## 특이값 컷오프 (최대 특이값 대비 상대값)
SINGULAR_VALUE_CUTOFF = 1.0E-12

## 병렬 처리 (joblib n_jobs 규칙: 1 = 순차, -1 = 모든 코어)
N_JOBS = 1

## 몬테카를로 기본값
MAX_JUMP_DEFAULT = 1.0
PATH_NUMBER_BLOCK = 10_000
NUM_PATHS = 50_000
RANDOM_SEED = 1234

## 모형 파라미터 한계값
LIMIT_0 = 1.0E-8
LIMIT_A = 1.0E-2
VOLATILITY_TIME_INFINITY = 1000.0
# LMM 시점 매칭 허용오차 (약 5일)
LMM_TIME_TOLERANCE = 5.0 / 350.0

## 예시 시장 데이터: 연속복리 제로 금리 (만기(년) → %)
ZERO_RATES_PCT = {
    0.25: 0.90, 0.5: 0.95, 1: 1.00, 2: 1.10, 3: 1.25,
    5: 1.50, 7: 1.70, 10: 1.95, 15: 2.15, 30: 2.30,
}
# Ibor 의사할인곡선 = 할인곡선 + 스프레드 (bp)
IBOR_SPREAD_BP = 10.0

## 스왑션 변동성 표면 기본 라벨 (만기 × 테너)
EXPIRY_LABELS = ["1Y", "2Y", "3Y", "5Y"]
TENORS = [2, 5, 10]

# ATM 스왑션 Black 변동성 표면 (단위: %)
SWAPTION_VOL_SURFACE_PCT = [
    [48.20, 45.10, 41.30],  # 1Y
    [44.80, 42.20, 39.40],  # 2Y
    [42.10, 40.30, 37.90],  # 3Y
    [38.70, 37.20, 35.60],  # 5Y
]

## 보정 초기값
INITIAL_G2_PARAMS = {
    "a": 0.268, "b": 0.337, "sigma": 0.0179, "eta": 0.0144, "rho": -0.677,
}
INITIAL_HW_PARAMS = {
    "mean_reversion": 0.02, "volatility": 0.005,
}

## 래칫 상품 정의 (예시)
RATCHET_DEFINITION = {
    "start": "2020-02-28",
    "end": "2022-02-28",
    "frequency_months": 3,
    "notional": 1_000_000.0,
    "cap_rate": 0.02,
}
VALUATION_DATE_STR = "2015-11-20"
