# ratchet_pricing/scripts/01_calibrate_hull_white.py

import logging
import os
import sys

import numpy as np
import pandas as pd

# --- 1. PYTHONPATH 설정 ---
# 프로젝트 최상위 폴더(ratchet_pricing의 부모)를 경로에 추가
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))


# --- 2. 절대 경로로 모듈 임포트 ---
from ratchet_pricing.config import settings
from ratchet_pricing.src.calibration import LeastSquaresCalibrator
from ratchet_pricing.src.market import rates_from_settings
from ratchet_pricing.src.models import HullWhiteOneFactorTemplate
from ratchet_pricing.src.pricing import build_market_prices_from_vol_surface
from ratchet_pricing.src.pricing.hull_white import swaption_trade_price


def main():
    """Hull-White 1팩터 모형을 ATM 스왑션 표면에 최소제곱 보정합니다."""
    logging.basicConfig(level=settings.LOG_LEVEL, format=settings.LOG_FORMAT)
    print("=" * 70)
    print("Hull-White 1팩터 보정 스크립트 시작")
    print("=" * 70)

    rates = rates_from_settings()
    surface = pd.DataFrame(settings.SWAPTION_VOL_SURFACE_PCT,
                           index=settings.EXPIRY_LABELS,
                           columns=[f"{t}Y" for t in settings.TENORS])
    print(f"→ 평가일: {rates.valuation_date}")
    print("\n[입력] ATM 스왑션 변동성 (%):")
    print(surface.to_string())

    print("\n[단계 1] 변동성 표면에서 시장 프리미엄 계산 중...")
    trades = build_market_prices_from_vol_surface(settings.SWAPTION_VOL_SURFACE_PCT,
                                                  settings.EXPIRY_LABELS, settings.TENORS,
                                                  rates, notional=settings.RATCHET_DEFINITION["notional"])
    print(f"✓ 스왑션 {len(trades)}개 구성 완료.")

    print("\n[단계 2] 최소제곱 보정 중... (평균회귀 고정, 2년 경계의 변동성 2개)")
    hw = settings.INITIAL_HW_PARAMS
    template = HullWhiteOneFactorTemplate(
        volatility_times=[2.0],
        initial_guess=[hw["mean_reversion"], hw["volatility"], hw["volatility"]],
        fixed=[True, False, False],
        valuation_datetime=rates.valuation_date,
    )
    calibrator = LeastSquaresCalibrator(template)
    model = calibrator.calibrate_least_squares(trades, rates, swaption_trade_price)
    results = calibrator.last_results

    print("\n[결과] 최종 Hull-White 파라미터:")
    print(f"  - {'mean_reversion':<18}: {model.mean_reversion:.6f}")
    for i, vol in enumerate(model.volatility):
        print(f"  - {f'volatility[{i}]':<18}: {vol:.6f}")
    print(f"  - {'chi_square':<18}: {results.chi_square:.6e}")
    print(f"  - {'iterations':<18}: {results.iterations}")

    errors = pd.Series([swaption_trade_price(t, rates, model) for t in trades],
                       index=[f"{e}x{t}Y" for e in settings.EXPIRY_LABELS for t in settings.TENORS])
    print("\n[검증] 상품별 가격 오차 (모형 - 시장):")
    print(errors.round(2).to_string())
    print(f"  RMSE: {np.sqrt(np.mean(errors ** 2)):.2f}")

    print("\n" + "=" * 70)
    print("스크립트 실행 완료")
    print("=" * 70)


if __name__ == "__main__":
    main()
