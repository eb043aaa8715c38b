# ratchet_pricing/scripts/02_calibrate_g2pp.py

import logging
import os
import sys

import pandas as pd

# --- 1. PYTHONPATH 설정 ---
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))


# --- 2. 절대 경로로 모듈 임포트 ---
from ratchet_pricing.config import settings
from ratchet_pricing.src.calibration import LeastSquaresCalibrator
from ratchet_pricing.src.errors import CalibrationError
from ratchet_pricing.src.market import rates_from_settings
from ratchet_pricing.src.models import G2ppTemplate
from ratchet_pricing.src.models.g2pp import PARAMETER_NAMES
from ratchet_pricing.src.pricing import build_market_prices_from_vol_surface
from ratchet_pricing.src.pricing.g2pp import swaption_trade_price


def main():
    """G2++ 모델 보정 프로세스를 실행하는 메인 함수"""
    logging.basicConfig(level=settings.LOG_LEVEL, format=settings.LOG_FORMAT)
    print("=" * 70)
    print("G2++ 모델 보정 스크립트 시작")
    print("=" * 70)

    rates = rates_from_settings()
    print(f"→ 평가일: {rates.valuation_date}")

    print("\n[단계 1] 변동성 표면에서 시장 프리미엄 계산 중...")
    trades = build_market_prices_from_vol_surface(settings.SWAPTION_VOL_SURFACE_PCT,
                                                  settings.EXPIRY_LABELS, settings.TENORS,
                                                  rates, notional=settings.RATCHET_DEFINITION["notional"])
    print(f"✓ 스왑션 {len(trades)}개 구성 완료.")

    print("\n[단계 2] G2++ 모델 보정 중... (수 분이 소요될 수 있습니다)")
    initial = [settings.INITIAL_G2_PARAMS[name] for name in PARAMETER_NAMES]
    template = G2ppTemplate(initial, valuation_datetime=rates.valuation_date)
    calibrator = LeastSquaresCalibrator(template)
    try:
        model = calibrator.calibrate_least_squares(trades, rates, swaption_trade_price)
    except CalibrationError as exc:
        print(f"✗ 보정 실패: {exc}")
        sys.exit(1)

    print("\n[결과] 최종 G2++ 파라미터:")
    table = pd.DataFrame({"initial": initial, "calibrated": model.parameter_array()}, index=PARAMETER_NAMES)
    print(table.to_string(float_format=lambda v: f"{v:.6f}"))
    print(f"  - {'chi_square':<18}: {calibrator.last_results.chi_square:.6e}")
    print(f"  - {'iterations':<18}: {calibrator.last_results.iterations}")

    print("\n" + "=" * 70)
    print("스크립트 실행 완료")
    print("=" * 70)


if __name__ == "__main__":
    main()
