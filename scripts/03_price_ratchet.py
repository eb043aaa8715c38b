#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
03_price_ratchet.py
===================

이 스크립트는 Hull-White 와 Hull-White 동등 LMM을 2년 x 2년 ATM 스왑션에 각각 정확 보정한 뒤,
2% 캡이 있는 Ibor 래칫 다리를 몬테카를로로 평가합니다. 결과는 Ibor 다리 -
Hull-White 캡의 해석적 가격과 비교합니다.
"""

import logging
import os
import sys

import numpy as np

# 프로젝트 루트 경로를 PYTHONPATH에 추가하여 ratchet_pricing 패키지를 찾을 수 있도록 함
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from ratchet_pricing.config import settings
from ratchet_pricing.src.calibration import RootFindingCalibrator
from ratchet_pricing.src.market import rates_from_settings
from ratchet_pricing.src.models import (
    HullWhiteOneFactorParameters,
    HullWhiteOneFactorTemplate,
    LmmHullWhiteShapedTemplate,
    lmm_hw,
)
from ratchet_pricing.src.pricing import build_market_prices_from_vol_surface, lmm
from ratchet_pricing.src.pricing.hull_white import cap_leg_price, ibor_leg_price, swaption_trade_price
from ratchet_pricing.src.pricing.ratchet import LmmRatchetMonteCarloPricer
from ratchet_pricing.src.products import RatchetCoefficients, period_dates, ratchet_leg


def main() -> None:
    logging.basicConfig(level=settings.LOG_LEVEL, format=settings.LOG_FORMAT)
    rates = rates_from_settings()
    definition = settings.RATCHET_DEFINITION

    # 2Y x 2Y ATM 스왑션에 변동성 1개 보정
    trades = build_market_prices_from_vol_surface(settings.SWAPTION_VOL_SURFACE_PCT[1:2], ["2Y"], [2],
                                                  rates, notional=definition["notional"])
    hw = settings.INITIAL_HW_PARAMS
    template = HullWhiteOneFactorTemplate([], [hw["mean_reversion"], hw["volatility"]], fixed=[True, False],
                                          valuation_datetime=rates.valuation_date)
    hw_model = RootFindingCalibrator(template).calibrate_exact(trades, rates, swaption_trade_price)
    sigma = float(hw_model.volatility[0])
    print(f"보정된 Hull-White: a = {hw_model.mean_reversion:.4f}, sigma = {sigma:.6f}")

    # 같은 스왑션에 LMM 명시적 근사로 직접 보정 (스왑션 Ibor 일정 위의 LMM)
    swap_dates = list(trades[0].swaption.ibor_start_dates) + [trades[0].swaption.end_date]
    lmm_template = LmmHullWhiteShapedTemplate(swap_dates, rates, [hw["mean_reversion"], hw["volatility"]],
                                              fixed=[True, False])
    lmm_calibrated = RootFindingCalibrator(lmm_template).calibrate_exact(trades, rates, lmm.swaption_trade_price)
    # γ 는 σ 에 선형
    unit = lmm_hw(hw["mean_reversion"], 1.0, swap_dates, rates)
    lmm_sigma = float(lmm_calibrated.volatilities[0, 0] / unit.volatilities[0, 0])
    print(f"보정된 LMM (근사 가격): sigma = {lmm_sigma:.6f}")

    leg = ratchet_leg(definition["start"], definition["end"], definition["frequency_months"],
                      definition["notional"],
                      main=RatchetCoefficients(0.0, 1.0, 0.0),
                      floor=RatchetCoefficients(0.0, 0.0, -1.0),
                      cap=RatchetCoefficients(0.0, 0.0, definition["cap_rate"]))
    dates = period_dates(definition["start"], definition["end"], definition["frequency_months"])
    lmm_model = lmm_hw(hw_model.mean_reversion, sigma, dates, rates)

    pricer = LmmRatchetMonteCarloPricer(settings.NUM_PATHS)
    result = pricer.present_value(leg, rates, lmm_model, np.random.default_rng(settings.RANDOM_SEED))

    flat_hw = HullWhiteOneFactorParameters.of(hw_model.mean_reversion, [sigma], [], rates.valuation_date)
    analytic = ibor_leg_price(leg.periods, rates) - cap_leg_price(leg.periods, rates, flat_hw, definition["cap_rate"])

    print("래칫 다리 가격:")
    print(f"  몬테카를로 ({result.path_count}개 경로) = {result.present_value:,.2f} ± {result.standard_error:,.2f}")
    print(f"  해석적 (Ibor - 캡)          = {analytic:,.2f}")
    print(f"  차이                        = {result.present_value - analytic:,.2f}")
    print("\n✓ 래칫 가격결정 완료.")


if __name__ == "__main__":
    main()
