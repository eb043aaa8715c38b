# -*- coding: utf-8 -*-
"""정확 보정과 최소제곱 보정 테스트.

보정 상품의 프리미엄은 알려진 파라미터의 모형 가격이므로 보정 결과는 그 파라미터를
복원해야 합니다.
"""

import numpy as np
import pytest

from ratchet_pricing.config.settings import INITIAL_G2_PARAMS
from ratchet_pricing.src.calibration import (
    BroydenVectorRootFinder,
    FiniteDifferenceConfig,
    FiniteDifferenceJacobian,
    LeastSquareConfig,
    LeastSquaresCalibrator,
    LevenbergMarquardtSolver,
    RootFindingCalibrator,
)
from ratchet_pricing.src.errors import (
    CalibrationError,
    DimensionMismatchError,
    NonConvergenceError,
    SingularJacobianError,
    UnsupportedConfigurationError,
)
from ratchet_pricing.src.calibration.root_finder import RootFinderConfig
from ratchet_pricing.src.models import (
    G2ppTemplate,
    HullWhiteOneFactorTemplate,
    LmmHullWhiteShapedTemplate,
    RationalOneFactorTemplate,
    SingleRangeLimitTransform,
    UncoupledParameterTransforms,
)
from ratchet_pricing.src.pricing import g2pp, hull_white, lmm, rational
from ratchet_pricing.src.products import SwaptionTrade, swaption

NOTIONAL = 1.0E6
TRUE_HW = [0.02, 0.008, 0.012]


def _trades(rates, model, price, expiries, tenor=5, strike=0.02):
    """모형 가격을 프리미엄으로 가진 거래 (프리미엄은 평가일 지급)."""
    trades = []
    for months in expiries:
        option = swaption(rates.valuation_date, months, tenor, strike, NOTIONAL)
        trades.append(SwaptionTrade(option, price(option, rates, model), rates.valuation_date))
    return trades


def _hw_template(rates, initial, fixed):
    return HullWhiteOneFactorTemplate([2.0], initial, fixed=fixed, valuation_datetime=rates.valuation_date)


def test_finite_difference_jacobian():
    function = lambda x: np.array([x[0] ** 2 + x[1], np.sin(x[1])])
    x = np.array([1.5, 0.3])
    expected = np.array([[3.0, 1.0], [0.0, np.cos(0.3)]])
    for kind, tol in (("forward", 1e-4), ("backward", 1e-4), ("central", 1e-8)):
        jac = FiniteDifferenceJacobian(FiniteDifferenceConfig(eps=1e-6, difference_type=kind))(function, x)
        np.testing.assert_allclose(jac, expected, atol=tol)
    with pytest.raises(UnsupportedConfigurationError):
        FiniteDifferenceJacobian(FiniteDifferenceConfig(difference_type="complex"))


def test_broyden_finds_root_of_nonlinear_system():
    finder = BroydenVectorRootFinder(RootFinderConfig(absolute_tolerance=1e-10, relative_tolerance=1e-10))
    root = finder.find_root(lambda x: np.array([x[0] ** 2 - 2.0, x[0] * x[1] - 1.0]), [1.0, 1.0])
    np.testing.assert_allclose(root, [np.sqrt(2.0), 1.0 / np.sqrt(2.0)], rtol=1e-8)


def test_broyden_reports_non_convergence():
    finder = BroydenVectorRootFinder(RootFinderConfig(absolute_tolerance=1e-10, max_steps=3))
    with pytest.raises(NonConvergenceError) as info:
        finder.find_root(lambda x: np.array([np.exp(x[0]) + 1.0]), [0.0])
    assert info.value.steps <= 3
    assert isinstance(info.value, CalibrationError)


def test_broyden_stops_when_no_step_reduces_residual():
    # x² + 1 = 0 은 실근이 없음: |F| 를 줄이는 스텝이 없으면 평가 상한 전에 멈춤
    finder = BroydenVectorRootFinder(RootFinderConfig(absolute_tolerance=1e-6))
    with pytest.raises(NonConvergenceError) as info:
        finder.find_root(lambda x: np.array([x[0] ** 2 + 1.0]), [1.0])
    assert info.value.steps < finder.config.max_steps


def test_exact_calibration_dimension_mismatch_prices_nothing(rates, hw_model):
    calls = []

    def counting_pricer(trade, market, model):
        calls.append(trade)
        return 0.0

    trades = _trades(rates, hw_model, hull_white.swaption_price, [12, 24, 36])
    calibrator = RootFindingCalibrator(_hw_template(rates, [0.02, 0.01, 0.01], [True, False, False]))
    with pytest.raises(DimensionMismatchError) as info:
        calibrator.calibrate_exact(trades, rates, counting_pricer)
    assert (info.value.instruments_count, info.value.free_count) == (3, 2)
    assert calls == []


def test_exact_calibration_hull_white_round_trip(rates):
    truth = _hw_template(rates, TRUE_HW, [True, False, False]).generate(TRUE_HW)
    trades = _trades(rates, truth, hull_white.swaption_price, [12, 36])
    template = _hw_template(rates, [0.02, 0.01, 0.01], [True, False, False])

    model = RootFindingCalibrator(template).calibrate_exact(trades, rates, hull_white.swaption_trade_price)

    assert model.mean_reversion == 0.02
    np.testing.assert_allclose(model.volatility, TRUE_HW[1:], atol=1e-5)
    for trade in trades:
        assert abs(hull_white.swaption_trade_price(trade, rates, model)) < 1.0


def test_exact_calibration_singular_jacobian(rates, hw_model):
    # 두 상품 모두 2년 이전 만기: 두 번째 변동성에 대한 민감도가 0
    trades = _trades(rates, hw_model, hull_white.swaption_price, [12, 18])
    template = _hw_template(rates, [0.02, 0.005, 0.005], [True, False, False])
    with pytest.raises(SingularJacobianError):
        RootFindingCalibrator(template).calibrate_exact(trades, rates, hull_white.swaption_trade_price)


def test_exact_calibration_rational_round_trip(rates):
    truth = RationalOneFactorTemplate(rates, [0.4, 0.5, 0.01, 0.1]).generate([0.4, 0.5, 0.01, 0.1])
    trades = _trades(rates, truth, rational.swaption_price, [24], strike=0.015)
    template = RationalOneFactorTemplate(rates, [0.38, 0.5, 0.01, 0.1], fixed=[False, True, True, True])

    config = RootFinderConfig(absolute_tolerance=1e-3)
    model = RootFindingCalibrator(template, config).calibrate_exact(trades, rates, rational.swaption_trade_price)

    assert abs(rational.swaption_trade_price(trades[0], rates, model)) < config.absolute_tolerance
    assert model.a == pytest.approx(0.4, abs=1e-4)
    assert (model.b00, model.eta, model.kappa) == (0.5, 0.01, 0.1)


def test_exact_calibration_lmm_hull_white_shaped_round_trip(rates):
    option = swaption(rates.valuation_date, 24, 2, 0.015, NOTIONAL)
    ibor_dates = list(option.ibor_start_dates) + [option.end_date]
    truth = LmmHullWhiteShapedTemplate(ibor_dates, rates, [0.02, 0.01]).generate([0.02, 0.01])
    trade = SwaptionTrade(option, lmm.swaption_price(option, rates, truth), rates.valuation_date)
    template = LmmHullWhiteShapedTemplate(ibor_dates, rates, [0.02, 0.007], fixed=[True, False])

    model = RootFindingCalibrator(template).calibrate_exact([trade], rates, lmm.swaption_trade_price)

    assert model.mean_reversion == 0.02
    np.testing.assert_allclose(model.volatilities, truth.volatilities, rtol=1e-4)
    assert abs(lmm.swaption_trade_price(trade, rates, model)) < 1.0


def test_least_squares_hull_white_two_volatilities(rates):
    truth = _hw_template(rates, TRUE_HW, [True, False, False]).generate(TRUE_HW)
    trades = _trades(rates, truth, hull_white.swaption_price, [12, 24, 36, 60])
    calibrator = LeastSquaresCalibrator(_hw_template(rates, [0.02, 0.01, 0.01], [True, False, False]))

    model = calibrator.calibrate_least_squares(trades, rates, hull_white.swaption_trade_price)

    np.testing.assert_allclose(model.volatility, TRUE_HW[1:], atol=1e-5)
    history = np.array(calibrator.last_results.chi_square_history)
    assert np.all(np.diff(history) < 0.0)
    assert calibrator.last_results.chi_square < history[0]
    assert calibrator.last_results.chi_square <= calibrator.solver.config.absolute_tolerance


def test_least_squares_g2pp_recovers_sigma(rates):
    true_params = list(INITIAL_G2_PARAMS.values())
    truth = G2ppTemplate(true_params, valuation_datetime=rates.valuation_date).generate(true_params)
    trades = _trades(rates, truth, g2pp.price_swaption_g2_analytic, [12, 24, 60])
    start = list(true_params)
    start[2] = 0.015
    template = G2ppTemplate(start, fixed=[True, True, False, True, True], valuation_datetime=rates.valuation_date)
    calibrator = LeastSquaresCalibrator(template)

    model = calibrator.calibrate_least_squares(trades, rates, g2pp.swaption_trade_price)

    assert model.sigma == pytest.approx(INITIAL_G2_PARAMS["sigma"], abs=1e-5)
    assert (model.a, model.b, model.eta, model.rho) == (
        INITIAL_G2_PARAMS["a"], INITIAL_G2_PARAMS["b"], INITIAL_G2_PARAMS["eta"], INITIAL_G2_PARAMS["rho"])
    history = np.array(calibrator.last_results.chi_square_history)
    assert np.all(np.diff(history) < 0.0)
    assert calibrator.last_results.chi_square <= calibrator.solver.config.absolute_tolerance


def test_least_squares_zero_sensitivity_column(rates, hw_model):
    trades = _trades(rates, hw_model, hull_white.swaption_price, [12, 18])
    template = _hw_template(rates, [0.02, 0.005, 0.005], [True, True, False])
    with pytest.raises(SingularJacobianError):
        LeastSquaresCalibrator(template).calibrate_least_squares(trades, rates, hull_white.swaption_trade_price)


def test_least_squares_weights_must_match(rates, hw_model):
    trades = _trades(rates, hw_model, hull_white.swaption_price, [12, 36])
    calibrator = LeastSquaresCalibrator(_hw_template(rates, [0.02, 0.01, 0.01], [True, False, False]))
    with pytest.raises(ValueError):
        calibrator.calibrate_least_squares(trades, rates, hull_white.swaption_trade_price, weights=[1.0])


def test_levenberg_marquardt_first_step_within_five_percent_of_start():
    visited = []

    def function(x):
        visited.append(float(x[0]))
        return np.array([x[0] - 0.02])

    transform = UncoupledParameterTransforms([SingleRangeLimitTransform(1e-8)], [False])
    solver = LevenbergMarquardtSolver(LeastSquareConfig(max_steps=1))
    with pytest.raises(NonConvergenceError):
        solver.solve(function, [0.0], [1.0], [0.01], transform=transform)
    assert max(abs(x - 0.01) for x in visited) <= 0.05 * 0.01
    assert max(visited) > 0.0101


def test_levenberg_marquardt_converges_in_model_space():
    config = LeastSquareConfig()
    results = LevenbergMarquardtSolver(config).solve(
        lambda x: np.array([x[0] - 0.02, 2.0 * (x[0] - 0.02)]), [0.0, 0.0], [1.0, 1.0], [0.01])
    assert results.fit_parameters[0] == pytest.approx(0.02, abs=1e-8)
    assert results.chi_square <= config.absolute_tolerance


def test_least_squares_reports_non_convergence_after_max_steps(rates):
    truth = _hw_template(rates, TRUE_HW, [True, False, False]).generate(TRUE_HW)
    trades = _trades(rates, truth, hull_white.swaption_price, [12, 24, 36, 60])
    config = LeastSquareConfig(max_steps=1)
    calibrator = LeastSquaresCalibrator(_hw_template(rates, [0.02, 0.01, 0.01], [True, False, False]), config)
    with pytest.raises(NonConvergenceError) as info:
        calibrator.calibrate_least_squares(trades, rates, hull_white.swaption_trade_price)
    assert info.value.steps == 1
    assert calibrator.last_results is None
