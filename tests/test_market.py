# -*- coding: utf-8 -*-
"""할인 곡선과 시장 데이터 제공자 테스트."""

from datetime import date

import numpy as np
import pytest

from ratchet_pricing.src.market import DiscountCurve, RatesProvider, rates_from_settings


def test_flat_curve():
    curve = DiscountCurve.flat(0.02)
    assert curve.discount_factor(0.0) == 1.0
    assert curve.discount_factor(5.0) == pytest.approx(np.exp(-0.1))
    np.testing.assert_allclose(curve.discount_factor(np.array([1.0, 2.0])), np.exp([-0.02, -0.04]))


def test_curve_interpolates_nodes_and_extrapolates_flat():
    curve = DiscountCurve([1.0, 2.0, 5.0], [0.01, 0.015, 0.02])
    assert curve.zero_rate(2.0) == pytest.approx(0.015)
    assert curve.zero_rate(0.1) == pytest.approx(0.01)
    assert curve.zero_rate(30.0) == pytest.approx(0.02)


def test_curve_validation():
    with pytest.raises(ValueError):
        DiscountCurve([1.0, 1.0], [0.01, 0.02])
    with pytest.raises(ValueError):
        DiscountCurve([1.0, 2.0], [0.01])


def test_single_curve_has_unit_spread():
    rates = RatesProvider(date(2015, 11, 20), DiscountCurve.flat(0.01))
    start, end = date(2020, 2, 28), date(2020, 5, 28)
    accrual = rates.relative_time(end) - rates.relative_time(start)
    assert rates.ibor_spread(start, end, accrual) == pytest.approx(1.0, abs=1e-14)


def test_ibor_curve_spread(rates):
    start, end = date(2020, 2, 28), date(2020, 5, 28)
    accrual = rates.relative_time(end) - rates.relative_time(start)
    assert rates.ibor_spread(start, end, accrual) > 1.0
    assert rates.relative_time(date(2016, 11, 19)) == pytest.approx(365.0 / 365.0)


def test_rates_from_settings_default_valuation():
    rates = rates_from_settings()
    assert rates.valuation_date == date(2015, 11, 20)
    assert rates.discount_factor(rates.valuation_date) == 1.0
