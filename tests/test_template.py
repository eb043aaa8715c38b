# -*- coding: utf-8 -*-
"""파라미터 변환과 템플릿 고정/자유 분할 테스트."""

from datetime import date

import numpy as np
import pytest

from ratchet_pricing.src.models import (
    DoubleRangeLimitTransform,
    G2ppTemplate,
    HullWhiteOneFactorTemplate,
    LmmHullWhiteShapedTemplate,
    LimitType,
    NullTransform,
    RationalOneFactorTemplate,
    SingleRangeLimitTransform,
    collapse_full_to_free,
    expand_free_to_full,
    lmm_hw,
)
from ratchet_pricing.config.settings import INITIAL_G2_PARAMS

VALUATION = date(2015, 11, 20)


@pytest.mark.parametrize("transform, values", [
    (SingleRangeLimitTransform(0.0, LimitType.GREATER_THAN), [1e-6, 0.01, 0.5, 3.0, 80.0]),
    (SingleRangeLimitTransform(1.0, LimitType.LESS_THAN), [-5.0, 0.0, 0.99]),
    (DoubleRangeLimitTransform(-1.0, 1.0), [-0.95, -0.3, 0.0, 0.677, 0.999]),
    (NullTransform(), [-2.0, 0.0, 4.0]),
])
def test_transform_round_trip(transform, values):
    for x in values:
        assert transform.inverse_transform(transform.transform(x)) == pytest.approx(x, rel=1e-12, abs=1e-15)


def test_transform_maps_whole_real_line_into_domain():
    single = SingleRangeLimitTransform(0.01, LimitType.GREATER_THAN)
    double = DoubleRangeLimitTransform(-1.0, 1.0)
    for y in (-30.0, -1.0, 0.0, 1.0, 30.0):
        assert single.inverse_transform(y) > 0.01
        assert -1.0 <= double.inverse_transform(y) <= 1.0


def test_transform_rejects_values_outside_domain():
    with pytest.raises(ValueError):
        SingleRangeLimitTransform(0.0).transform(-0.1)
    with pytest.raises(ValueError):
        DoubleRangeLimitTransform(-1.0, 1.0).transform(1.0)


def test_expand_and_collapse():
    initial = np.array([0.1, 0.2, 0.3, 0.4])
    fixed = np.array([True, False, True, False])
    full = expand_free_to_full([7.0, 8.0], initial, fixed)
    np.testing.assert_array_equal(full, [0.1, 7.0, 0.3, 8.0])
    np.testing.assert_array_equal(collapse_full_to_free(full, fixed), [7.0, 8.0])
    with pytest.raises(ValueError):
        expand_free_to_full([1.0], initial, fixed)


def test_fixed_parameters_keep_initial_values():
    template = HullWhiteOneFactorTemplate([1.0, 3.0], [0.03, 0.01, 0.02, 0.015],
                                          fixed=[True, False, True, False], valuation_datetime=VALUATION)
    assert template.free_parameters_count() == 2
    model = template.generate(template.expand([0.005, 0.007]))
    assert model.mean_reversion == 0.03
    np.testing.assert_allclose(model.volatility, [0.005, 0.02, 0.007])
    np.testing.assert_allclose(model.volatility_time, [0.0, 1.0, 3.0, 1000.0])


def test_template_length_validation():
    with pytest.raises(ValueError):
        HullWhiteOneFactorTemplate([1.0], [0.03, 0.01], valuation_datetime=VALUATION)
    with pytest.raises(ValueError):
        HullWhiteOneFactorTemplate([1.0], [0.03, 0.01, 0.01], fixed=[True, False],
                                   valuation_datetime=VALUATION)


def test_transform_covers_only_free_parameters():
    template = G2ppTemplate(list(INITIAL_G2_PARAMS.values()), fixed=[True, True, False, True, False],
                            valuation_datetime=VALUATION)
    transforms = template.transform()
    assert transforms.fitting_parameters_count == 2
    free = template.collapse(template.initial_guess())
    np.testing.assert_allclose(transforms.inverse_transform(transforms.transform(free)), free, rtol=1e-12)


def test_constraints_include_joint_condition(rates):
    template = RationalOneFactorTemplate(rates, [0.4, 0.5, 0.01, 0.1], fixed=[True, False, True, True])
    check = template.constraints()
    assert check([0.5])
    # b00 + eta / (a kappa) = 0.8 + 0.25 >= 1
    assert not check([0.8])
    assert not check([np.nan])


def test_generated_parameters_are_immutable():
    template = HullWhiteOneFactorTemplate([], [0.03, 0.01], valuation_datetime=VALUATION)
    model = template.generate([0.03, 0.01])
    assert model.parameters_count == 2
    np.testing.assert_allclose(model.parameter_array(), [0.03, 0.01])
    with pytest.raises(ValueError):
        model.volatility[0] = 1.0


def test_lmm_template_generates_hull_white_shaped_model(rates, ratchet_dates):
    template = LmmHullWhiteShapedTemplate(ratchet_dates, rates, [0.02, 0.01], fixed=[True, False])
    model = template.generate(template.expand([0.012]))
    expected = lmm_hw(0.02, 0.012, ratchet_dates, rates)
    np.testing.assert_allclose(model.volatilities, expected.volatilities, rtol=1e-14)
    np.testing.assert_allclose(model.displacements, 1.0 / model.accrual_factors)
    assert model.mean_reversion == 0.02
    assert model.factor_count == 1
    assert model.ibor_periods_count == len(ratchet_dates) - 1
