# -*- coding: utf-8 -*-
"""LMM 몬테카를로 래칫 가격결정 테스트.

Hull-White 동등 LMM에서 Ibor 동등 래칫은 Ibor 다리의 해석적 가격으로,
2% 캡 래칫은 Ibor 다리 - Hull-White 캡 가격으로 수렴해야 합니다.
"""

from datetime import date

import numpy as np
import pytest

from ratchet_pricing.config.settings import RATCHET_DEFINITION
from ratchet_pricing.src.errors import UnsupportedConfigurationError
from ratchet_pricing.src.market import DiscountCurve, RatesProvider
from ratchet_pricing.src.models import lmm_hw
from ratchet_pricing.src.pricing import LmmRatchetMonteCarloPricer, present_value_monte_carlo
from ratchet_pricing.src.pricing.hull_white import cap_leg_price, ibor_leg_price
from ratchet_pricing.src.products import RatchetCoefficients, period_dates, ratchet_leg

TOLERANCE = 2.0E3


def _pv(leg, rates, model, path_count, seed=1234, **kwargs):
    return LmmRatchetMonteCarloPricer(path_count, **kwargs).present_value(
        leg, rates, model, np.random.default_rng(seed))


def test_ibor_equivalent_ratchet_matches_ibor_leg(rates, lmm_model, ibor_equivalent_leg):
    expected = ibor_leg_price(ibor_equivalent_leg.periods, rates)
    result = _pv(ibor_equivalent_leg, rates, lmm_model, 50_000)
    assert result.path_count == 50_000
    assert result.present_value == pytest.approx(expected, abs=TOLERANCE)


def test_capped_ratchet_matches_ibor_minus_cap(rates, lmm_model, hw_model, capped_leg):
    cap = cap_leg_price(capped_leg.periods, rates, hw_model, RATCHET_DEFINITION["cap_rate"])
    expected = ibor_leg_price(capped_leg.periods, rates) - cap
    value = present_value_monte_carlo(capped_leg, rates, lmm_model, np.random.default_rng(42), 50_000)
    assert cap > 0.0
    assert value == pytest.approx(expected, abs=TOLERANCE)


def test_same_seed_is_deterministic(rates, lmm_model, capped_leg):
    first = _pv(capped_leg, rates, lmm_model, 1_000, seed=7)
    second = _pv(capped_leg, rates, lmm_model, 1_000, seed=7)
    other = _pv(capped_leg, rates, lmm_model, 1_000, seed=8)
    assert first.present_value == second.present_value
    assert first.standard_error == second.standard_error
    assert other.present_value != first.present_value


def test_seeded_price_reference_value():
    # 평탄 1% 단일 곡선, 분기 래칫 (첫 쿠폰 Ibor 캡 1.5%, 이후 직전 금리와 Ibor 평균)
    flat = RatesProvider(date(2015, 11, 20), DiscountCurve.flat(0.01))
    leg = ratchet_leg(date(2016, 3, 1), date(2017, 3, 1), 3, 1.0E6,
                      main=RatchetCoefficients(0.5, 0.5, 0.001),
                      floor=RatchetCoefficients(1.0, 0.0, -0.002),
                      cap=RatchetCoefficients(0.0, 0.0, 0.015),
                      first=(RatchetCoefficients(0.0, 1.0, 0.0),
                             RatchetCoefficients(0.0, 0.0, 0.0),
                             RatchetCoefficients(0.0, 0.0, 0.015)))
    model = lmm_hw(0.02, 0.01, period_dates(date(2016, 3, 1), date(2017, 3, 1), 3), flat)
    assert [p.fixing_date for p in leg.periods] == [date(2016, 2, 26), date(2016, 5, 30),
                                                   date(2016, 8, 30), date(2016, 11, 29)]

    result = _pv(leg, flat, model, 1_000, seed=1234)

    assert result.present_value == pytest.approx(10047.8377002227, abs=1e-1)
    assert result.standard_error == pytest.approx(136.3665965035, abs=1e-3)


def test_block_size_and_threads_do_not_change_result(rates, lmm_model, capped_leg):
    reference = _pv(capped_leg, rates, lmm_model, 5_000, path_number_block=5_000).present_value
    for kwargs in ({"path_number_block": 1_000}, {"path_number_block": 1_234},
                   {"path_number_block": 1_000, "n_jobs": 2}):
        assert _pv(capped_leg, rates, lmm_model, 5_000, **kwargs).present_value == pytest.approx(
            reference, rel=1e-9)


def test_block_sizes_include_residual():
    assert LmmRatchetMonteCarloPricer(25, path_number_block=10).block_sizes() == [10, 10, 5]
    assert LmmRatchetMonteCarloPricer(20, path_number_block=10).block_sizes() == [10, 10]
    with pytest.raises(ValueError):
        LmmRatchetMonteCarloPricer(1)


def test_standard_error_scales_with_inverse_square_root(rates, lmm_model, capped_leg):
    small = _pv(capped_leg, rates, lmm_model, 1_000, seed=11)
    large = _pv(capped_leg, rates, lmm_model, 100_000, seed=12)
    ratio = small.standard_error / large.standard_error
    assert 8.0 < ratio < 12.5


def test_non_lmm_model_is_rejected(rates, hw_model, capped_leg):
    with pytest.raises(UnsupportedConfigurationError):
        present_value_monte_carlo(capped_leg, rates, hw_model, np.random.default_rng(1), 1_000)


def test_numeraire_and_initial_forwards(rates, lmm_model):
    pricer = LmmRatchetMonteCarloPricer(1_000)
    forwards = pricer.initial_values(rates, lmm_model)
    assert forwards.shape == (lmm_model.ibor_periods_count,)
    growth = np.prod(1.0 + forwards * lmm_model.accrual_factors)
    start_df = rates.discount_factor(lmm_model.ibor_times[0])
    assert pricer.numeraire_value(rates, lmm_model) * growth == pytest.approx(start_df, rel=1e-12)


@pytest.mark.slow
def test_million_path_convergence(rates, lmm_model, hw_model, capped_leg):
    cap = cap_leg_price(capped_leg.periods, rates, hw_model, RATCHET_DEFINITION["cap_rate"])
    expected = ibor_leg_price(capped_leg.periods, rates) - cap
    result = _pv(capped_leg, rates, lmm_model, 1_000_000, n_jobs=-1)
    assert result.present_value == pytest.approx(expected, abs=TOLERANCE)
    assert result.standard_error < 100.0


def test_spot_starting_ratchet_fixing_on_valuation_date(rates):
    leg = ratchet_leg(date(2015, 11, 24), date(2017, 11, 24), 6, RATCHET_DEFINITION["notional"],
                      main=RatchetCoefficients(0.0, 1.0, 0.0),
                      floor=RatchetCoefficients(0.0, 0.0, -1.0),
                      cap=RatchetCoefficients(0.0, 0.0, 1.0))
    assert leg.periods[0].fixing_date == rates.valuation_date
    model = lmm_hw(0.02, 0.01, period_dates(date(2015, 11, 24), date(2017, 11, 24), 6), rates)
    result = _pv(leg, rates, model, 20_000)
    assert np.isfinite(result.present_value)
    assert result.present_value == pytest.approx(ibor_leg_price(leg.periods, rates), abs=TOLERANCE)
