# -*- coding: utf-8 -*-
"""공통 시장 데이터와 래칫 상품 픽스처."""

from datetime import date

import numpy as np
import pytest

from ratchet_pricing.config.settings import RATCHET_DEFINITION
from ratchet_pricing.src.market import rates_from_settings
from ratchet_pricing.src.models import HullWhiteOneFactorParameters, lmm_hw
from ratchet_pricing.src.products import RatchetCoefficients, period_dates, ratchet_leg

VALUATION_DATE = date(2015, 11, 20)
HW_MEAN_REVERSION = 0.02
HW_SIGMA = 0.01


@pytest.fixture(scope="session")
def rates():
    return rates_from_settings(VALUATION_DATE)


@pytest.fixture(scope="session")
def ratchet_dates():
    return period_dates(RATCHET_DEFINITION["start"], RATCHET_DEFINITION["end"],
                        RATCHET_DEFINITION["frequency_months"])


@pytest.fixture(scope="session")
def lmm_model(rates, ratchet_dates):
    return lmm_hw(HW_MEAN_REVERSION, HW_SIGMA, ratchet_dates, rates)


@pytest.fixture(scope="session")
def hw_model(rates):
    return HullWhiteOneFactorParameters.of(HW_MEAN_REVERSION, [HW_SIGMA], [], rates.valuation_date)


def _leg(cap: RatchetCoefficients):
    return ratchet_leg(
        RATCHET_DEFINITION["start"],
        RATCHET_DEFINITION["end"],
        RATCHET_DEFINITION["frequency_months"],
        RATCHET_DEFINITION["notional"],
        main=RatchetCoefficients(0.0, 1.0, 0.0),
        floor=RatchetCoefficients(0.0, 0.0, -1.0),
        cap=cap,
    )


@pytest.fixture(scope="session")
def ibor_equivalent_leg():
    return _leg(RatchetCoefficients(0.0, 0.0, 1.0))


@pytest.fixture(scope="session")
def capped_leg():
    return _leg(RatchetCoefficients(0.0, 0.0, RATCHET_DEFINITION["cap_rate"]))


@pytest.fixture
def generator():
    return np.random.default_rng(1234)
