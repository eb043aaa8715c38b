# -*- coding: utf-8 -*-
"""일정, 스왑션, 래칫 상품 테스트."""

from datetime import date

import numpy as np
import pytest

from ratchet_pricing.src.errors import UnsupportedConfigurationError
from ratchet_pricing.src.products import (
    RatchetCoefficients,
    RatchetLeg,
    RatchetPeriod,
    period_dates,
    ratchet_leg,
    swaption,
    year_fraction,
)
from ratchet_pricing.src.products.schedule import fixing_date


def _period(main, floor, cap):
    return RatchetPeriod(
        fixing_date=date(2020, 5, 26),
        start_date=date(2020, 5, 28),
        end_date=date(2020, 8, 28),
        payment_date=date(2020, 8, 28),
        accrual=year_fraction(date(2020, 5, 28), date(2020, 8, 28)),
        notional=1.0E6,
        main=main,
        floor=floor,
        cap=cap,
    )


def test_period_dates_and_stub():
    dates = period_dates("2020-02-28", "2022-02-28", 3)
    assert len(dates) == 9
    assert dates[0] == date(2020, 2, 28) and dates[-1] == date(2022, 2, 28)
    with pytest.raises(UnsupportedConfigurationError):
        period_dates("2020-01-15", "2020-08-01", 3)
    with pytest.raises(ValueError):
        period_dates("2020-01-15", "2020-01-15", 3)


def test_fixing_date_is_two_business_days_before():
    # 2020-03-02 (월) → 2020-02-27 (목)
    assert fixing_date(date(2020, 3, 2), 2) == date(2020, 2, 27)


def test_swaption_schedule(rates):
    option = swaption(rates.valuation_date, 24, 5, 0.02, 1.0E6, fixed_frequency_months=12,
                      ibor_frequency_months=6)
    assert option.expiry_date == date(2017, 11, 20)
    assert option.start_date > option.expiry_date
    assert len(option.fixed_payment_dates) == 5
    assert len(option.ibor_start_dates) == 10
    assert option.fixed_payment_dates[-1] == option.end_date
    assert sum(option.fixed_accruals) == pytest.approx(year_fraction(option.start_date, option.end_date))


def test_ratchet_rate_regimes():
    # 직전 쿠폰 대비 하락 불가, 상승은 50bp까지
    period = _period(main=RatchetCoefficients(0.0, 1.0, 0.001),
                     floor=RatchetCoefficients(1.0, 0.0, 0.0),
                     cap=RatchetCoefficients(1.0, 0.0, 0.005))
    previous = np.array([0.02, 0.02, 0.02])
    ibor = np.array([0.021, 0.01, 0.04])
    np.testing.assert_allclose(period.rate(previous, ibor), [0.022, 0.02, 0.025])


def test_first_period_cannot_depend_on_previous_rate():
    period = _period(main=RatchetCoefficients(0.5, 1.0, 0.0),
                     floor=RatchetCoefficients(0.0, 0.0, -1.0),
                     cap=RatchetCoefficients(0.0, 0.0, 1.0))
    with pytest.raises(ValueError):
        RatchetLeg((period,))


def test_ratchet_leg_builder():
    leg = ratchet_leg("2020-02-28", "2022-02-28", 3, 1.0E6,
                      main=RatchetCoefficients(0.5, 1.0, 0.0),
                      floor=RatchetCoefficients(1.0, 0.0, 0.0),
                      cap=RatchetCoefficients(1.0, 0.0, 0.01))
    assert len(leg.periods) == 8
    first, second = leg.periods[0], leg.periods[1]
    assert (first.main.previous, first.floor.previous, first.cap.previous) == (0.0, 0.0, 0.0)
    assert second.main.previous == 0.5
    assert first.fixing_date < first.start_date

    schedule = leg.cashflow_schedule()
    assert len(schedule) == 8
    assert schedule.effective_dates == [p.start_date for p in leg.periods]
    assert schedule.amounts[0] == pytest.approx(first.accrual * 1.0E6)

    with pytest.raises(UnsupportedConfigurationError):
        ratchet_leg("2020-02-28", "2022-02-28", 3, 1.0E6,
                    main=RatchetCoefficients(0.0, 1.0, 0.0),
                    floor=RatchetCoefficients(0.0, 0.0, -1.0),
                    cap=RatchetCoefficients(0.0, 0.0, 1.0),
                    in_arrears=True)
    with pytest.raises(ValueError):
        ratchet_leg("2020-02-28", "2022-02-28", 3, 1.0E6,
                    main=[RatchetCoefficients(0.0, 1.0, 0.0)] * 3,
                    floor=RatchetCoefficients(0.0, 0.0, -1.0),
                    cap=RatchetCoefficients(0.0, 0.0, 1.0))


def test_ratchet_leg_with_fixed_first_coupon():
    fixed_first = (RatchetCoefficients(0.0, 0.0, 0.015),
                   RatchetCoefficients(0.0, 0.0, -1.0),
                   RatchetCoefficients(0.0, 0.0, 1.0))
    leg = ratchet_leg("2020-02-28", "2021-02-28", 3, 1.0E6,
                      main=RatchetCoefficients(0.0, 1.0, 0.0),
                      floor=RatchetCoefficients(1.0, 0.0, 0.0),
                      cap=RatchetCoefficients(0.0, 0.0, 1.0),
                      first=fixed_first)
    assert leg.periods[0].rate(0.0, 0.05) == pytest.approx(0.015)
    # 이후 쿠폰은 첫 쿠폰 아래로 내려가지 않음
    assert leg.periods[1].rate(0.015, 0.01) == pytest.approx(0.015)
    assert leg.periods[1].rate(0.015, 0.02) == pytest.approx(0.02)
