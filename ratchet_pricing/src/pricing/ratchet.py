# -*- coding: utf-8 -*-
"""
LMM 몬테카를로 래칫 가격결정
============================

경로별로 고정일의 LMM 상태에서 Ibor 금리를 구하고 래칫 점화식으로 쿠폰을
계산합니다. 각 쿠폰은 같은 경로의 상태로 만든 뉴메레르 기준 할인계수::

    D(pay) = Π_{k ≥ pay} (1 + f_k δ_k),   D(t_N) = 1

로 환산되며 마지막에 시장 할인계수 P(0, t_N)을 곱해 통화 단위로 바꿉니다.
"""

import numpy as np

from ..errors import UnsupportedConfigurationError
from ..models.lmm import LiborMarketModelParameters
from ..montecarlo.evolution import LmmEvolution
from ..montecarlo.pricer import MonteCarloMultiDatesPricer
from ..products.ratchet import RatchetLeg
from ...config.settings import MAX_JUMP_DEFAULT, N_JOBS, PATH_NUMBER_BLOCK


def _check_model(model) -> LiborMarketModelParameters:
    if not isinstance(model, LiborMarketModelParameters):
        raise UnsupportedConfigurationError(
            f"래칫 몬테카를로는 LMM 파라미터만 지원합니다: {type(model).__name__}")
    return model


class LmmRatchetMonteCarloPricer(MonteCarloMultiDatesPricer):

    def __init__(self, path_count: int, path_number_block: int = PATH_NUMBER_BLOCK,
                 n_jobs: int = N_JOBS, max_jump: float = MAX_JUMP_DEFAULT):
        super().__init__(path_count, path_number_block, n_jobs)
        self.evolution = LmmEvolution(max_jump)

    def cashflow_schedule(self, product: RatchetLeg):
        return product.cashflow_schedule()

    def numeraire_value(self, market, model) -> float:
        return market.discount_factor(_check_model(model).ibor_times[-1])

    def initial_values(self, market, model) -> np.ndarray:
        """할인 곡선이 함의하는 할인 선도금리 f_i = (P(t_i)/P(t_{i+1}) - 1)/δ_i."""
        model = _check_model(model)
        df = np.array([market.discount_factor(t) for t in model.ibor_times])
        return (df[:-1] / df[1:] - 1.0) / model.accrual_factors

    def normals_shape(self, step_times, model):
        return self.evolution.normals_shape(step_times, model)

    def evolve(self, step_times, initial_values, model, normals) -> np.ndarray:
        return self.evolution.evolve(step_times, initial_values, model, normals)

    def aggregation(self, product: RatchetLeg, schedule, states, model) -> np.ndarray:
        model = _check_model(model)
        effective_index = model.ibor_time_index([model.relative_time(d) for d in schedule.effective_dates])
        payment_index = model.ibor_time_index([model.relative_time(d) for d in schedule.payment_dates])
        periods_count = model.ibor_periods_count
        if np.any(payment_index > periods_count) or np.any(effective_index >= periods_count):
            raise ValueError("현금흐름 날짜가 LMM Ibor 시점 범위를 벗어납니다.")

        paths = states.shape[0]
        values = np.empty((paths, len(schedule)))
        previous = np.zeros(paths)
        for i, period in enumerate(product.periods):
            forwards = states[:, i, :]
            ibor = model.ibor_rate_from_dsc_forward(forwards[:, effective_index[i]], effective_index[i])
            rate = period.rate(previous, ibor)
            # 지급일부터 종단 시점까지의 뉴메레르 기준 할인계수
            growth = 1.0 + forwards[:, payment_index[i]:] * model.accrual_factors[payment_index[i]:]
            discount = np.prod(growth, axis=1)
            values[:, i] = schedule.amounts[i] * rate * discount
            previous = rate
        return values


def present_value_monte_carlo(product: RatchetLeg,
                              market,
                              model,
                              generator: np.random.Generator,
                              path_count: int,
                              path_number_block: int = PATH_NUMBER_BLOCK,
                              n_jobs: int = N_JOBS) -> float:
    """LMM 몬테카를로로 래칫 다리의 현재가치를 계산합니다."""
    _check_model(model)
    pricer = LmmRatchetMonteCarloPricer(path_count, path_number_block, n_jobs)
    return pricer.present_value(product, market, model, generator).present_value
