# -*- coding: utf-8 -*-
"""
블록 기반 몬테카를로 가격결정기
===============================

``MonteCarloMultiDatesPricer`` 는 여러 사건 시점을 가진 상품을 위한 추상
가격결정기입니다. 하위 클래스는 다음 훅을 구현합니다.

* ``cashflow_schedule``: 상품의 현금흐름 일정
* ``numeraire_value``: 시장 곡선의 종단 할인계수
* ``initial_values``: 모형의 초기 상태
* ``normals_shape`` / ``evolve``: 경로별 상태 전개
* ``aggregation``: 경로 × 현금흐름 배열 (뉴메레르 단위)

경로는 ``path_number_block`` 크기의 블록과 나머지 블록으로 나뉩니다.
난수는 블록 처리 전에 경로 순서대로 모두 뽑으므로 블록 크기와 스레드
수에 관계없이 같은 결과를 얻습니다.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from math import sqrt

import numpy as np
from joblib import Parallel, delayed

from .evolution import draw_normals
from ...config.settings import N_JOBS, PATH_NUMBER_BLOCK

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MonteCarloResult:
    present_value: float
    standard_error: float
    path_count: int


class MonteCarloMultiDatesPricer(ABC):

    def __init__(self, path_count: int, path_number_block: int = PATH_NUMBER_BLOCK, n_jobs: int = N_JOBS):
        if path_count < 2:
            raise ValueError(f"경로 수는 2 이상이어야 합니다: {path_count}")
        if path_number_block < 1:
            raise ValueError(f"블록 크기는 양수여야 합니다: {path_number_block}")
        self.path_count = int(path_count)
        self.path_number_block = int(path_number_block)
        self.n_jobs = n_jobs

    @abstractmethod
    def cashflow_schedule(self, product):
        ...

    @abstractmethod
    def numeraire_value(self, market, model) -> float:
        ...

    @abstractmethod
    def initial_values(self, market, model):
        ...

    @abstractmethod
    def normals_shape(self, step_times, model):
        ...

    @abstractmethod
    def evolve(self, step_times, initial_values, model, normals) -> np.ndarray:
        ...

    @abstractmethod
    def aggregation(self, product, schedule, states, model) -> np.ndarray:
        """(경로, 현금흐름) 형태의 뉴메레르 기준 현금흐름 가치."""

    def block_sizes(self):
        full, residual = divmod(self.path_count, self.path_number_block)
        sizes = [self.path_number_block] * full
        if residual:
            sizes.append(residual)
        return sizes

    def _block_values(self, product, schedule, step_times, initial, model, normals) -> np.ndarray:
        states = self.evolve(step_times, initial, model, normals)
        return self.aggregation(product, schedule, states, model).sum(axis=1)

    def present_value(self, product, market, model, generator: np.random.Generator) -> MonteCarloResult:
        schedule = self.cashflow_schedule(product)
        step_times = np.array([model.relative_time(d) for d in schedule.fixing_dates])
        initial = self.initial_values(market, model)
        shape = self.normals_shape(step_times, model)

        # 난수는 경로 순서대로 먼저 뽑음
        blocks = [draw_normals(generator, size, shape) for size in self.block_sizes()]
        logger.info("몬테카를로: 경로 %d개, 블록 %d개, 사건 시점 %d개", self.path_count, len(blocks), len(step_times))

        values = Parallel(n_jobs=self.n_jobs, prefer="threads")(
            delayed(self._block_values)(product, schedule, step_times, initial, model, normals)
            for normals in blocks
        )
        values = np.concatenate(values)
        numeraire = self.numeraire_value(market, model)
        pv = numeraire * float(np.mean(values))
        error = numeraire * float(np.std(values, ddof=1)) / sqrt(len(values))
        logger.info("몬테카를로 가격 %.4f (표준오차 %.4f)", pv, error)
        return MonteCarloResult(pv, error, len(values))
