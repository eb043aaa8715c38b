# -*- coding: utf-8 -*-
"""
몬테카를로 상태 전개(evolution)
===============================

모든 전개기는 경로 배치 단위로 동작하며 정규 난수 배열 ``normals``
(경로 × 점프 × 팩터)를 입력받아 각 사건 시점의 상태를 반환합니다.

* ``LmmEvolution``: 변위 확산 LMM의 predictor-corrector 전개. 긴 구간은
  ``max_jump`` 이하의 점프로 나뉩니다. 반환 형태는 (경로, 시점, 기간).
* ``HullWhiteEvolution``: 1팩터 OU 과정 x 의 정확한 전이. (경로, 시점).
* ``G2ppEvolution``: 2팩터 (x, y)의 정확한 전이. (경로, 시점, 2).

난수는 ``draw_normals`` 로 경로 순서대로 뽑습니다.
"""

from math import ceil, sqrt

import numpy as np

from ..errors import NumericalDomainError
from ..models.g2pp import G2ppParameters, factor_covariance
from ..models.hull_white import HullWhiteOneFactorParameters, short_rate_variance
from ..models.lmm import LiborMarketModelParameters
from ...config.settings import MAX_JUMP_DEFAULT


def draw_normals(generator: np.random.Generator, count: int, shape) -> np.ndarray:
    """경로 우선(path-major) 순서의 표준정규 난수 (count, *shape)."""
    return generator.standard_normal((count,) + tuple(shape))


def _check_step_times(step_times) -> np.ndarray:
    step_times = np.asarray(step_times, dtype=float)
    if step_times.ndim != 1 or len(step_times) == 0:
        raise ValueError("사건 시점 목록이 비어 있습니다.")
    if step_times[0] < 0.0 or np.any(np.diff(step_times) < 0.0):
        raise ValueError(f"사건 시점은 0 이상이며 감소하지 않아야 합니다: {step_times}")
    return step_times


class LmmEvolution:
    """종단 측도(terminal measure)에서의 LMM 전개."""

    def __init__(self, max_jump: float = MAX_JUMP_DEFAULT):
        if max_jump <= 0.0:
            raise ValueError(f"max_jump는 양수여야 합니다: {max_jump}")
        self.max_jump = max_jump

    def jump_times(self, step_times):
        """점프 시작/끝 시점과 각 사건 시점이 끝나는 점프 인덱스.

        구간 길이가 max_jump 보다 길면 같은 길이의 점프 여러 개로 나눕니다.
        길이 0인 구간은 점프를 만들지 않으며, 그 사건 시점의 인덱스는 직전
        점프(없으면 -1)를 가리킵니다.
        """
        step_times = _check_step_times(step_times)
        starts, ends, step_end = [], [], []
        previous = 0.0
        for t in step_times:
            if t > previous:
                count = max(1, ceil((t - previous) / self.max_jump - 1.0E-12))
                grid = np.linspace(previous, t, count + 1)
                starts.extend(grid[:-1])
                ends.extend(grid[1:])
            step_end.append(len(ends) - 1)
            previous = t
        return np.array(starts), np.array(ends), step_end

    def normals_shape(self, step_times, model: LiborMarketModelParameters):
        starts, _, _ = self.jump_times(step_times)
        return len(starts), model.factor_count

    def evolve(self, step_times, initial_forwards, model: LiborMarketModelParameters, normals) -> np.ndarray:
        starts, ends, step_end = self.jump_times(step_times)
        normals = np.asarray(normals, dtype=float)
        paths = normals.shape[0]
        if normals.shape[1:] != (len(starts), model.factor_count):
            raise ValueError(f"난수 형태 {normals.shape} 가 (경로, {len(starts)}, {model.factor_count}) 와 다릅니다.")

        initial_forwards = np.asarray(initial_forwards, dtype=float)
        if np.any(initial_forwards + model.displacements <= 0.0):
            raise NumericalDomainError("변위를 더한 초기 선도금리는 양수여야 합니다.")
        forwards = np.tile(initial_forwards, (paths, 1))
        result = np.empty((paths, len(step_end), model.ibor_periods_count))

        jump = 0
        for step, last in enumerate(step_end):
            while jump <= last:
                self._jump(forwards, model, starts[jump], ends[jump], normals[:, jump, :])
                jump += 1
            result[:, step, :] = forwards
        return result

    @staticmethod
    def _jump(forwards, model: LiborMarketModelParameters, t0: float, t1: float, normals) -> None:
        """[t0, t1] 한 점프. ``forwards`` 를 제자리에서 갱신합니다."""
        displacement = model.displacements
        inverse_delta = 1.0 / model.accrual_factors
        gamma = model.volatilities
        variance = np.sum(gamma ** 2, axis=1)
        a = model.mean_reversion
        paths = forwards.shape[0]

        dt = t1 - t0
        if a != 0.0:
            alpha2 = (np.exp(2.0 * a * t1) - np.exp(2.0 * a * t0)) / (2.0 * a * dt)
        else:
            alpha2 = 1.0
        alpha = sqrt(alpha2)
        index = int(np.searchsorted(model.ibor_times, t1 - model.time_tolerance, side="left"))

        stochastic = normals @ gamma.T * sqrt(dt) * alpha - 0.5 * variance * alpha2 * dt
        start = forwards.copy()
        # Σ_{k>n} γ_k coef_k 누적 (predictor, corrector)
        sum_predictor = np.zeros((paths, model.factor_count))
        sum_corrector = np.zeros((paths, model.factor_count))
        for n in range(model.ibor_periods_count - 1, index - 1, -1):
            drift_predictor = alpha2 * sum_predictor @ gamma[n]
            drift_corrector = alpha2 * sum_corrector @ gamma[n]
            forwards[:, n] = ((forwards[:, n] + displacement[n])
                              * np.exp(-0.5 * (drift_predictor + drift_corrector) * dt + stochastic[:, n])
                              - displacement[n])
            coef_start = (start[:, n] + displacement[n]) / (start[:, n] + inverse_delta[n])
            coef_end = (forwards[:, n] + displacement[n]) / (forwards[:, n] + inverse_delta[n])
            sum_predictor += np.outer(coef_start, gamma[n])
            sum_corrector += np.outer(coef_end, gamma[n])

        if not np.all(np.isfinite(forwards)):
            raise NumericalDomainError(f"LMM 전개 결과가 유한하지 않습니다 (t={t1:.4f}).")


class HullWhiteEvolution:
    """x(t_{k+1}) = e^{-aΔ} x(t_k) + sqrt(Var[t_k, t_{k+1}]) z"""

    def normals_shape(self, step_times, model: HullWhiteOneFactorParameters):
        return len(_check_step_times(step_times)), 1

    def evolve(self, step_times, initial_state, model: HullWhiteOneFactorParameters, normals) -> np.ndarray:
        step_times = _check_step_times(step_times)
        normals = np.asarray(normals, dtype=float)
        x = np.full(normals.shape[0], float(initial_state))
        result = np.empty((normals.shape[0], len(step_times)))
        previous = 0.0
        for k, t in enumerate(step_times):
            if t > previous:
                decay = np.exp(-model.mean_reversion * (t - previous))
                std = sqrt(short_rate_variance(model, previous, t))
                x = decay * x + std * normals[:, k, 0]
            result[:, k] = x
            previous = t
        return result


class G2ppEvolution:
    """(x, y)의 정확한 OU 전이. 공분산의 Cholesky 인수로 상관 난수를 만듭니다."""

    def normals_shape(self, step_times, model: G2ppParameters):
        return len(_check_step_times(step_times)), 2

    def evolve(self, step_times, initial_state, model: G2ppParameters, normals) -> np.ndarray:
        step_times = _check_step_times(step_times)
        normals = np.asarray(normals, dtype=float)
        state = np.tile(np.asarray(initial_state, dtype=float), (normals.shape[0], 1))
        result = np.empty((normals.shape[0], len(step_times), 2))
        previous = 0.0
        for k, t in enumerate(step_times):
            dt = t - previous
            if dt > 0.0:
                try:
                    lower = np.linalg.cholesky(factor_covariance(model, dt))
                except np.linalg.LinAlgError as exc:
                    raise NumericalDomainError(f"G2++ 공분산이 양정치가 아닙니다 (dt={dt:.4f}).") from exc
                decay = np.array([np.exp(-model.a * dt), np.exp(-model.b * dt)])
                state = state * decay + normals[:, k, :] @ lower.T
            result[:, k, :] = state
            previous = t
        return result
