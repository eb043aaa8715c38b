# -*- coding: utf-8 -*-
"""
LMM 스왑션 명시적 근사 가격
===========================

변위 확산 LMM 에서 실물 인도 스왑션을 닫힌 형태로 근사합니다.

1. 스왑의 현금흐름 동등치를 LMM Ibor 시점에 모읍니다 (첫 흐름 c_0 이 음수가
   되도록 부호를 맞추면 옵션은 채권 B = Σ_{k≥1} c_k P_k/P_0 에 대한 콜).
2. 만기 시점 채권 가치의 중간점 B_M = (B_0 + K)/2 에서 선도금리를 고정하고
   채권의 로그 변동성을 계산합니다::

       σ_B² = |Σ_k α_k^M μ_k^M|² · (e^{2κT} - 1)/(2κ)

3. P_0 · Black(B_0, K, σ_B) 로 평가합니다.

Hull-White 동등 LMM (``lmm_hw``)에서는 Hull-White 해석적 가격과 가깝습니다.
"""

import logging

import numpy as np

from .black import black_swaption_price
from .hull_white import cash_flow_equivalent
from ..errors import NumericalDomainError, UnsupportedConfigurationError
from ..models.lmm import LiborMarketModelParameters
from ..products.swaption import Swaption, SwaptionTrade

logger = logging.getLogger(__name__)

ZERO_MEAN_REVERSION = 1.0E-6


def _mean_reversion_impact(mean_reversion: float, expiry: float) -> float:
    if abs(mean_reversion) < ZERO_MEAN_REVERSION:
        return expiry
    return (np.exp(2.0 * mean_reversion * expiry) - 1.0) / (2.0 * mean_reversion)


def _factor_loadings(forwards, displacements, accruals, gammas) -> np.ndarray:
    """μ_k = Σ_{j≤k} (f_j + a_j)/(f_j + 1/δ_j) γ_j  (기간 × 팩터)."""
    ratio = (forwards + displacements) / (forwards + 1.0 / accruals)
    return np.cumsum(ratio[:, np.newaxis] * gammas, axis=0)


def swaption_price(option: Swaption, rates, model: LiborMarketModelParameters) -> float:
    if not isinstance(model, LiborMarketModelParameters):
        raise UnsupportedConfigurationError(
            f"LMM 스왑션 근사는 LMM 파라미터만 지원합니다: {type(model).__name__}")
    expiry = model.relative_time(option.expiry_date)
    if expiry <= 0.0:
        raise NumericalDomainError(f"만기가 지난 스왑션입니다 (만기 시점 {expiry:.6f})")

    dates, amounts = cash_flow_equivalent(option, rates)
    if option.is_payer:
        amounts = -amounts
    index = model.ibor_time_index([model.relative_time(d) for d in dates])
    if np.any(index >= len(model.ibor_times)):
        raise UnsupportedConfigurationError("스왑 현금흐름이 LMM 의 마지막 Ibor 시점 이후에 있습니다.")
    start, end = int(index.min()), int(index.max())
    flows = np.zeros(end - start + 1)
    np.add.at(flows, index - start, amounts)
    is_call = flows[0] < 0.0
    if not is_call:
        flows = -flows

    times = model.ibor_times[start:end + 1]
    df = np.array([rates.discount_factor(t) for t in times])
    gammas = model.volatilities[start:end]
    accruals = model.accrual_factors[start:end]
    displacements = model.displacements[start:end]
    forwards = (df[:-1] / df[1:] - 1.0) / accruals

    # 첫 흐름은 행사가로 분리
    bond_flows = np.concatenate(([0.0], flows[1:]))
    p0 = df / df[0]
    dp = bond_flows * p0
    b0 = float(np.sum(dp))
    strike = -float(flows[0])
    mid = 0.5 * (b0 + strike)
    impact = _mean_reversion_impact(model.mean_reversion, expiry)

    mu0 = _factor_loadings(forwards, displacements, accruals, gammas)
    tau2 = np.concatenate(([0.0], np.sum(mu0 ** 2, axis=1) * impact))
    tau = np.sqrt(tau2)
    x_bar = (np.sum(dp - 0.5 * dp * tau2) - mid) / np.sum(dp * tau)

    p_mid = p0 * (1.0 - x_bar * tau - 0.5 * tau2)
    forwards_mid = (p_mid[:-1] / p_mid[1:] - 1.0) / accruals
    weights = bond_flows * p_mid / mid
    mu_mid = _factor_loadings(forwards_mid, displacements, accruals, gammas)
    sigma_mid = weights[1:] @ mu_mid
    volatility = float(np.sqrt(sigma_mid @ sigma_mid * impact))
    logger.debug("LMM 스왑션 근사: B0 = %.6f, K = %.6f, 채권 변동성 = %.6f", b0, strike, volatility)

    pv = df[0] * black_swaption_price(b0, strike, volatility, 1.0, 1.0, is_payer=is_call)
    return float(pv if option.is_long else -pv)


def swaption_trade_price(trade: SwaptionTrade, rates, model: LiborMarketModelParameters) -> float:
    premium_pv = trade.premium * rates.discount_factor(trade.premium_date) if trade.premium else 0.0
    return swaption_price(trade.swaption, rates, model) - premium_pv
