# -*- coding: utf-8 -*-
"""
G2++ 스왑션 해석적 가격결정
===========================

Brigo & Mercurio (4.31)의 가우스-에르미트 구적법 해법을 다중 곡선 현금흐름
동등치로 일반화합니다. 만기 T의 T-선도 측도에서 x ~ N(μx, σx²) 를 적분하고,
각 노드에서 스왑 가치가 0 이 되는 ȳ 를 찾습니다::

    price = P(0,T) ∫ φ(x) Σ ω d_i λ_i(x) e^{κ_i(x)} N(-ω h2_i(x)) dx

d_i 는 지급 스왑(고정 지급) 현금흐름, ω = 1 (payer), -1 (receiver).
"""

from math import sqrt

import numpy as np
from numpy.polynomial.hermite import hermgauss
from scipy.stats import norm

from .hull_white import bracket_root, cash_flow_equivalent
from ..errors import NumericalDomainError
from ..models.g2pp import B, G2ppParameters, calculate_V
from ..products.swaption import Swaption, SwaptionTrade

HERMITE_NODES = 20


def _forward_measure_moments(params: G2ppParameters, expiry: float):
    """T-선도 측도에서 (μx, μy, σx, σy, ρxy)."""
    a, b, sigma, eta, rho = params.a, params.b, params.sigma, params.eta, params.rho
    T = expiry
    cross = rho * sigma * eta
    mu_x = (-(sigma**2 / a**2 + cross / (a * b)) * (1 - np.exp(-a * T))
            + sigma**2 / (2 * a**2) * (1 - np.exp(-2 * a * T))
            + cross / (b * (a + b)) * (1 - np.exp(-(a + b) * T)))
    mu_y = (-(eta**2 / b**2 + cross / (a * b)) * (1 - np.exp(-b * T))
            + eta**2 / (2 * b**2) * (1 - np.exp(-2 * b * T))
            + cross / (a * (a + b)) * (1 - np.exp(-(a + b) * T)))
    sigma_x = sigma * sqrt((1 - np.exp(-2 * a * T)) / (2 * a))
    sigma_y = eta * sqrt((1 - np.exp(-2 * b * T)) / (2 * b))
    rho_xy = cross / ((a + b) * sigma_x * sigma_y) * (1 - np.exp(-(a + b) * T))
    return mu_x, mu_y, sigma_x, sigma_y, rho_xy


def price_swaption_g2_analytic(option: Swaption, rates, model: G2ppParameters) -> float:
    expiry = model.relative_time(option.expiry_date)
    if expiry <= 0.0:
        raise NumericalDomainError(f"만기가 평가일 이전인 스왑션입니다: {option.expiry_date}")
    dates, receiver_flows = cash_flow_equivalent(option, rates)
    payer_flows = -receiver_flows
    times = [model.relative_time(d) for d in dates]
    df_expiry = rates.discount_factor(option.expiry_date)

    v_0T = calculate_V(0.0, expiry, model)
    # A(T, t_i), B_a(T, t_i), B_b(T, t_i)
    A = np.array([rates.discount_factor(d) / df_expiry
                  * np.exp(0.5 * (calculate_V(expiry, t, model) - calculate_V(0.0, t, model) + v_0T))
                  for d, t in zip(dates, times)])
    B_a = np.array([B(model.a, expiry, t) for t in times])
    B_b = np.array([B(model.b, expiry, t) for t in times])

    mu_x, mu_y, sigma_x, sigma_y, rho_xy = _forward_measure_moments(model, expiry)
    if sigma_x <= 1e-12 or sigma_y <= 1e-12 or abs(rho_xy) >= 1.0:
        raise NumericalDomainError(f"G2++ 분포 모수가 유효하지 않습니다: σx={sigma_x}, σy={sigma_y}, ρxy={rho_xy}")
    s = sigma_y * sqrt(1 - rho_xy**2)
    omega = 1.0 if option.is_payer else -1.0

    nodes, weights = hermgauss(HERMITE_NODES)
    integral = 0.0
    for node, weight in zip(nodes, weights):
        x = mu_x + sqrt(2.0) * sigma_x * node
        lam = payer_flows * A * np.exp(-B_a * x)

        # 스왑 가치가 0이 되는 y_bar
        y_bar = bracket_root(lambda y: float(np.sum(lam * np.exp(-B_b * y))), -0.1, 0.1, limit=20.0)

        mean = mu_y + rho_xy * sigma_y * (x - mu_x) / sigma_x
        h1 = (y_bar - mean) / s
        kappa = -B_b * mean + 0.5 * B_b**2 * s**2
        h2 = h1 + B_b * s
        integral += weight * float(np.sum(omega * lam * np.exp(kappa) * norm.cdf(-omega * h2)))

    pv = df_expiry * integral / sqrt(np.pi)
    return pv if option.is_long else -pv


def swaption_trade_price(trade: SwaptionTrade, rates, model: G2ppParameters) -> float:
    premium_pv = trade.premium * rates.discount_factor(trade.premium_date) if trade.premium else 0.0
    return price_swaption_g2_analytic(trade.swaption, rates, model) - premium_pv
