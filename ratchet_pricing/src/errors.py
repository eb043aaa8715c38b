# -*- coding: utf-8 -*-
"""
예외 정의
=========

보정 엔진과 몬테카를로 엔진이 사용하는 예외 클래스들입니다.
모든 오류는 호출자에게 그대로 전달되며 내부에서 재시도하지 않습니다.
"""

import numpy as np


class RatchetPricingError(RuntimeError):
    """패키지 공통 기본 예외."""


class CalibrationError(RatchetPricingError):
    """보정 과정에서 발생하는 오류의 기본 클래스."""


class DimensionMismatchError(CalibrationError, ValueError):
    """자유 파라미터 수와 상품 수가 일치하지 않을 때."""

    def __init__(self, instruments_count: int, free_count: int):
        super().__init__(
            f"상품 수({instruments_count})와 자유 파라미터 수({free_count})가 같아야 합니다."
        )
        self.instruments_count = instruments_count
        self.free_count = free_count


class NonConvergenceError(CalibrationError):
    """최대 스텝 수 안에 허용오차를 만족하지 못했을 때."""

    def __init__(self, message: str, steps: int):
        super().__init__(f"{message} (스텝 {steps}회)")
        self.steps = steps


class SingularJacobianError(CalibrationError, np.linalg.LinAlgError):
    """야코비안이 수치적으로 특이할 때 (분해 실패)."""


class NumericalDomainError(RatchetPricingError, ArithmeticError):
    """모형 전이 단계가 유한하지 않거나 정의역을 벗어난 상태를 만들 때."""


class UnsupportedConfigurationError(RatchetPricingError, NotImplementedError):
    """구현되지 않은 기능 조합이 요청되었을 때."""
