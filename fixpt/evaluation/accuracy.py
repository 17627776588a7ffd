"""
精度评估模块
用已知结果的数值实验检验定点数运算的精度
"""

import math
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import numpy as np

from fixpt.base.constants import LEIBNIZ_TOLERANCE, LEIBNIZ_TERMS, MATH_CONSTANTS
from fixpt.base.logs import get_logger, log_execution_time
from fixpt.number.fixed_point import FixedPoint, FixedPointFormat, FormatSpec


@dataclass
class AccuracyMetrics:
    """精度指标"""
    name: str
    format_name: str
    max_error: float
    mean_error: float
    tolerance: float
    passed_threshold: bool


class AccuracyEvaluator:
    """精度评估器"""

    def __init__(self):
        self.logger = get_logger()

    def _log_result(self, metrics: AccuracyMetrics) -> None:
        status = "通过" if metrics.passed_threshold else "失败"
        message = (f"精度测试 {status}: {metrics.name} ({metrics.format_name}), "
                   f"最大误差: {metrics.max_error:.2e}, "
                   f"阈值: {metrics.tolerance:.2e}")
        if metrics.passed_threshold:
            self.logger.info(message)
        else:
            self.logger.error(message)

    @log_execution_time("leibniz_pi")
    def leibniz_pi(self, terms: int = LEIBNIZ_TERMS,
                   accumulator_format: FormatSpec = 'Q3_32',
                   term_format: FormatSpec = 'Q3_30',
                   tolerance: float = LEIBNIZ_TOLERANCE) -> Tuple[FixedPoint, AccuracyMetrics]:
        """
        用 Leibniz 级数计算 π

        直接累加 4/(2k+1)。首项 4 超出 3 位整数的范围 [-4, 4)，按模 8 回绕；
        加减法同样按模 8 回绕，回绕在后续各项中抵消，累加结果落回范围内。

        Args:
            terms: 级数项数
            accumulator_format: 累加器位宽
            term_format: 每一项的位宽
            tolerance: 允许的绝对误差

        Returns:
            (π 的定点数结果, 精度指标)
        """
        if terms < 1:
            raise ValueError(f"级数项数必须大于 0: {terms}")

        accumulator_type = FixedPoint[FixedPointFormat.parse(accumulator_format)]
        term_type = FixedPoint[FixedPointFormat.parse(term_format)]

        accumulator = accumulator_type()
        for k in range(terms):
            term = term_type(4.0 / (2 * k + 1))
            if k % 2:
                accumulator -= term
            else:
                accumulator += term

        error = abs(accumulator.to_float() - MATH_CONSTANTS['PI'])

        metrics = AccuracyMetrics(
            name=f"leibniz_pi[{terms}]",
            format_name=accumulator_type.FORMAT.name,
            max_error=error,
            mean_error=error,
            tolerance=tolerance,
            passed_threshold=error <= tolerance
        )
        self._log_result(metrics)
        return accumulator, metrics

    def round_trip(self, values: Sequence[float], fmt: FormatSpec,
                   tolerance: Optional[float] = None) -> AccuracyMetrics:
        """
        浮点数 -> 定点数 -> 浮点数 往返误差

        Args:
            values: 位于格式表示范围内的浮点数
            fmt: 定点数位宽
            tolerance: 允许误差，默认为一个最小增量 2^-F

        Returns:
            精度指标
        """
        fmt = FixedPointFormat.parse(fmt)
        fixed_type = FixedPoint[fmt]
        if tolerance is None:
            tolerance = fmt.resolution

        samples = np.asarray(values, dtype=np.float64)
        if samples.size == 0:
            raise ValueError("往返测试至少需要一个样本")

        converted = np.array([fixed_type(float(v)).to_float() for v in samples])
        errors = np.abs(converted - samples)

        metrics = AccuracyMetrics(
            name="round_trip",
            format_name=fmt.name,
            max_error=float(np.max(errors)),
            mean_error=float(np.mean(errors)),
            tolerance=tolerance,
            passed_threshold=bool(np.max(errors) <= tolerance)
        )
        self._log_result(metrics)
        return metrics


def sample_values(fmt: FormatSpec, count: int, seed: int = 0,
                  representable: bool = False) -> np.ndarray:
    """
    在格式的表示范围内生成随机样本

    Args:
        fmt: 定点数位宽
        count: 样本数
        seed: 随机种子
        representable: 为 True 时只生成可精确表示的值

    Returns:
        float64 样本数组
    """
    fmt = FixedPointFormat.parse(fmt)
    rng = np.random.default_rng(seed)
    if representable:
        low = int(math.floor(fmt.min_value * fmt.denominator))
        high = int(math.floor(fmt.max_value * fmt.denominator))
        steps = rng.integers(low, high, size=count, endpoint=True)
        return steps.astype(np.float64) / fmt.denominator
    return rng.uniform(fmt.min_value, fmt.max_value, size=count)


# 全局实例
_accuracy_evaluator: Optional[AccuracyEvaluator] = None


def get_accuracy_evaluator() -> AccuracyEvaluator:
    """获取精度评估器实例"""
    global _accuracy_evaluator
    if _accuracy_evaluator is None:
        _accuracy_evaluator = AccuracyEvaluator()
    return _accuracy_evaluator
