"""
评估模块
提供定点数运算的精度评估功能
"""

from .accuracy import (
    AccuracyMetrics,
    AccuracyEvaluator,
    sample_values,
    get_accuracy_evaluator
)

__all__ = [
    # 精度评估
    'AccuracyMetrics', 'AccuracyEvaluator', 'sample_values', 'get_accuracy_evaluator'
]
