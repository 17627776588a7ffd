"""
定点数模块
提供有符号定点数类型及溢出诊断
"""

from .diagnostics import (
    OverflowKind,
    OverflowEvent,
    LoggingOverflowReporter,
    CollectingOverflowReporter,
    get_overflow_reporter,
    set_overflow_reporter,
    reset_overflow_reporter,
    overflow_reporting
)

from .fixed_point import (
    FixedPointFormat,
    FixedPoint,
    fixed_point_type,
    sign_extend,
    round_and_mask,
    render,
    create_fixed_point
)

__all__ = [
    # 溢出诊断
    'OverflowKind', 'OverflowEvent', 'LoggingOverflowReporter',
    'CollectingOverflowReporter', 'get_overflow_reporter', 'set_overflow_reporter',
    'reset_overflow_reporter', 'overflow_reporting',

    # 定点数
    'FixedPointFormat', 'FixedPoint', 'fixed_point_type', 'sign_extend',
    'round_and_mask', 'render', 'create_fixed_point'
]
