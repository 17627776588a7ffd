"""
fixpt 核心模块
通用有符号二进制定点数类型
"""

from .base import *
from .number import *

__version__ = VERSION_INFO['version']
__author__ = VERSION_INFO['author']
__description__ = VERSION_INFO['description']

# 模块导出
__all__ = [
    # 版本信息
    '__version__', '__author__', '__description__',

    # 定点数
    'FixedPoint', 'FixedPointFormat', 'fixed_point_type', 'create_fixed_point',
    'overflow_reporting', 'LoggingOverflowReporter', 'CollectingOverflowReporter',

    # 异常
    'FixedPointBaseException', 'InvalidWidthError', 'DivisionByZeroError',
    'InvalidValueError', 'OverflowTruncation'
]
