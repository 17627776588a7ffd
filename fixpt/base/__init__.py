"""
基础模块
包含常量定义、异常处理和日志系统
"""

from .constants import (
    WORD_BITS,
    HALF_WORD_BITS,
    WORD_SCALE,
    FRACTION_MASK,
    WORD_MASK,
    MAX_INT_BITS,
    MAX_FRAC_BITS,
    BIT_RANGE,
    FIXED_POINT_FORMATS,
    DEFAULT_FIXED_POINT_FORMAT,
    FIXED_POINT_PRECISION,
    MATH_CONSTANTS,
    LEIBNIZ_TOLERANCE,
    LEIBNIZ_TERMS,
    LOG_LEVELS,
    DEFAULT_LOG_LEVEL,
    LOG_FORMAT,
    LOG_DATE_FORMAT,
    LOGGER_NAME,
    DEFAULT_CONFIG_FILE,
    VERSION_INFO
)

from .exceptions import (
    FixedPointBaseException,
    ConfigurationError,
    FormatError,
    NumericalError,
    InvalidWidthError,
    UnknownFormatError,
    DivisionByZeroError,
    InvalidValueError,
    OverflowTruncation,
    ConfigParseError,
    handle_exception,
    validate_width
)

from .logs import (
    ColoredFormatter,
    FixptLogger,
    get_logger,
    setup_logging,
    log_execution_time
)

__all__ = [
    # 常量
    'WORD_BITS', 'HALF_WORD_BITS', 'WORD_SCALE', 'FRACTION_MASK', 'WORD_MASK',
    'MAX_INT_BITS', 'MAX_FRAC_BITS', 'BIT_RANGE', 'FIXED_POINT_FORMATS',
    'DEFAULT_FIXED_POINT_FORMAT', 'FIXED_POINT_PRECISION', 'MATH_CONSTANTS',
    'LEIBNIZ_TOLERANCE', 'LEIBNIZ_TERMS', 'LOG_LEVELS', 'DEFAULT_LOG_LEVEL',
    'LOG_FORMAT', 'LOG_DATE_FORMAT', 'LOGGER_NAME', 'DEFAULT_CONFIG_FILE',
    'VERSION_INFO',

    # 异常
    'FixedPointBaseException', 'ConfigurationError', 'FormatError',
    'NumericalError', 'InvalidWidthError', 'UnknownFormatError',
    'DivisionByZeroError', 'InvalidValueError', 'OverflowTruncation',
    'ConfigParseError', 'handle_exception', 'validate_width',

    # 日志
    'ColoredFormatter', 'FixptLogger', 'get_logger', 'setup_logging',
    'log_execution_time'
]
