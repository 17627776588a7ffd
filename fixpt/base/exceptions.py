"""
异常定义模块
定义定点数库中使用的所有自定义异常类
"""

import numbers
from typing import Optional, Any

from .constants import BIT_RANGE


class FixedPointBaseException(Exception):
    """定点数库基础异常类"""

    def __init__(self, message: str, error_code: Optional[str] = None, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details

    def __str__(self) -> str:
        if self.error_code:
            return f"[{self.error_code}] {self.message}"
        return self.message


class ConfigurationError(FixedPointBaseException):
    """配置相关异常"""
    pass


class FormatError(FixedPointBaseException):
    """定点数格式相关异常"""
    pass


class NumericalError(FixedPointBaseException):
    """数值计算异常"""
    pass


# 具体的异常类定义

class InvalidWidthError(FormatError):
    """无效位宽异常"""

    def __init__(self, int_bits: Any, frac_bits: Any):
        low, high = BIT_RANGE
        message = (f"无效的定点数位宽: 整数位 {int_bits}, 小数位 {frac_bits}, "
                   f"两者都应在 {low}-{high} 之间且总位数不小于 1")
        super().__init__(message, "INVALID_WIDTH", {
            'int_bits': int_bits,
            'frac_bits': frac_bits
        })


class UnknownFormatError(FormatError):
    """未知命名格式异常"""

    def __init__(self, name: str, supported_formats: list):
        message = f"不支持的定点数格式: {name}, 支持的格式: {supported_formats}"
        super().__init__(message, "UNKNOWN_FORMAT", {
            'name': name,
            'supported_formats': supported_formats
        })


class DivisionByZeroError(NumericalError, ZeroDivisionError):
    """定点数除零异常"""

    def __init__(self, dividend: str):
        message = f"定点数除法除零: {dividend} / 0"
        super().__init__(message, "DIVISION_BY_ZERO", {'dividend': dividend})


class InvalidValueError(NumericalError, ValueError):
    """无法表示的输入值异常（NaN、无穷大）"""

    def __init__(self, value: Any):
        message = f"无法转换为定点数的值: {value!r}"
        super().__init__(message, "INVALID_VALUE", {'value': value})


class OverflowTruncation(NumericalError):
    """
    溢出截断事件

    运算本身不会抛出该异常，结果按位宽截断；
    仅在诊断回调中作为事件描述使用。
    """

    def __init__(self, kind: str, format_name: str, before: str, after: str):
        message = f"定点数{kind}: {format_name} {before} -> {after}"
        super().__init__(message, "OVERFLOW_TRUNCATION", {
            'kind': kind,
            'format': format_name,
            'before': before,
            'after': after
        })


class ConfigParseError(ConfigurationError):
    """配置文件解析异常"""

    def __init__(self, config_file: str, parse_error: str):
        message = f"配置文件解析失败: {config_file}, 错误: {parse_error}"
        super().__init__(message, "CONFIG_PARSE_ERROR", {
            'config_file': config_file,
            'parse_error': parse_error
        })


# 异常处理工具函数

def handle_exception(exception: Exception, context: str = "") -> str:
    """
    统一异常处理函数

    Args:
        exception: 异常对象
        context: 异常上下文信息

    Returns:
        格式化的错误消息
    """
    if isinstance(exception, FixedPointBaseException):
        error_msg = str(exception)
    else:
        error_msg = f"未处理的异常: {type(exception).__name__}: {str(exception)}"
    if context:
        error_msg = f"[{context}] {error_msg}"
    return error_msg


def validate_width(int_bits: int, frac_bits: int) -> None:
    """
    验证定点数位宽

    Args:
        int_bits: 整数位数（含符号位）
        frac_bits: 小数位数

    Raises:
        InvalidWidthError: 位宽不合法时抛出
    """
    low, high = BIT_RANGE
    for bits in (int_bits, frac_bits):
        # bool 是 int 的子类，这里单独排除
        if isinstance(bits, bool) or not isinstance(bits, numbers.Integral):
            raise InvalidWidthError(int_bits, frac_bits)
        if not (low <= bits <= high):
            raise InvalidWidthError(int_bits, frac_bits)
    if int_bits + frac_bits < 1:
        raise InvalidWidthError(int_bits, frac_bits)
