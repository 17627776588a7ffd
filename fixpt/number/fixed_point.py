"""
定点数支持模块
有符号二进制定点数 FixedPoint[I, F]，不同位宽之间可以直接混合运算

存储字始终按 Q(32,32) 解释：高 32 位为整数部分，低 32 位为左对齐的小数部分。
实例只保存掩码后的字（位 [32-F, 31+I] 之外全为 0），读取时再做符号扩展。
"""

import math
import numbers
import operator
import re
from dataclasses import dataclass
from fractions import Fraction
from functools import cached_property, lru_cache
from typing import Any, Callable, Optional, Tuple, Union

import numpy as np

from fixpt.base.constants import (
    HALF_WORD_BITS, WORD_SCALE, FRACTION_MASK, WORD_MASK,
    MAX_INT_BITS, MAX_FRAC_BITS, FIXED_POINT_FORMATS, FIXED_POINT_PRECISION,
    DEFAULT_FIXED_POINT_FORMAT
)
from fixpt.base.exceptions import (
    FormatError, UnknownFormatError, DivisionByZeroError, InvalidValueError,
    validate_width
)
from fixpt.number.diagnostics import (
    OverflowKind, OverflowEvent, get_overflow_reporter, report_overflow
)

_FORMAT_PATTERN = re.compile(r'^Q(\d+)[_.](\d+)$')
_FLOAT_INTEGRAL_BOUND = 2.0 ** 53


@dataclass(frozen=True)
class FixedPointFormat:
    """定点数位宽描述：整数位（最高位为符号位）与小数位"""
    integer_bits: int
    fractional_bits: int

    def __post_init__(self):
        validate_width(self.integer_bits, self.fractional_bits)
        object.__setattr__(self, 'integer_bits', int(self.integer_bits))
        object.__setattr__(self, 'fractional_bits', int(self.fractional_bits))

    @property
    def name(self) -> str:
        return f"Q{self.integer_bits}_{self.fractional_bits}"

    @property
    def total_bits(self) -> int:
        return self.integer_bits + self.fractional_bits

    @property
    def shift(self) -> int:
        """小数最低有效位在存储字中的位置"""
        return HALF_WORD_BITS - self.fractional_bits

    @property
    def denominator(self) -> int:
        return 1 << self.fractional_bits

    @cached_property
    def mask(self) -> int:
        """保留位 [32-F, 31+I]"""
        high = (1 << (HALF_WORD_BITS + self.integer_bits)) - 1
        low = (1 << self.shift) - 1
        return high & ~low

    @cached_property
    def half(self) -> int:
        """目标精度的半个单位，F=32 时为 0（不舍入，向负无穷截断）"""
        if self.fractional_bits < MAX_FRAC_BITS:
            return 1 << (HALF_WORD_BITS - 1 - self.fractional_bits)
        return 0

    @property
    def min_value(self) -> float:
        return -(1 << (HALF_WORD_BITS - 1 + self.integer_bits)) / WORD_SCALE

    @property
    def max_value(self) -> float:
        return ((1 << (HALF_WORD_BITS - 1 + self.integer_bits)) - (1 << self.shift)) / WORD_SCALE

    @property
    def resolution(self) -> float:
        """最小可表示增量 2^-F"""
        return 1.0 / self.denominator

    @classmethod
    def parse(cls, spec: Any) -> 'FixedPointFormat':
        """
        解析位宽描述

        Args:
            spec: FixedPointFormat、(I, F) 元组或 'Q16_16' 形式的名称

        Returns:
            位宽描述
        """
        if isinstance(spec, cls):
            return spec
        if isinstance(spec, tuple) and len(spec) == 2:
            return cls(*spec)
        if isinstance(spec, str):
            if spec in FIXED_POINT_PRECISION:
                return cls(*FIXED_POINT_PRECISION[spec])
            match = _FORMAT_PATTERN.match(spec)
            if match:
                return cls(int(match.group(1)), int(match.group(2)))
        raise UnknownFormatError(repr(spec), FIXED_POINT_FORMATS)


FormatSpec = Union[FixedPointFormat, Tuple[int, int], str]


# 位操作工具函数

def sign_extend(word: int, int_bits: int) -> int:
    """
    符号扩展

    若位 31+I 为 1，则把符号位复制到其上所有位；否则原样返回。
    只依赖显式的位测试，不依赖负数移位语义。
    """
    sign_bit = 1 << (HALF_WORD_BITS - 1 + int_bits)
    if word & sign_bit:
        return word | ~((sign_bit << 1) - 1)
    return word


def render(value: int, frac_bits: int) -> str:
    """规范文本形式 '<整数部分> + <分子>/<2^F>'，value 为符号扩展后的 Q(32,32) 值"""
    integer = value >> HALF_WORD_BITS
    numerator = (value & FRACTION_MASK) >> (HALF_WORD_BITS - frac_bits)
    return f"{integer} + {numerator}/{1 << frac_bits}"


def round_and_mask(value: int, fmt: FixedPointFormat) -> int:
    """
    舍入并掩码

    1. F < 32 时加上目标精度的半个单位
    2. 若安装了报告器，检测溢出/下溢并报告
    3. 清除位 [32-F, 31+I] 以外的所有位

    Args:
        value: Q(32,32) 坐标下的有符号整数，可超出 64 位
        fmt: 目标位宽

    Returns:
        掩码后的存储字（非负）
    """
    value += fmt.half
    word = value & fmt.mask

    reporter = get_overflow_reporter()
    if reporter is not None:
        _check_overflow(value, word, fmt, reporter)

    return word


def _check_overflow(value: int, word: int, fmt: FixedPointFormat, reporter: Callable) -> None:
    """比较截断前后的值，不一致即为越界"""
    aligned = value & ~((1 << fmt.shift) - 1)
    truncated = sign_extend(word, fmt.integer_bits)
    if aligned == truncated:
        return

    kind = OverflowKind.OVERFLOW if aligned > truncated else OverflowKind.UNDERFLOW
    event = OverflowEvent(
        kind=kind,
        format_name=fmt.name,
        before=render(aligned, fmt.fractional_bits),
        after=render(truncated, fmt.fractional_bits)
    )
    report_overflow(reporter, event)


def _round_half_away(scaled: Union[float, Fraction]) -> int:
    """缩放后的浮点数或分数按远离零方向舍入到整数"""
    integer = int(scaled)
    # 减去自身整数部分是精确的
    if abs(scaled - integer) >= 0.5:
        integer += 1 if scaled > 0 else -1
    return integer


def _trunc_div(numerator: int, denominator: int) -> int:
    """向零截断的整数除法"""
    quotient = abs(numerator) // abs(denominator)
    return -quotient if (numerator < 0) != (denominator < 0) else quotient


def _to_q32(value: Any) -> int:
    """将构造参数转换为 Q(32,32) 坐标下的有符号整数（未舍入）"""
    if isinstance(value, FixedPoint):
        return value._sign_extended()
    if isinstance(value, numbers.Integral):
        return int(value) << HALF_WORD_BITS
    if isinstance(value, numbers.Rational):
        return _round_half_away(Fraction(value) * WORD_SCALE)
    if isinstance(value, numbers.Real):
        value = float(value)
        if not math.isfinite(value):
            raise InvalidValueError(value)
        # 绝对值不小于 2^53 的浮点数都是整数，直接移位，避免缩放后溢出为 inf
        if abs(value) >= _FLOAT_INTEGRAL_BOUND:
            return int(value) << HALF_WORD_BITS
        return _round_half_away(value * WORD_SCALE)
    raise TypeError(f"不支持的定点数构造参数类型: {type(value).__name__}")


class FixedPoint:
    """
    有符号定点数

    位宽是类型的一部分：FixedPoint[I, F] 返回缓存的子类，
    I、F 均在 [0, 32] 内且 I + F >= 1，否则在创建类型时抛出 InvalidWidthError。

    - 构造：FixedPoint[10, 10](3.25)、FixedPoint[10, 10](other)、FixedPoint[10, 10].from_parts(3, 256)
    - 加减：结果与左操作数同宽
    - 乘法：结果为 Q(min(I1+I2, 32), min(F1+F2, 32))
    - 除法：结果与左操作数同宽，除数为零时抛出 DivisionByZeroError
    - 比较：按符号扩展后的 Q(32,32) 值精确比较，不同位宽可直接比较
    - 复合赋值 (+=, -=, *=, /=) 原地修改接收者，位宽不变
    """

    __slots__ = ('_word',)

    INT_BITS: Optional[int] = None
    FRAC_BITS: Optional[int] = None
    FORMAT: Optional[FixedPointFormat] = None

    def __class_getitem__(cls, item: FormatSpec) -> type:
        return fixed_point_type(FixedPointFormat.parse(item))

    def __init__(self, value: Union[int, float, 'FixedPoint'] = 0):
        self._word = round_and_mask(_to_q32(value), self._format())

    @classmethod
    def _format(cls) -> FixedPointFormat:
        if cls.FORMAT is None:
            raise FormatError("未指定位宽，请使用 FixedPoint[I, F] 创建定点数类型", "MISSING_WIDTH")
        return cls.FORMAT

    @classmethod
    def _from_q32(cls, value: int) -> 'FixedPoint':
        """由 Q(32,32) 值直接构造，跳过参数转换"""
        instance = object.__new__(cls)
        instance._word = round_and_mask(value, cls._format())
        return instance

    @classmethod
    def from_parts(cls, integer: int, fraction: int = 0) -> 'FixedPoint':
        """
        由整数部分和小数分子构造

        Args:
            integer: 整数部分
            fraction: 以 2^F 为分母的小数分子，只取低 F 位

        Returns:
            定点数
        """
        fmt = cls._format()
        word = int(integer) << HALF_WORD_BITS
        word |= (int(fraction) & (fmt.denominator - 1)) << fmt.shift
        return cls._from_q32(word)

    @classmethod
    def from_raw(cls, word: int) -> 'FixedPoint':
        """由 64 位原始存储字构造（按 64 位补码解释）"""
        return cls._from_q32(sign_extend(int(word) & WORD_MASK, MAX_INT_BITS))

    def _sign_extended(self) -> int:
        return sign_extend(self._word, self.INT_BITS)

    # 基本属性

    @property
    def int_bits(self) -> int:
        return self.INT_BITS

    @property
    def frac_bits(self) -> int:
        return self.FRAC_BITS

    @property
    def fmt(self) -> FixedPointFormat:
        return self.FORMAT

    @property
    def raw_word(self) -> int:
        """掩码后的 64 位存储字"""
        return self._word

    def get_int(self) -> int:
        """有符号整数部分（向负无穷取整）"""
        return self._sign_extended() >> HALF_WORD_BITS

    def get_frac(self) -> int:
        """存储字的低 32 位"""
        return self._word & FRACTION_MASK

    def frac_quotient(self) -> str:
        """小数部分的分数形式 '<分子>/<2^F>'"""
        numerator = (self._word & FRACTION_MASK) >> self.FORMAT.shift
        return f"{numerator}/{self.FORMAT.denominator}"

    def to_float(self) -> float:
        """转换为浮点数（显式调用，位数较多时有精度损失）"""
        return self._sign_extended() / WORD_SCALE

    def copy(self) -> 'FixedPoint':
        instance = object.__new__(type(self))
        instance._word = self._word
        return instance

    def __reduce__(self):
        return (_restore, (self.INT_BITS, self.FRAC_BITS, self._word))

    def __str__(self) -> str:
        return render(self._sign_extended(), self.FRAC_BITS)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(value={self.to_float()!r}, raw=0x{self._word:016x})"

    def __bool__(self) -> bool:
        return self._word != 0

    # 操作数转换

    def _coerce(self, other: Any) -> Optional['FixedPoint']:
        """FixedPoint 原样返回，原生数值按本操作数位宽构造，其它类型返回 None"""
        if isinstance(other, FixedPoint):
            return other
        if isinstance(other, numbers.Real):
            return type(self)(other)
        return None

    # 一元运算

    def __neg__(self) -> 'FixedPoint':
        return type(self)._from_q32(-self._sign_extended())

    def __pos__(self) -> 'FixedPoint':
        return type(self)._from_q32(self._sign_extended())

    def __abs__(self) -> 'FixedPoint':
        return type(self)._from_q32(abs(self._sign_extended()))

    # 加减法：结果与左操作数同宽

    def __add__(self, other: Any) -> 'FixedPoint':
        other = self._coerce(other)
        if other is None:
            return NotImplemented
        return type(self)._from_q32(self._sign_extended() + other._sign_extended())

    def __radd__(self, other: Any) -> 'FixedPoint':
        if not isinstance(other, numbers.Real):
            return NotImplemented
        return type(self)._from_q32(type(self)(other)._sign_extended() + self._sign_extended())

    def __sub__(self, other: Any) -> 'FixedPoint':
        other = self._coerce(other)
        if other is None:
            return NotImplemented
        return type(self)._from_q32(self._sign_extended() - other._sign_extended())

    def __rsub__(self, other: Any) -> 'FixedPoint':
        if not isinstance(other, numbers.Real):
            return NotImplemented
        return type(self)._from_q32(type(self)(other)._sign_extended() - self._sign_extended())

    # 乘法：结果位宽为两操作数位宽之和（各自不超过 32）

    def __mul__(self, other: Any) -> 'FixedPoint':
        other = self._coerce(other)
        if other is None:
            return NotImplemented
        return _multiply(self, other)

    def __rmul__(self, other: Any) -> 'FixedPoint':
        if not isinstance(other, numbers.Real):
            return NotImplemented
        return _multiply(type(self)(other), self)

    # 除法：结果与左操作数同宽

    def __truediv__(self, other: Any) -> 'FixedPoint':
        if isinstance(other, numbers.Integral):
            return self._divide_int(int(other))
        other = self._coerce(other)
        if other is None:
            return NotImplemented
        return self._divide(other)

    def __rtruediv__(self, other: Any) -> 'FixedPoint':
        if not isinstance(other, numbers.Real):
            return NotImplemented
        return type(self)(other)._divide(self)

    def _divide(self, other: 'FixedPoint') -> 'FixedPoint':
        """
        定点数除法，商向零截断

        掩码只保留位 63 及以下，结果与先把商收窄到 64 位一致；
        溢出报告中的截断前文本给出的是未收窄的完整商。
        """
        divisor = other._sign_extended()
        if divisor == 0:
            raise DivisionByZeroError(str(self))
        quotient = _trunc_div(self._sign_extended() << HALF_WORD_BITS, divisor)
        return type(self)._from_q32(quotient)

    def _divide_int(self, divisor: int) -> 'FixedPoint':
        if divisor == 0:
            raise DivisionByZeroError(str(self))
        return type(self)._from_q32(_trunc_div(self._sign_extended(), divisor))

    # 复合赋值：原地修改，位宽不变

    def _assign(self, result: Any) -> 'FixedPoint':
        if result is NotImplemented:
            return NotImplemented
        if type(result) is type(self):
            self._word = result._word
        else:
            # 乘积已按乘积位宽舍入一次，这里再舍入到接收者位宽
            self._word = round_and_mask(result._sign_extended(), self.FORMAT)
        return self

    def __iadd__(self, other: Any) -> 'FixedPoint':
        return self._assign(self.__add__(other))

    def __isub__(self, other: Any) -> 'FixedPoint':
        return self._assign(self.__sub__(other))

    def __imul__(self, other: Any) -> 'FixedPoint':
        return self._assign(self.__mul__(other))

    def __itruediv__(self, other: Any) -> 'FixedPoint':
        return self._assign(self.__truediv__(other))

    # 比较：精确比较，无舍入

    def _compare(self, other: Any, op: Callable[[Any, Any], bool]) -> bool:
        if isinstance(other, FixedPoint):
            return op(self._sign_extended(), other._sign_extended())
        if isinstance(other, numbers.Integral):
            return op(self._sign_extended(), int(other) << HALF_WORD_BITS)
        if isinstance(other, numbers.Rational):
            return op(Fraction(self._sign_extended(), WORD_SCALE), Fraction(other))
        if isinstance(other, numbers.Real):
            # Fraction 与 float 的比较是精确的，并能处理 nan/inf
            return op(Fraction(self._sign_extended(), WORD_SCALE), float(other))
        return NotImplemented

    def __eq__(self, other: Any) -> bool:
        return self._compare(other, operator.eq)

    def __ne__(self, other: Any) -> bool:
        return self._compare(other, operator.ne)

    def __lt__(self, other: Any) -> bool:
        return self._compare(other, operator.lt)

    def __le__(self, other: Any) -> bool:
        return self._compare(other, operator.le)

    def __gt__(self, other: Any) -> bool:
        return self._compare(other, operator.gt)

    def __ge__(self, other: Any) -> bool:
        return self._compare(other, operator.ge)

    # 复合赋值会修改实例，不可哈希
    __hash__ = None


def _multiply(lhs: FixedPoint, rhs: FixedPoint) -> FixedPoint:
    """
    定点数乘法

    两个操作数的总位数都不超过 32 时走快速路径：取出各自的有效位，
    作为 64 位整数相乘后再移回 Q(32,32)；否则用任意精度整数求精确乘积。
    两条路径在重叠区间内逐位一致（乘积都是向负无穷取整）。
    """
    lfmt, rfmt = lhs.FORMAT, rhs.FORMAT
    result_type = fixed_point_type(FixedPointFormat(
        min(lfmt.integer_bits + rfmt.integer_bits, MAX_INT_BITS),
        min(lfmt.fractional_bits + rfmt.fractional_bits, MAX_FRAC_BITS)
    ))

    if lfmt.total_bits <= HALF_WORD_BITS and rfmt.total_bits <= HALF_WORD_BITS:
        # 有效位都不超过 32 位，乘积绝对值不超过 2^62
        product = int(np.int64(lhs._sign_extended() >> lfmt.shift) *
                      np.int64(rhs._sign_extended() >> rfmt.shift))
        exponent = lfmt.fractional_bits + rfmt.fractional_bits - HALF_WORD_BITS
        if exponent >= 0:
            product >>= exponent
        else:
            product <<= -exponent
    else:
        product = (lhs._sign_extended() * rhs._sign_extended()) >> HALF_WORD_BITS

    return result_type._from_q32(product)


@lru_cache(maxsize=None)
def fixed_point_type(fmt: FixedPointFormat) -> type:
    """创建（并缓存）指定位宽的定点数类型"""
    name = f"FixedPoint[{fmt.integer_bits}, {fmt.fractional_bits}]"
    return type(name, (FixedPoint,), {
        '__slots__': (),
        '__module__': __name__,
        '__qualname__': name,
        'INT_BITS': fmt.integer_bits,
        'FRAC_BITS': fmt.fractional_bits,
        'FORMAT': fmt
    })


def _restore(int_bits: int, frac_bits: int, word: int) -> FixedPoint:
    """反序列化入口"""
    cls = fixed_point_type(FixedPointFormat(int_bits, frac_bits))
    instance = object.__new__(cls)
    instance._word = word
    return instance


# 便捷函数
def create_fixed_point(value: Union[float, int, FixedPoint],
                       format: FormatSpec = DEFAULT_FIXED_POINT_FORMAT) -> FixedPoint:
    """创建定点数"""
    return FixedPoint[FixedPointFormat.parse(format)](value)
