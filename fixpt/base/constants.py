"""
常量定义模块
统一管理定点数位布局、命名格式以及日志等常量
"""

import math
from typing import Tuple, List, Dict

# =============================================================================
# 存储字布局
# =============================================================================

# 存储字总位宽，内部始终按 Q(32,32) 解释
WORD_BITS: int = 64

# 整数部分与小数部分在存储字中各占 32 位
HALF_WORD_BITS: int = 32

# 缩放因子 2^32
WORD_SCALE: int = 1 << HALF_WORD_BITS

# 低 32 位（小数部分）掩码
FRACTION_MASK: int = (1 << HALF_WORD_BITS) - 1

# 64 位无符号掩码
WORD_MASK: int = (1 << WORD_BITS) - 1

# 位宽参数范围 (min, max)
MAX_INT_BITS: int = 32
MAX_FRAC_BITS: int = 32
BIT_RANGE: Tuple[int, int] = (0, 32)

# =============================================================================
# 定点数格式
# =============================================================================

# 定点数格式
FIXED_POINT_FORMATS: List[str] = ['Q8_8', 'Q10_10', 'Q12_12', 'Q16_16', 'Q32_32', 'Q8_24', 'Q3_30', 'Q3_32']
DEFAULT_FIXED_POINT_FORMAT: str = 'Q16_16'

# 定点数精度 (整数位, 小数位)
FIXED_POINT_PRECISION: Dict[str, Tuple[int, int]] = {
    'Q8_8': (8, 8),
    'Q10_10': (10, 10),
    'Q12_12': (12, 12),
    'Q16_16': (16, 16),
    'Q32_32': (32, 32),
    'Q8_24': (8, 24),
    'Q3_30': (3, 30),
    'Q3_32': (3, 32)
}

# =============================================================================
# 数值评估参数
# =============================================================================

MATH_CONSTANTS: Dict[str, float] = {
    'PI': math.pi,
    'E': math.e
}

# Leibniz 级数收敛阈值
LEIBNIZ_TOLERANCE: float = 1e-6
LEIBNIZ_TERMS: int = 10_000_000

# =============================================================================
# 日志配置
# =============================================================================

# 日志级别
LOG_LEVELS: List[str] = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
DEFAULT_LOG_LEVEL: str = 'INFO'

# 日志格式
LOG_FORMAT: str = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_DATE_FORMAT: str = '%Y-%m-%d %H:%M:%S'

# 日志器名称
LOGGER_NAME: str = 'fixpt'

# =============================================================================
# 配置文件
# =============================================================================

DEFAULT_CONFIG_FILE: str = 'fixpt.json'

# =============================================================================
# 版本信息
# =============================================================================

VERSION_INFO: Dict[str, str] = {
    'version': '1.0.0',
    'author': 'fixpt Team',
    'description': '通用有符号二进制定点数类型'
}
