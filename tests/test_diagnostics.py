"""
溢出诊断测试模块
提供溢出/下溢报告器的功能测试
"""

import logging
import pytest

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from fixpt import FixedPoint
from fixpt.base.exceptions import OverflowTruncation
from fixpt.base.logs import get_logger
from fixpt.number import (
    OverflowKind, CollectingOverflowReporter, LoggingOverflowReporter,
    get_overflow_reporter, set_overflow_reporter, reset_overflow_reporter, overflow_reporting
)


class ListHandler(logging.Handler):
    """收集日志记录的处理器"""

    def __init__(self):
        super().__init__(level=logging.DEBUG)
        self.records = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)


class TestOverflowReporting:
    """溢出报告测试类"""

    def setup_method(self):
        """测试前准备"""
        self.collector = CollectingOverflowReporter()

    def test_disabled_by_default(self):
        """测试默认不安装报告器"""
        assert get_overflow_reporter() is None
        result = FixedPoint[4, 4](7.5) + FixedPoint[4, 4](1.0)
        assert str(result) == "-8 + 8/16"

    def test_overflow_reported(self):
        """测试上溢报告"""
        with overflow_reporting(self.collector):
            result = FixedPoint[4, 4](7.5) + FixedPoint[4, 4](1.0)

        assert str(result) == "-8 + 8/16"
        assert len(self.collector) == 1
        event = self.collector.events[0]
        assert event.kind is OverflowKind.OVERFLOW
        assert event.format_name == 'Q4_4'
        assert event.before == "8 + 8/16"
        assert event.after == "-8 + 8/16"

    def test_underflow_reported(self):
        """测试下溢报告"""
        with overflow_reporting(self.collector):
            result = FixedPoint[4, 4](-8.0) - FixedPoint[4, 4](0.5)

        assert str(result) == "7 + 8/16"
        event = self.collector.events[0]
        assert event.kind is OverflowKind.UNDERFLOW
        assert event.before == "-9 + 8/16"
        assert event.after == "7 + 8/16"

    def test_construction_overflow_reported(self):
        """测试构造时的溢出报告"""
        with overflow_reporting(self.collector):
            value = FixedPoint[4, 4](100.0)

        assert value == 4
        assert self.collector.events[0].before == "100 + 0/16"
        assert self.collector.events[0].after == "4 + 0/16"

    def test_huge_float_construction_reported(self):
        """测试超大有限浮点数构造时报告上溢"""
        with overflow_reporting(self.collector):
            value = FixedPoint[8, 8](1e300)

        assert value == 0
        event = self.collector.events[0]
        assert event.kind is OverflowKind.OVERFLOW
        assert event.before.startswith(f"{int(1e300)} + ")
        assert event.after == "0 + 0/256"

        with overflow_reporting(self.collector):
            FixedPoint[8, 8](-1e300)
        assert self.collector.events[1].kind is OverflowKind.UNDERFLOW

    def test_division_overflow_reported(self):
        """测试除法溢出报告完整的商"""
        with overflow_reporting(self.collector):
            result = FixedPoint[4, 4](7.0) / FixedPoint[4, 4](0.0625)

        assert str(result) == "0 + 0/16"
        event = self.collector.events[0]
        assert event.kind is OverflowKind.OVERFLOW
        assert event.before == "112 + 0/16"
        assert event.after == "0 + 0/16"

    def test_division_beyond_64_bits(self):
        """测试商超出 64 位时结果与收窄到 64 位一致"""
        dividend = FixedPoint[32, 32](2 ** 30)
        divisor = FixedPoint[32, 32].from_raw(1)
        with overflow_reporting(self.collector):
            result = dividend / divisor

        assert result.raw_word == (2 ** 94) & (2 ** 64 - 1)
        assert str(result) == "0 + 0/4294967296"
        assert self.collector.events[0].before == "4611686018427387904 + 0/4294967296"

    def test_in_range_not_reported(self):
        """测试范围内运算不产生事件"""
        with overflow_reporting(self.collector):
            FixedPoint[10, 10](3.25) + FixedPoint[11, 11](7.5)
            FixedPoint[10, 10](-7.02) * FixedPoint[10, 10](1.925)
            FixedPoint[12, 12](-0.0002)
            -FixedPoint[4, 4](7.5)

        assert len(self.collector) == 0

    def test_reporting_does_not_change_result(self):
        """测试报告不影响截断结果"""
        plain = FixedPoint[20, 4](300000.0) * FixedPoint[20, 4](300000.0)
        with overflow_reporting(self.collector):
            reported = FixedPoint[20, 4](300000.0) * FixedPoint[20, 4](300000.0)

        assert reported.raw_word == plain.raw_word
        assert len(self.collector) == 1

    def test_scope_restored(self):
        """测试离开代码块后恢复"""
        with overflow_reporting(self.collector):
            assert get_overflow_reporter() is self.collector
        assert get_overflow_reporter() is None

        FixedPoint[4, 4](100.0)
        assert len(self.collector) == 0

    def test_token_installation(self):
        """测试令牌方式安装与恢复"""
        token = set_overflow_reporter(self.collector)
        try:
            FixedPoint[4, 4](-100.0)
        finally:
            reset_overflow_reporter(token)

        assert get_overflow_reporter() is None
        assert self.collector.events[0].kind is OverflowKind.UNDERFLOW

    def test_failing_reporter_is_ignored(self):
        """测试报告器异常不影响运算"""
        def failing_reporter(event):
            raise RuntimeError("reporter failed")

        with overflow_reporting(failing_reporter):
            result = FixedPoint[4, 4](7.5) + FixedPoint[4, 4](1.0)

        assert str(result) == "-8 + 8/16"

    def test_event_as_error(self):
        """测试事件转换为异常"""
        with overflow_reporting(self.collector):
            FixedPoint[4, 4](7.5) + FixedPoint[4, 4](1.0)

        error = self.collector.events[0].as_error()
        assert isinstance(error, OverflowTruncation)
        assert str(error).startswith("[OVERFLOW_TRUNCATION]")

        with pytest.raises(OverflowTruncation):
            self.collector.raise_if_any()

        self.collector.clear()
        self.collector.raise_if_any()


class TestLoggingOverflowReporter:
    """日志报告器测试类"""

    def setup_method(self):
        """测试前准备"""
        self.logger = get_logger()
        self.handler = ListHandler()
        self.logger.add_handler(self.handler)

    def teardown_method(self):
        """测试后清理"""
        self.logger.remove_handler(self.handler)

    def test_logs_warning(self):
        """测试溢出记录为警告日志"""
        with overflow_reporting(LoggingOverflowReporter()):
            FixedPoint[4, 4](7.5) + FixedPoint[4, 4](1.0)

        assert len(self.handler.records) == 1
        record = self.handler.records[0]
        assert record.levelno == logging.WARNING
        assert 'Q4_4' in record.getMessage()


if __name__ == '__main__':
    pytest.main([__file__])
