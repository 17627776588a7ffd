"""
溢出诊断模块
舍入掩码步骤检测到溢出/下溢时，通过注入的报告器回调通知调用方

报告器保存在 ContextVar 中：每个线程 / 协程各自持有设置，
没有进程级可变全局状态。未安装报告器时不做任何检测。
"""

import contextvars
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterator, List, Optional

from fixpt.base.exceptions import OverflowTruncation
from fixpt.base.logs import get_logger


class OverflowKind(Enum):
    """越界方向"""
    OVERFLOW = 'overflow'
    UNDERFLOW = 'underflow'


@dataclass(frozen=True)
class OverflowEvent:
    """一次截断事件"""
    kind: OverflowKind
    format_name: str
    before: str
    after: str

    def as_error(self) -> OverflowTruncation:
        """转换为异常对象，供需要严格检查的调用方抛出"""
        label = '上溢' if self.kind is OverflowKind.OVERFLOW else '下溢'
        return OverflowTruncation(label, self.format_name, self.before, self.after)


OverflowReporter = Callable[[OverflowEvent], None]


class LoggingOverflowReporter:
    """通过项目日志器记录截断事件"""

    def __init__(self, level: str = 'WARNING'):
        self.level = level
        self.logger = get_logger()

    def __call__(self, event: OverflowEvent) -> None:
        self.logger.log(self.level, str(event.as_error()))


class CollectingOverflowReporter:
    """收集截断事件"""

    def __init__(self):
        self.events: List[OverflowEvent] = []

    def __call__(self, event: OverflowEvent) -> None:
        self.events.append(event)

    def __len__(self) -> int:
        return len(self.events)

    def clear(self) -> None:
        self.events.clear()

    def raise_if_any(self) -> None:
        """若收集到事件则抛出第一个事件对应的异常"""
        if self.events:
            raise self.events[0].as_error()


_active_reporter: contextvars.ContextVar = contextvars.ContextVar('fixpt_overflow_reporter', default=None)


def get_overflow_reporter() -> Optional[OverflowReporter]:
    """获取当前上下文的报告器"""
    return _active_reporter.get()


def set_overflow_reporter(reporter: Optional[OverflowReporter]) -> contextvars.Token:
    """安装报告器，返回用于恢复的令牌"""
    return _active_reporter.set(reporter)


def reset_overflow_reporter(token: contextvars.Token) -> None:
    """恢复安装前的报告器"""
    _active_reporter.reset(token)


@contextmanager
def overflow_reporting(reporter: Optional[OverflowReporter]) -> Iterator[Optional[OverflowReporter]]:
    """在代码块内启用报告器"""
    token = set_overflow_reporter(reporter)
    try:
        yield reporter
    finally:
        reset_overflow_reporter(token)


def report_overflow(reporter: OverflowReporter, event: OverflowEvent) -> None:
    """
    调用报告器

    报告仅供参考，不能影响截断结果，报告器自身的异常记录后丢弃。
    """
    try:
        reporter(event)
    except Exception:
        get_logger().exception(f"溢出报告器执行失败: {event}")
