"""
日志配置模块
统一管理定点数库中的日志记录功能
"""

import logging
import os
import sys
import time
from functools import wraps
from typing import Optional

from .constants import LOG_LEVELS, DEFAULT_LOG_LEVEL, LOG_FORMAT, LOG_DATE_FORMAT, LOGGER_NAME


class ColoredFormatter(logging.Formatter):
    """彩色日志格式化器"""

    # 颜色代码
    COLORS = {
        'DEBUG': '\033[36m',      # 青色
        'INFO': '\033[32m',       # 绿色
        'WARNING': '\033[33m',    # 黄色
        'ERROR': '\033[31m',      # 红色
        'CRITICAL': '\033[35m',   # 紫色
        'RESET': '\033[0m'        # 重置
    }

    def format(self, record: logging.LogRecord) -> str:
        """格式化日志记录"""
        original_format = super().format(record)

        if record.levelname in self.COLORS:
            color = self.COLORS[record.levelname]
            reset = self.COLORS['RESET']
            return f"{color}{original_format}{reset}"

        return original_format


class FixptLogger:
    """定点数库专用日志器"""

    def __init__(self, name: str = LOGGER_NAME, level: str = DEFAULT_LOG_LEVEL):
        self.name = name
        self.level = level.upper()
        self.logger = logging.getLogger(name)
        self._setup_logger()

    def _setup_logger(self) -> None:
        """设置日志器"""
        # 清除现有的处理器
        self.logger.handlers.clear()

        self.logger.setLevel(getattr(logging, self.level))

        # 防止重复日志
        self.logger.propagate = False

        self._add_console_handler()

    def _add_console_handler(self) -> None:
        """添加控制台处理器"""
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(getattr(logging, self.level))
        console_handler.setFormatter(ColoredFormatter(LOG_FORMAT, LOG_DATE_FORMAT))
        self.logger.addHandler(console_handler)

    def add_file_handler(self, log_file: str) -> logging.FileHandler:
        """添加文件处理器，文件记录所有级别；同一文件只添加一次"""
        path = os.path.abspath(log_file)
        for handler in self.logger.handlers:
            if isinstance(handler, logging.FileHandler) and handler.baseFilename == path:
                return handler

        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT))
        self.logger.addHandler(file_handler)
        return file_handler

    def debug(self, message: str, **kwargs) -> None:
        """调试日志"""
        self.logger.debug(message, **kwargs)

    def info(self, message: str, **kwargs) -> None:
        """信息日志"""
        self.logger.info(message, **kwargs)

    def warning(self, message: str, **kwargs) -> None:
        """警告日志"""
        self.logger.warning(message, **kwargs)

    def error(self, message: str, **kwargs) -> None:
        """错误日志"""
        self.logger.error(message, **kwargs)

    def exception(self, message: str, **kwargs) -> None:
        """异常日志（包含堆栈跟踪）"""
        self.logger.exception(message, **kwargs)

    def log(self, level: str, message: str, **kwargs) -> None:
        """按级别名记录日志"""
        self.logger.log(getattr(logging, level.upper()), message, **kwargs)

    def set_level(self, level: str) -> None:
        """设置日志级别"""
        if level.upper() not in LOG_LEVELS:
            raise ValueError(f"无效的日志级别: {level}, 支持: {LOG_LEVELS}")

        self.level = level.upper()
        self.logger.setLevel(getattr(logging, self.level))

        # 更新控制台处理器级别
        for handler in self.logger.handlers:
            if isinstance(handler, logging.StreamHandler) and not isinstance(handler, logging.FileHandler):
                handler.setLevel(getattr(logging, self.level))

    def add_handler(self, handler: logging.Handler) -> None:
        """添加自定义处理器"""
        self.logger.addHandler(handler)

    def remove_handler(self, handler: logging.Handler) -> None:
        """移除处理器"""
        self.logger.removeHandler(handler)


# 全局日志器实例
_global_logger: Optional[FixptLogger] = None


def get_logger(name: str = LOGGER_NAME, level: str = DEFAULT_LOG_LEVEL) -> FixptLogger:
    """获取日志器实例"""
    global _global_logger
    if _global_logger is None:
        _global_logger = FixptLogger(name, level)
    return _global_logger


def setup_logging(level: str = DEFAULT_LOG_LEVEL,
                  log_file: Optional[str] = None) -> FixptLogger:
    """设置项目日志"""
    logger = get_logger()
    logger.set_level(level)

    if log_file:
        logger.add_file_handler(log_file)

    return logger


def log_execution_time(func_name: str):
    """执行时间记录装饰器"""
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            logger = get_logger()

            start_time = time.perf_counter()
            logger.debug(f"开始执行: {func_name}")

            try:
                result = func(*args, **kwargs)
            except Exception as e:
                execution_time = time.perf_counter() - start_time
                logger.error(f"执行失败: {func_name}, 耗时: {execution_time:.6f}s, 错误: {str(e)}")
                raise
            execution_time = time.perf_counter() - start_time
            logger.info(f"执行完成: {func_name}, 耗时: {execution_time:.6f}s")
            return result
        return wrapper
    return decorator
