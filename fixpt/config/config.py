"""
配置管理模块
提供定点数库配置的默认值和配置管理功能
"""

import json
import os
from contextlib import contextmanager
from dataclasses import dataclass, asdict
from typing import Dict, Any, Optional, List, Iterator, Union

from fixpt.base.constants import (
    DEFAULT_FIXED_POINT_FORMAT, DEFAULT_LOG_LEVEL, LOG_LEVELS, DEFAULT_CONFIG_FILE
)
from fixpt.base.exceptions import ConfigParseError, FormatError
from fixpt.base.logs import get_logger, setup_logging
from fixpt.number.diagnostics import LoggingOverflowReporter, OverflowReporter, overflow_reporting
from fixpt.number.fixed_point import FixedPoint, FixedPointFormat, create_fixed_point


@dataclass
class ArithmeticConfig:
    """运算配置"""
    default_format: str = DEFAULT_FIXED_POINT_FORMAT


@dataclass
class DiagnosticsConfig:
    """溢出诊断配置"""
    report_overflow: bool = False
    reporter_level: str = 'WARNING'


@dataclass
class LoggingConfig:
    """日志配置"""
    level: str = DEFAULT_LOG_LEVEL
    log_file: Optional[str] = None


@dataclass
class ProjectConfig:
    """项目主配置"""
    # 基本配置
    project_name: str = "fixpt"
    version: str = "1.0.0"
    description: str = "通用有符号二进制定点数类型"

    # 子配置
    arithmetic: ArithmeticConfig = None
    diagnostics: DiagnosticsConfig = None
    logging: LoggingConfig = None

    def __post_init__(self):
        """初始化后处理"""
        if self.arithmetic is None:
            self.arithmetic = ArithmeticConfig()
        if self.diagnostics is None:
            self.diagnostics = DiagnosticsConfig()
        if self.logging is None:
            self.logging = LoggingConfig()

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典"""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ProjectConfig':
        """从字典创建配置"""
        data = dict(data)

        # 处理嵌套配置
        if 'arithmetic' in data and isinstance(data['arithmetic'], dict):
            data['arithmetic'] = ArithmeticConfig(**data['arithmetic'])

        if 'diagnostics' in data and isinstance(data['diagnostics'], dict):
            data['diagnostics'] = DiagnosticsConfig(**data['diagnostics'])

        if 'logging' in data and isinstance(data['logging'], dict):
            data['logging'] = LoggingConfig(**data['logging'])

        return cls(**data)


class ConfigManager:
    """配置管理器"""

    def __init__(self, config_file: Optional[str] = None, create_if_missing: bool = False):
        self.logger = get_logger()
        self.config_file = config_file or DEFAULT_CONFIG_FILE
        self.create_if_missing = create_if_missing
        self.config: Optional[ProjectConfig] = None
        self._load_config()

    def _load_config(self) -> None:
        """加载配置"""
        try:
            if os.path.exists(self.config_file):
                self.config = self._load_from_file(self.config_file)
                self.logger.info(f"从文件加载配置: {self.config_file}")
            else:
                self.config = ProjectConfig()
                if self.create_if_missing:
                    self._save_to_file(self.config_file, self.config)
                    self.logger.info(f"创建默认配置文件: {self.config_file}")
        except ConfigParseError as e:
            self.logger.error(f"配置加载失败: {e}")
            self.config = ProjectConfig()

    def _load_from_file(self, filepath: str) -> ProjectConfig:
        """从文件加载配置"""
        try:
            with open(filepath, 'r', encoding='utf-8') as f:
                data = json.load(f)
            return ProjectConfig.from_dict(data)
        except json.JSONDecodeError as e:
            raise ConfigParseError(filepath, f"JSON 解析错误: {e}")
        except (OSError, TypeError) as e:
            raise ConfigParseError(filepath, f"文件读取错误: {e}")

    def _save_to_file(self, filepath: str, config: ProjectConfig) -> None:
        """保存配置到文件"""
        try:
            # 确保目录存在
            directory = os.path.dirname(filepath)
            if directory:
                os.makedirs(directory, exist_ok=True)

            with open(filepath, 'w', encoding='utf-8') as f:
                json.dump(config.to_dict(), f, indent=2, ensure_ascii=False)
        except OSError as e:
            raise ConfigParseError(filepath, f"文件保存错误: {e}")

    def get_config(self) -> ProjectConfig:
        """获取当前配置"""
        if self.config is None:
            self.config = ProjectConfig()
        return self.config

    def update_config(self, updates: Dict[str, Any]) -> None:
        """更新配置"""
        data = self.get_config().to_dict()

        # 递归更新配置
        self._update_nested_dict(data, updates)
        self.config = ProjectConfig.from_dict(data)

        self.logger.info("配置已更新")

    def _update_nested_dict(self, base_dict: Dict[str, Any],
                            updates: Dict[str, Any]) -> None:
        """递归更新嵌套字典"""
        for key, value in updates.items():
            if key in base_dict and isinstance(base_dict[key], dict) and isinstance(value, dict):
                self._update_nested_dict(base_dict[key], value)
            else:
                base_dict[key] = value

    def save_config(self, filepath: Optional[str] = None) -> None:
        """保存配置"""
        save_path = filepath or self.config_file
        self._save_to_file(save_path, self.get_config())
        self.logger.info(f"配置已保存到: {save_path}")

    def reset_to_default(self) -> None:
        """重置为默认配置"""
        self.config = ProjectConfig()
        self.logger.info("配置已重置为默认值")

    def validate_config(self) -> List[str]:
        """验证配置"""
        errors = []
        config = self.get_config()

        try:
            FixedPointFormat.parse(config.arithmetic.default_format)
        except FormatError as e:
            errors.append(f"默认定点数格式无效: {e}")

        if config.logging.level.upper() not in LOG_LEVELS:
            errors.append(f"日志级别必须是 {LOG_LEVELS} 之一")

        if config.diagnostics.reporter_level.upper() not in LOG_LEVELS:
            errors.append(f"溢出报告级别必须是 {LOG_LEVELS} 之一")

        return errors

    def default_format(self) -> FixedPointFormat:
        """默认定点数格式"""
        return FixedPointFormat.parse(self.get_config().arithmetic.default_format)

    def create(self, value: Union[float, int, FixedPoint]) -> FixedPoint:
        """按默认格式创建定点数"""
        return create_fixed_point(value, self.default_format())

    def apply(self) -> Optional[OverflowReporter]:
        """
        应用配置

        设置日志级别与日志文件，并按诊断配置构造溢出报告器。

        Returns:
            启用溢出报告时返回报告器，否则返回 None
        """
        config = self.get_config()
        setup_logging(config.logging.level, config.logging.log_file)

        if config.diagnostics.report_overflow:
            return LoggingOverflowReporter(config.diagnostics.reporter_level)
        return None

    @contextmanager
    def activate(self) -> Iterator[Optional[OverflowReporter]]:
        """在代码块内应用配置并启用对应的溢出报告器"""
        with overflow_reporting(self.apply()) as reporter:
            yield reporter

    def export_config(self, filepath: str) -> None:
        """导出配置"""
        self._save_to_file(filepath, self.get_config())
        self.logger.info(f"配置已导出到: {filepath}")

    def import_config(self, filepath: str) -> None:
        """导入配置"""
        if not os.path.exists(filepath):
            raise ConfigParseError(filepath, "文件不存在")

        self.config = self._load_from_file(filepath)
        self.logger.info(f"配置已从 {filepath} 导入")


# 全局配置管理器
_config_manager: Optional[ConfigManager] = None


def get_config_manager(config_file: Optional[str] = None) -> ConfigManager:
    """获取全局配置管理器"""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager(config_file)
    return _config_manager


def get_config() -> ProjectConfig:
    """获取当前配置便捷函数"""
    manager = get_config_manager()
    return manager.get_config()


def load_config(filepath: str) -> ProjectConfig:
    """加载配置文件便捷函数"""
    manager = ConfigManager(filepath)
    return manager.get_config()


def save_config(config: ProjectConfig, filepath: str) -> None:
    """保存配置便捷函数"""
    manager = ConfigManager(filepath)
    manager.config = config
    manager.save_config(filepath)
