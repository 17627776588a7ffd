"""
配置管理模块
提供定点数库配置管理功能
"""

from .config import (
    ArithmeticConfig,
    DiagnosticsConfig,
    LoggingConfig,
    ProjectConfig,
    ConfigManager,
    get_config_manager,
    get_config,
    load_config,
    save_config
)

__all__ = [
    # 配置类
    'ArithmeticConfig', 'DiagnosticsConfig', 'LoggingConfig', 'ProjectConfig',

    # 配置管理器
    'ConfigManager', 'get_config_manager', 'get_config', 'load_config', 'save_config'
]
