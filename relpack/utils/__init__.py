"""通用工具模块"""

from .logging import (
    configure_logging,
    set_log_level,
    set_log_file,
    LogStage,
    OutputLevel,
)

from .paths import (
    ensure_directory,
    remove_path,
    to_windows_path,
    format_size,
)

__all__ = [
    # 日志相关
    "configure_logging",
    "set_log_level",
    "set_log_file",
    "LogStage",
    "OutputLevel",

    # 路径相关
    "ensure_directory",
    "remove_path",
    "to_windows_path",
    "format_size",
]
