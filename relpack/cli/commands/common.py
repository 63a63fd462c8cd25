"""
子命令共用的配置解析

指定了 --config 时从 YAML 加载；否则用 --root 和 --name 构造默认配置。
"""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from ...config import ConfigError, ConfigValidationError, RelpackConfig, default_config, load_config

DEFAULT_CONFIG_NAME = "relpack.yaml"


def resolve_config(
    console: Console,
    config: Optional[str],
    root: Optional[str],
    name: Optional[str] = None,
) -> RelpackConfig:
    """加载配置，出错时打印信息并以退出码 1 结束"""
    config_path = Path(config) if config else None
    if config_path is None and root is None and Path(DEFAULT_CONFIG_NAME).is_file():
        config_path = Path(DEFAULT_CONFIG_NAME)

    try:
        if config_path is None:
            return default_config(root or ".", name)

        console.print(f"[cyan]正在加载配置文件[/cyan]: {config_path}")
        config_obj = load_config(config_path)
        if root:
            config_obj.root = Path(root).resolve()
        if name:
            config_obj.product.name = name
        return config_obj
    except ConfigValidationError as e:
        console.print("[red]配置验证失败:[/red]")
        console.print(e.format_errors(), markup=False)
        raise typer.Exit(1)
    except ConfigError as e:
        console.print(f"[red]配置错误[/red]: {e}")
        raise typer.Exit(1)
