"""
Files 与 Script 命令实现

输出将被打包的文件列表，或者输出生成的安装脚本（不编译）。
"""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from ...config import Platform
from ...package.context import PackagingError
from ...utils.logging import log_to_stderr
from .common import resolve_config


# 标准输出只留给文件列表和脚本内容
console = Console(stderr=True)


def files_command(
    config: Optional[str] = typer.Option(None, "--config", "-c", help="配置文件路径"),
    root: Optional[str] = typer.Option(None, "--root", "-r", help="打包根目录"),
    platform: str = typer.Option("all", "--platform", "-p", help="按平台过滤（all/mac/linux/windows/solaris）"),
) -> None:
    """列出将被打包的文件"""
    from ...package.packager import Packager

    log_to_stderr()

    try:
        target = Platform.parse(platform)
    except ValueError:
        console.print(f"[red]未知平台: {platform}[/red]")
        raise typer.Exit(1)

    config_obj = resolve_config(console, config, root)
    try:
        files = Packager().list_files(config_obj, target)
    except PackagingError as e:
        console.print(f"[red]文件枚举失败[/red]: {e}")
        raise typer.Exit(1)

    for path in files:
        typer.echo(path)


def script_command(
    config: Optional[str] = typer.Option(None, "--config", "-c", help="配置文件路径"),
    root: Optional[str] = typer.Option(None, "--root", "-r", help="打包根目录"),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="脚本输出路径（默认输出到标准输出）"),
) -> None:
    """生成 NSIS 安装脚本但不编译"""
    from ...package.packager import Packager

    log_to_stderr()

    config_obj = resolve_config(console, config, root)
    root_path = "."
    if output:
        # 脚本不在打包根目录时，ROOT_PATH 需要指回根目录
        output_path = Path(output).resolve()
        root_path = str(config_obj.root.resolve())
        if output_path.parent == config_obj.root.resolve():
            root_path = "."

    try:
        script = Packager().render_script(config_obj, root_path=root_path)
    except PackagingError as e:
        console.print(f"[red]生成安装脚本失败[/red]: {e}")
        raise typer.Exit(1)

    if output:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(script, encoding="utf-8")
        console.print(f"[green]✓ 安装脚本已写入[/green]: {output_path}")
    else:
        typer.echo(script, nl=False)
