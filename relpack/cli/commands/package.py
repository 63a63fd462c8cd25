"""
Package 命令实现

运行完整的打包流水线。
"""

import traceback
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from ...utils.logging import OutputLevel, set_log_file, set_log_level
from ...utils.paths import format_size
from .common import resolve_config


console = Console()


def package_command(
    config: Optional[str] = typer.Option(None, "--config", "-c", help="配置文件路径（默认 ./relpack.yaml）"),
    root: Optional[str] = typer.Option(None, "--root", "-r", help="打包根目录"),
    name: Optional[str] = typer.Option(None, "--name", "-n", help="产品名称"),
    skip_installer: bool = typer.Option(False, "--skip-installer", help="不生成 Windows 安装器"),
    target: Optional[List[str]] = typer.Option(None, "--target", "-t", help="只生成指定的归档目标（可重复）"),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="日志输出文件"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="输出详细调试日志 (DEBUG 级别)"),
) -> None:
    """生成安装器和各平台归档

    示例:
        relpack package
        relpack package -c relpack.yaml --target mac --target linux
    """
    from ...package.packager import Packager

    set_log_level(OutputLevel.DEBUG if verbose else OutputLevel.INFO)
    if log_file:
        try:
            set_log_file(log_file)
        except OSError:
            console.print(f"[yellow]无法写入日志文件: {log_file}[/yellow]")

    config_obj = resolve_config(console, config, root, name)

    try:
        result = Packager().package(config_obj, skip_installer=skip_installer, targets=target)
    except Exception as e:
        console.print(f"[red]✗ 打包过程中发生意外错误[/red]: {e}")
        if log_file:
            console.print(f"[yellow]详细错误信息:[/yellow]\n{traceback.format_exc()}")
        raise typer.Exit(1)

    if result.error:
        console.print(f"[red]✗ 打包失败[/red]: {result.error}")
        raise typer.Exit(1)

    table = Table(title=f"{config_obj.product.name} v{result.version} ({result.file_count} 个文件)")
    table.add_column("产物", style="cyan")
    table.add_column("类型")
    table.add_column("状态")
    table.add_column("大小", justify="right")

    for artifact in result.artifacts:
        if artifact.success:
            size = format_size(artifact.path.stat().st_size) if artifact.path and artifact.path.exists() else "-"
            table.add_row(artifact.name, artifact.kind, "[green]✓ 成功[/green]", size)
        else:
            table.add_row(artifact.name, artifact.kind, f"[red]✗ {artifact.error}[/red]", "-")

    console.print(table)
    if result.build_time is not None:
        console.print(f"[blue]耗时[/blue]: {result.build_time:.1f}秒")

    if not result.success:
        raise typer.Exit(1)
