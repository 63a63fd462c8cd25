"""
Relpack CLI 主入口

提供命令行接口，支持 package/files/script/validate/example/info 等命令。
"""

import shutil
import sys
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from .. import __version__
from ..utils import configure_logging, OutputLevel
from .commands import files, package, validate


app = typer.Typer(
    name="relpack",
    help="Relpack - 发布打包流水线（安装器 + 多平台归档）",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

console = Console()


def version_callback(value: bool) -> None:
    """显示版本信息"""
    if value:
        console.print(f"Relpack v{__version__}")
        raise typer.Exit()


def verbose_callback(verbose: bool) -> None:
    configure_logging(level=OutputLevel.DEBUG if verbose else OutputLevel.INFO)


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="显示版本信息"
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        callback=verbose_callback,
        help="启用详细输出"
    )
) -> None:
    """Relpack - 发布打包流水线

    使用 --help 查看可用命令的详细信息。
    """
    pass


app.command("package", help="生成安装器和各平台归档")(package.package_command)
app.command("files", help="列出将被打包的文件")(files.files_command)
app.command("script", help="生成 NSIS 安装脚本")(files.script_command)
app.command("validate", help="验证配置文件")(validate.validate_command)


@app.command("info")
def info_command() -> None:
    """显示版本和外部工具信息"""
    from ..config.schema import ToolsModel

    table = Table(title="版本信息")
    table.add_column("组件", style="cyan")
    table.add_column("版本", style="green")
    table.add_row("Relpack", __version__)
    table.add_row("Python", f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}")
    console.print(table)
    console.print()

    tools = ToolsModel()
    tool_table = Table(title="外部工具")
    tool_table.add_column("工具", style="cyan")
    tool_table.add_column("状态")
    for tool in (tools.git, tools.zip, tools.tar, tools.makensis):
        location = shutil.which(tool)
        status = f"[green]✓ {location}[/green]" if location else "[red]✗ 未找到[/red]"
        tool_table.add_row(tool, status)
    console.print(tool_table)


@app.command("example")
def example_command(
    output: str = typer.Option(
        "relpack.yaml",
        "--output", "-o",
        help="输出配置文件路径"
    )
) -> None:
    """生成示例配置文件"""
    from ..config import save_config, ConfigError
    from ..config.schema import RelpackConfig

    config = RelpackConfig(
        product={"name": "example-app", "version_file": "package.json"},
        files={"exclude": ["*.log", "build/"]},
    )

    try:
        save_config(config, output)
    except ConfigError as e:
        console.print(f"[red]生成示例配置失败: {e}[/red]")
        raise typer.Exit(1)

    console.print(f"✓ 示例配置文件已生成: [green]{output}[/green]")
    console.print("请根据需要修改配置文件，然后运行:")
    console.print(f"  [cyan]relpack package -c {output}[/cyan]")


if __name__ == "__main__":
    app()
