"""
Windows 安装器步骤模块

过滤出 Windows 文件列表，生成 NSIS 脚本写到临时文件，调用 makensis 编译，
无论编译成败都删除临时脚本。编译失败只记录结果，不影响后续归档。
"""

import os
import tempfile
from pathlib import Path
from typing import Iterable

from ...config.schema import Platform
from ...utils.logging import LogStage, error, info, success, warning
from ...utils.paths import ensure_directory
from ..context import ArtifactResult, PackagingContext, ToolNotFoundError
from ..nsis import InstallerScriptGenerator
from ..platform_filter import FilterPolicy, PlatformFilter
from ..template import Template
from .step import PackagingStep

DEFAULT_TEMPLATE = Path(__file__).resolve().parent.parent.parent / "templates" / "installer_nsi.template"


def load_installer_template(context: PackagingContext) -> Template:
    return Template.from_file(context.config.installer.template or DEFAULT_TEMPLATE)


def render_installer_script(context: PackagingContext, files: Iterable[str], root_path: str = ".") -> str:
    """生成安装脚本文本（不编译）"""
    config = context.config
    generator = InstallerScriptGenerator(load_installer_template(context), config.installer.doc_names)
    return generator.generate(
        files,
        context.version,
        root_path=root_path,
        product_name=config.product.name,
        out_file=str((context.output_dir / config.installer_name(context.version)).resolve()),
    )


class InstallerStep(PackagingStep):
    """Windows 安装器生成步骤"""

    def __init__(self, runner=None):
        super().__init__("installer", "生成并编译 Windows 安装器", runner)

    def windows_files(self, context: PackagingContext):
        platform_filter = PlatformFilter(FilterPolicy.from_config(context.config.platforms))
        return platform_filter.apply(context.require_files(), Platform.WINDOWS)

    async def execute(self, context: PackagingContext) -> None:
        config = context.config
        if context.skip_installer or not config.installer.enabled:
            info("跳过 Windows 安装器", stage=LogStage.INSTALLER)
            return

        installer_name = config.installer_name(context.version)
        installer_path = context.output_dir / installer_name

        # 模板错误是致命错误，在这里直接抛出
        script = render_installer_script(context, self.windows_files(context))

        ensure_directory(context.output_dir)
        # makensis 默认切换到脚本所在目录，脚本放在打包根目录下时 ROOT_PATH 就是 "."
        fd, script_name = tempfile.mkstemp(prefix=".relpack-", suffix=".nsi", dir=context.root)
        script_path = Path(script_name)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(script)

            info(f"编译 Windows 安装器: {installer_name}", stage=LogStage.INSTALLER)
            result = await self.runner.run([config.tools.makensis, str(script_path)], cwd=context.root)
        except ToolNotFoundError as e:
            error(f"{installer_name} 生成失败: {e}", stage=LogStage.INSTALLER)
            context.artifacts.append(ArtifactResult(installer_name, "installer", False, installer_path, str(e)))
            return
        finally:
            script_path.unlink(missing_ok=True)

        for line in result.diagnostic_lines():
            warning(f"[makensis] {line}", stage=LogStage.INSTALLER)

        if not result.ok:
            message = f"makensis 退出码 {result.returncode}"
            error(f"{installer_name} 生成失败: {message}", stage=LogStage.INSTALLER)
            context.artifacts.append(ArtifactResult(installer_name, "installer", False, installer_path, message))
            return

        success(f"已生成 {installer_path}", stage=LogStage.INSTALLER)
        context.artifacts.append(ArtifactResult(installer_name, "installer", True, installer_path))
