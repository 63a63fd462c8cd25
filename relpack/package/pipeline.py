"""
打包流水线模块

按固定顺序执行打包阶段：枚举文件 -> 生成安装器 -> 生成归档。
安装器阶段（包括 makensis 进程）完全结束后才开始归档阶段。
"""

import time
from typing import List, Optional, Sequence

from ..config.schema import RelpackConfig
from ..utils.logging import LogStage, error, info, success
from .context import PackagingContext, PackagingError
from .process import ProcessRunner
from .steps import ArchiveStep, EnumerateStep, InstallerStep, PackagingStep


class PackagingPipeline:
    """打包流水线，负责协调各阶段的执行"""

    def __init__(self, runner: Optional[ProcessRunner] = None):
        self.runner = runner or ProcessRunner()
        self._steps: List[PackagingStep] = [
            EnumerateStep(self.runner),
            InstallerStep(self.runner),
            ArchiveStep(self.runner),
        ]

    def get_steps(self) -> List[PackagingStep]:
        return self._steps.copy()

    async def execute(
        self,
        config: RelpackConfig,
        version: str,
        skip_installer: bool = False,
        targets: Optional[Sequence[str]] = None,
    ) -> PackagingContext:
        """执行打包流水线

        Returns:
            PackagingContext: 包含文件列表和所有产物结果

        Raises:
            PackagingError: 致命错误（文件枚举、模板等）
        """
        context = PackagingContext(
            config=config,
            version=version,
            skip_installer=skip_installer,
            targets=list(targets) if targets else None,
        )
        start_time = time.time()
        info(f"打包 {config.product.name} 版本 {version}", stage=LogStage.INIT)

        try:
            for step in self._steps:
                info(f"执行步骤: {step.description}", stage=LogStage.INIT)
                await step.execute(context)
        except PackagingError as e:
            error(f"打包中止: {e}", stage=LogStage.DONE)
            raise
        except Exception as e:
            error(f"打包中止: {e}", stage=LogStage.DONE)
            raise PackagingError(f"打包失败: {e}") from e

        elapsed = time.time() - start_time
        failed = context.failed
        if failed:
            error(f"{len(failed)} 个产物生成失败: {', '.join(a.name for a in failed)}", stage=LogStage.DONE)
        else:
            success(f"全部 {len(context.artifacts)} 个产物生成完成 ({elapsed:.1f}秒)", stage=LogStage.DONE)
        return context
