"""
文件枚举步骤模块

生成未经平台过滤的完整文件列表。失败会中止整个打包。
"""

from ...utils.logging import LogStage, debug
from ..context import PackagingContext
from ..enumerator import FileEnumerator
from .step import PackagingStep


class EnumerateStep(PackagingStep):
    """文件枚举步骤"""

    def __init__(self, runner=None):
        super().__init__("enumerate", "枚举已跟踪文件", runner)

    def create_enumerator(self, context: PackagingContext) -> FileEnumerator:
        config = context.config
        return FileEnumerator(
            context.root,
            git=config.tools.git,
            exclude_patterns=config.files.exclude,
            noise_prefixes=config.files.noise_prefixes,
            runner=self.runner,
        )

    async def execute(self, context: PackagingContext) -> None:
        context.files = await self.create_enumerator(context).list_files()

        for idx, path in enumerate(context.files[:20]):
            debug(f"文件[{idx}]: {path}", stage=LogStage.ENUMERATE)
        if len(context.files) > 20:
            debug(f"... 还有 {len(context.files) - 20} 个文件未列出", stage=LogStage.ENUMERATE)
