"""
归档步骤模块

为每个归档目标计算过滤后的文件列表并并发生成归档。各任务互不依赖，
一个任务失败不会中止其他任务。
"""

import asyncio
from typing import List

from ...utils.logging import LogStage, error, info
from ..archiver import ArchiverFactory
from ..context import ArchiveJob, ArtifactResult, PackagingContext, PackagingError
from ..platform_filter import FilterPolicy, PlatformFilter
from .step import PackagingStep


class ArchiveStep(PackagingStep):
    """归档生成步骤"""

    def __init__(self, runner=None):
        super().__init__("archives", "生成各平台归档", runner)

    def plan_jobs(self, context: PackagingContext) -> List[ArchiveJob]:
        """根据配置的归档目标生成任务列表"""
        config = context.config
        platform_filter = PlatformFilter(FilterPolicy.from_config(config.platforms))
        base = context.require_files()

        targets = config.archives
        if context.targets:
            unknown = set(context.targets) - {t.target for t in targets}
            if unknown:
                raise PackagingError(f"未知的归档目标: {', '.join(sorted(unknown))}")
            targets = [t for t in targets if t.target in context.targets]

        return [
            ArchiveJob(
                files=platform_filter.apply(base, target.platform),
                name=config.artifact_name(context.version, target.target),
                format=target.format,
                target=target.target,
            )
            for target in targets
        ]

    async def run_job(self, context: PackagingContext, job: ArchiveJob) -> ArtifactResult:
        archiver = ArchiverFactory.create(
            job.format, context.root, context.output_dir, tools=context.config.tools, runner=self.runner,
        )
        return await archiver.build(job.files, job.name)

    async def execute(self, context: PackagingContext) -> None:
        jobs = self.plan_jobs(context)
        info(f"并发生成 {len(jobs)} 个归档", stage=LogStage.ARCHIVE)

        results = await asyncio.gather(
            *(self.run_job(context, job) for job in jobs),
            return_exceptions=True,
        )

        for job, result in zip(jobs, results):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                name = job.filename
                error(f"{name} 生成失败: {result}", stage=LogStage.ARCHIVE)
                result = ArtifactResult(name, job.format.value, False, error=str(result))
            context.artifacts.append(result)
