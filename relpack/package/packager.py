"""
打包器主类

对外提供同步接口：读取版本号、运行异步流水线并返回汇总结果。
"""

import asyncio
import time
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Union

from ..config.schema import Platform, RelpackConfig
from .context import ArtifactResult, FileList, PackagingContext, PackagingError
from .enumerator import FileEnumerator
from .pipeline import PackagingPipeline
from .platform_filter import FilterPolicy, PlatformFilter
from .process import ProcessRunner
from .steps import render_installer_script
from .version import read_version


@dataclass
class PackageResult:
    """打包结果

    success 只有在没有致命错误且所有产物都生成成功时为 True。
    """
    success: bool
    version: Optional[str] = None
    file_count: int = 0
    artifacts: List[ArtifactResult] = field(default_factory=list)
    build_time: Optional[float] = None
    error: Optional[str] = None


class Packager:
    """发布打包器"""

    def __init__(self, runner: Optional[ProcessRunner] = None):
        self.runner = runner or ProcessRunner()
        self.pipeline = PackagingPipeline(self.runner)

    def resolve_version(self, config: RelpackConfig) -> str:
        """配置中显式给出的版本优先，否则读取元数据文件"""
        if config.product.version:
            return config.product.version
        return read_version(config.root / config.product.version_file)

    def package(
        self,
        config: RelpackConfig,
        skip_installer: bool = False,
        targets: Optional[Sequence[str]] = None,
    ) -> PackageResult:
        start_time = time.time()
        try:
            version = self.resolve_version(config)
            context = asyncio.run(self.pipeline.execute(config, version, skip_installer, targets))
        except PackagingError as e:
            return PackageResult(success=False, build_time=time.time() - start_time, error=str(e))

        return PackageResult(
            success=not context.failed,
            version=version,
            file_count=len(context.files or ()),
            artifacts=context.artifacts,
            build_time=time.time() - start_time,
        )

    def list_files(self, config: RelpackConfig, platform: Union[Platform, str] = Platform.ALL) -> FileList:
        """枚举文件并按平台过滤

        Raises:
            PackagingError: 枚举失败
        """
        enumerator = FileEnumerator(
            config.root,
            git=config.tools.git,
            exclude_patterns=config.files.exclude,
            noise_prefixes=config.files.noise_prefixes,
            runner=self.runner,
        )
        files = asyncio.run(enumerator.list_files())
        return PlatformFilter(FilterPolicy.from_config(config.platforms)).apply(files, platform)

    def render_script(self, config: RelpackConfig, root_path: str = ".") -> str:
        """生成安装脚本文本但不编译"""
        context = PackagingContext(config=config, version=self.resolve_version(config))
        files = self.list_files(config, Platform.WINDOWS)
        return render_installer_script(context, files, root_path=root_path)
