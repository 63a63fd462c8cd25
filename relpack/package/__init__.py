"""打包服务模块

提供发布打包流水线的核心功能。
"""

from .packager import Packager, PackageResult
from .context import (
    ArchiveError,
    ArchiveJob,
    ArtifactResult,
    EnumerationError,
    FileList,
    PackagingContext,
    PackagingError,
    TemplateError,
    ToolNotFoundError,
)
from .enumerator import FileEnumerator, enumerate_files
from .platform_filter import FilterPolicy, PlatformFilter
from .template import Template, render
from .nsis import InstallerScriptGenerator, NsisRenderer, plan_directives
from .archiver import Archiver, ArchiverFactory, TarGzArchiver, ZipArchiver
from .pipeline import PackagingPipeline
from .process import ProcessResult, ProcessRunner
from .version import read_version

__all__ = [
    # 主打包器
    "Packager",
    "PackageResult",
    "PackagingPipeline",

    # 数据与异常
    "ArchiveError",
    "ArchiveJob",
    "ArtifactResult",
    "EnumerationError",
    "FileList",
    "PackagingContext",
    "PackagingError",
    "TemplateError",
    "ToolNotFoundError",

    # 各组件
    "FileEnumerator",
    "enumerate_files",
    "FilterPolicy",
    "PlatformFilter",
    "Template",
    "render",
    "InstallerScriptGenerator",
    "NsisRenderer",
    "plan_directives",
    "Archiver",
    "ArchiverFactory",
    "TarGzArchiver",
    "ZipArchiver",
    "ProcessResult",
    "ProcessRunner",
    "read_version",
]
