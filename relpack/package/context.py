"""
打包上下文模块

定义流水线各阶段共享的数据结构和异常类。
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

from ..config.schema import ArchiveFormat, RelpackConfig

# 以 / 分隔、相对于打包根目录的文件路径，按字典序排列；创建后不再修改
FileList = Tuple[str, ...]


class PackagingError(Exception):
    """打包错误（中止整个流程）"""
    pass


class EnumerationError(PackagingError):
    """文件枚举失败"""
    pass


class TemplateError(PackagingError):
    """模板读取或校验失败"""
    pass


class ToolNotFoundError(PackagingError):
    """外部工具不在可执行搜索路径中"""

    def __init__(self, tool: str):
        super().__init__(f"找不到外部工具: {tool}")
        self.tool = tool


class ArchiveError(PackagingError):
    """归档生成失败"""
    pass


@dataclass
class ArtifactResult:
    """单个产物的生成结果"""
    name: str
    kind: str  # installer / zip / tar.gz
    success: bool
    path: Optional[Path] = None
    error: Optional[str] = None


@dataclass
class PackagingContext:
    """打包上下文，包含流水线执行过程中的共享数据"""
    config: RelpackConfig
    version: str
    skip_installer: bool = False
    targets: Optional[List[str]] = None  # 为空表示全部归档目标

    # 流水线过程中生成的数据
    files: Optional[FileList] = None
    artifacts: List[ArtifactResult] = field(default_factory=list)

    @property
    def root(self) -> Path:
        return self.config.root

    @property
    def output_dir(self) -> Path:
        return self.config.get_output_dir()

    def require_files(self) -> FileList:
        if self.files is None:
            raise PackagingError("文件列表尚未生成")
        return self.files

    @property
    def failed(self) -> List[ArtifactResult]:
        return [a for a in self.artifacts if not a.success]


@dataclass(frozen=True)
class ArchiveJob:
    """一个归档任务：过滤后的文件列表、产物基础名和格式"""
    files: FileList
    name: str
    format: ArchiveFormat
    target: str

    @property
    def filename(self) -> str:
        return f"{self.name}.{self.format.value}"
