"""
归档生成器

调用外部 zip / tar 工具生成发布归档。zip 直接打包打包根目录中的文件；
tar.gz 先把文件复制到与归档同名的目录里，再对复制出来的目录打包，
这样解压后只有一个顶层目录。
"""

import asyncio
import shutil
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Type, Union

from ..config.schema import ArchiveFormat
from ..utils.logging import LogStage, error, info, success, warning
from ..utils.paths import ensure_directory, format_size, remove_path
from .context import ArchiveError, ArtifactResult, PackagingError
from .process import ProcessResult, ProcessRunner


class Archiver(ABC):
    """归档器抽象基类"""

    extension: str = ""

    def __init__(self, root: Union[str, Path], output_dir: Union[str, Path],
                 runner: Optional[ProcessRunner] = None):
        self.root = Path(root)
        self.output_dir = Path(output_dir)
        self.runner = runner or ProcessRunner()

    @abstractmethod
    def get_format(self) -> ArchiveFormat:
        pass

    @abstractmethod
    async def _create(self, files: List[str], name: str, archive_path: Path) -> ProcessResult:
        pass

    def archive_path(self, name: str) -> Path:
        return self.output_dir / f"{name}{self.extension}"

    async def build(self, files: Iterable[str], name: str) -> ArtifactResult:
        """生成归档

        失败不会抛出异常，而是记录在返回结果里：一个平台失败不影响其他平台。
        """
        archive_path = self.archive_path(name)
        info(f"生成 {self.extension} 归档: {archive_path.name}", stage=LogStage.ARCHIVE)

        try:
            ensure_directory(self.output_dir)
            # 不能追加到旧归档里
            remove_path(archive_path)
            result = await self._create(list(files), name, archive_path)
        except (PackagingError, OSError) as e:
            error(f"{archive_path.name} 生成失败: {e}", stage=LogStage.ARCHIVE)
            return ArtifactResult(archive_path.name, self.get_format().value, False, archive_path, str(e))

        for line in result.diagnostic_lines():
            warning(f"[{Path(result.args[0]).name}] {line}", stage=LogStage.ARCHIVE)

        if not result.ok:
            message = f"{result.args[0]} 退出码 {result.returncode}"
            error(f"{archive_path.name} 生成失败: {message}", stage=LogStage.ARCHIVE)
            return ArtifactResult(archive_path.name, self.get_format().value, False, archive_path, message)

        size = format_size(archive_path.stat().st_size) if archive_path.exists() else "?"
        success(f"已生成 {archive_path} ({size})", stage=LogStage.ARCHIVE)
        return ArtifactResult(archive_path.name, self.get_format().value, True, archive_path)


class ZipArchiver(Archiver):
    """zip 归档器：在打包根目录中直接打包"""

    extension = ".zip"

    def __init__(self, root, output_dir, zip_tool: str = "zip", level: int = 9,
                 runner: Optional[ProcessRunner] = None):
        super().__init__(root, output_dir, runner)
        self.zip_tool = zip_tool
        self.level = level

    def get_format(self) -> ArchiveFormat:
        return ArchiveFormat.ZIP

    def command(self, files: List[str], archive_path: Path) -> List[str]:
        return [self.zip_tool, f"-{self.level}", str(archive_path.resolve())] + files

    async def _create(self, files, name, archive_path):
        if not files:
            raise ArchiveError("文件列表为空")
        return await self.runner.run(self.command(files, archive_path), cwd=self.root)


class TarGzArchiver(Archiver):
    """tar.gz 归档器：先复制到暂存目录再打包"""

    extension = ".tar.gz"

    def __init__(self, root, output_dir, tar_tool: str = "tar",
                 runner: Optional[ProcessRunner] = None):
        super().__init__(root, output_dir, runner)
        self.tar_tool = tar_tool

    def get_format(self) -> ArchiveFormat:
        return ArchiveFormat.TAR_GZ

    def staging_dir(self, name: str) -> Path:
        return self.output_dir / name

    def stage_files(self, files: Iterable[str], name: str) -> List[str]:
        """把文件复制到暂存目录，保留权限位

        Returns:
            List[str]: 相对于输出目录的暂存路径
        """
        staging = self.staging_dir(name)
        if remove_path(staging):
            warning(f"删除旧的暂存目录: {staging}", stage=LogStage.STAGE)
        ensure_directory(staging)

        staged = []
        for path in files:
            destination = staging / path
            destination.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(self.root / path, destination)
            staged.append(f"{name}/{path}")

        info(f"已复制 {len(staged)} 个文件到 {staging}", stage=LogStage.STAGE)
        return staged

    def command(self, staged: List[str], archive_path: Path) -> List[str]:
        return [self.tar_tool, "-czf", archive_path.name] + staged

    async def _create(self, files, name, archive_path):
        if not files:
            raise ArchiveError("文件列表为空")
        staged = await asyncio.to_thread(self.stage_files, files, name)
        return await self.runner.run(self.command(staged, archive_path), cwd=self.output_dir)


class ArchiverFactory:
    """归档器工厂"""

    _archivers: Dict[ArchiveFormat, Type[Archiver]] = {
        ArchiveFormat.ZIP: ZipArchiver,
        ArchiveFormat.TAR_GZ: TarGzArchiver,
    }

    @classmethod
    def create(cls, fmt: ArchiveFormat, root, output_dir, tools=None,
               runner: Optional[ProcessRunner] = None) -> Archiver:
        """根据格式创建归档器

        Args:
            fmt: 归档格式
            root: 打包根目录
            output_dir: 输出目录
            tools: ToolsModel 配置（可选）
            runner: 进程运行器
        """
        if fmt == ArchiveFormat.ZIP:
            if tools is None:
                return ZipArchiver(root, output_dir, runner=runner)
            return ZipArchiver(root, output_dir, zip_tool=tools.zip, level=tools.zip_level, runner=runner)
        if fmt == ArchiveFormat.TAR_GZ:
            if tools is None:
                return TarGzArchiver(root, output_dir, runner=runner)
            return TarGzArchiver(root, output_dir, tar_tool=tools.tar, runner=runner)
        raise ArchiveError(f"不支持的归档格式: {fmt}")

    @classmethod
    def get_available_formats(cls) -> List[ArchiveFormat]:
        return list(cls._archivers)
