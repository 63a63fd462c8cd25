"""
文件枚举器

通过 git 找出需要打包的文件：主仓库的已跟踪文件加上所有（嵌套）子模块中的
已跟踪文件。没有提交到版本库的文件不会被打包。
"""

import asyncio
import fnmatch
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Union

from ..utils.logging import LogStage, debug, info, success, warning
from .context import EnumerationError, FileList
from .process import ProcessResult, ProcessRunner

# 在每个子模块内执行，输出相对于顶层仓库的路径
SUBMODULE_LIST_SCRIPT = (
    'git -c core.quotepath=off ls-files | '
    'while IFS= read -r file; do printf "%s/%s\\n" "$displaypath" "$file"; done'
)


class FileEnumerator:
    """文件枚举器

    主仓库列表和子模块列表两个 git 进程并发运行，两者都结束后再合并。
    任何一个失败都会让整个打包失败：下游所有产物都依赖这份列表。
    """

    def __init__(
        self,
        root: Union[str, Path],
        git: str = "git",
        exclude_patterns: Optional[Sequence[str]] = None,
        noise_prefixes: Sequence[str] = ("Entering ",),
        runner: Optional[ProcessRunner] = None,
    ):
        self.root = Path(root)
        self.git = git
        self.exclude_patterns = [p.replace('\\', '/') for p in (exclude_patterns or [])]
        self.noise_prefixes = tuple(noise_prefixes)
        self.runner = runner or ProcessRunner()

    def top_level_command(self) -> List[str]:
        return [self.git, "-c", "core.quotepath=off", "ls-files"]

    def submodule_command(self) -> List[str]:
        return [self.git, "submodule", "foreach", "--recursive", SUBMODULE_LIST_SCRIPT]

    async def list_files(self) -> FileList:
        """返回排序、去重后的已跟踪文件列表

        Raises:
            EnumerationError: git 进程失败
            ToolNotFoundError: 找不到 git
        """
        info(f"枚举已跟踪文件: {self.root}", stage=LogStage.ENUMERATE)

        top_level, submodules = await asyncio.gather(
            self.runner.run(self.top_level_command(), cwd=self.root),
            self.runner.run(self.submodule_command(), cwd=self.root),
        )
        self._check(top_level, "git ls-files")
        self._check(submodules, "git submodule foreach")

        candidates = self.parse_listing(top_level.stdout) + self.parse_listing(submodules.stdout)
        files = self.filter_existing(candidates)

        success(f"共找到 {len(files)} 个文件", stage=LogStage.ENUMERATE)
        return files

    def _check(self, result: ProcessResult, label: str) -> None:
        if result.ok:
            return
        detail = "\n".join(result.diagnostic_lines()) or f"退出码 {result.returncode}"
        raise EnumerationError(f"{label} 执行失败: {detail}")

    def parse_listing(self, output: str) -> List[str]:
        """把 git 输出拆成路径列表，去掉提示行、隐藏文件、备份文件和排除项"""
        paths = []
        for line in output.splitlines():
            path = line.rstrip("\r")
            if not path or path.startswith(self.noise_prefixes):
                continue
            if self.is_excluded(path):
                debug(f"排除: {path}", stage=LogStage.ENUMERATE)
                continue
            paths.append(path)
        return paths

    def is_excluded(self, path: str) -> bool:
        """隐藏文件、备份文件或命中排除模式"""
        basename = path.rsplit("/", 1)[-1]
        if basename.startswith(".") or path.endswith("~"):
            return True
        return any(_match_pattern(path, pattern) for pattern in self.exclude_patterns)

    def filter_existing(self, paths: Iterable[str]) -> FileList:
        """只保留磁盘上的普通文件

        子模块挂载点在 ls-files 中以条目出现，但它们是目录。
        """
        files = set()
        for path in paths:
            full_path = self.root / path
            if full_path.is_dir():
                debug(f"跳过目录条目: {path}", stage=LogStage.ENUMERATE)
                continue
            if not full_path.exists():
                warning(f"已跟踪文件在磁盘上不存在: {path}", stage=LogStage.ENUMERATE)
                continue
            files.add(path)
        return tuple(sorted(files))


def _match_pattern(path: str, pattern: str) -> bool:
    """匹配单个排除模式（glob、目录前缀 dir/、扩展名 *.ext、多段路径）"""
    if fnmatch.fnmatch(path, pattern):
        return True

    if pattern.endswith('/'):
        dir_pattern = pattern.rstrip('/')
        if path.startswith(dir_pattern + '/') or fnmatch.fnmatch(path, dir_pattern + '/*'):
            return True

    if pattern.startswith('*.') and path.endswith(pattern[1:]):
        return True

    if '/' in pattern.rstrip('/'):
        path_parts = path.split('/')
        pattern_parts = pattern.rstrip('/').split('/')
        for i in range(len(path_parts) - len(pattern_parts) + 1):
            if all(
                fnmatch.fnmatch(path_parts[i + j], pattern_parts[j])
                for j in range(len(pattern_parts))
            ):
                return True

    return False


async def enumerate_files(root: Union[str, Path], **kwargs) -> FileList:
    """便捷函数：枚举文件"""
    return await FileEnumerator(root, **kwargs).list_files()
