"""
外部进程运行器

所有外部工具（git、zip、tar、makensis）都通过这里以异步子进程方式运行。
每次调用都显式传入工作目录，从不修改进程级的当前目录。
"""

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence, Union

from .context import ToolNotFoundError


@dataclass(frozen=True)
class ProcessResult:
    """子进程执行结果"""
    args: tuple
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def diagnostic_lines(self) -> list:
        """错误流中的非空行"""
        return [line for line in self.stderr.splitlines() if line.strip()]


class ProcessRunner:
    """异步子进程运行器

    测试中可以替换为返回预设结果的实现。
    """

    def __init__(self, encoding: str = "utf-8"):
        self.encoding = encoding

    async def run(
        self,
        args: Sequence[str],
        cwd: Union[str, Path],
    ) -> ProcessResult:
        """运行命令直到结束，收集全部输出

        Raises:
            ToolNotFoundError: 可执行文件不存在
        """
        args = tuple(str(a) for a in args)
        try:
            proc = await asyncio.create_subprocess_exec(
                *args,
                cwd=str(cwd),
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as e:
            # cwd 不存在时同样会抛 FileNotFoundError
            if not Path(cwd).is_dir():
                raise
            raise ToolNotFoundError(args[0]) from e

        stdout, stderr = await proc.communicate()
        return ProcessResult(
            args=args,
            returncode=proc.returncode,
            stdout=stdout.decode(self.encoding, errors="replace"),
            stderr=stderr.decode(self.encoding, errors="replace"),
        )
