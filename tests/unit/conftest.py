"""
单元测试共用夹具

FakeRunner 代替真实的外部进程：按参数前缀匹配预设的响应，并记录所有调用。
"""

from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple

import pytest

from relpack.package.process import ProcessResult, ProcessRunner


class FakeResponse:
    def __init__(self, returncode=0, stdout="", stderr="", effect=None, raises=None):
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        self.effect = effect
        self.raises = raises


class FakeRunner(ProcessRunner):
    """记录调用并返回预设结果的进程运行器"""

    def __init__(self):
        super().__init__()
        self.calls: List[Tuple[tuple, Path]] = []
        self._rules: List[Tuple[tuple, FakeResponse]] = []

    def respond(self, prefix: Sequence[str], returncode: int = 0, stdout: str = "", stderr: str = "",
                effect: Optional[Callable] = None, raises: Optional[Exception] = None) -> None:
        """为以 prefix 开头的命令设置响应，后设置的规则优先"""
        self._rules.append((tuple(prefix), FakeResponse(returncode, stdout, stderr, effect, raises)))

    def calls_to(self, program: str) -> List[Tuple[tuple, Path]]:
        return [call for call in self.calls if call[0][0] == program]

    def call_index(self, program: str) -> List[int]:
        return [i for i, call in enumerate(self.calls) if call[0][0] == program]

    async def run(self, args, cwd):
        args = tuple(str(a) for a in args)
        self.calls.append((args, Path(cwd)))

        for prefix, response in reversed(self._rules):
            if args[:len(prefix)] == prefix:
                if response.effect:
                    response.effect(args, Path(cwd))
                if response.raises:
                    raise response.raises
                return ProcessResult(args, response.returncode, response.stdout, response.stderr)

        return ProcessResult(args, 0, "", "")


@pytest.fixture
def fake_runner():
    return FakeRunner()


@pytest.fixture
def source_tree(tmp_path):
    """带预编译二进制目录的打包根目录"""
    root = tmp_path / "project"
    files = {
        "README.md": "readme",
        "LICENSE": "license",
        "package.json": '{"name": "demo", "version": "1.2.3"}',
        "lib/core.js": "core",
        "lib/util/helpers.js": "helpers",
        "node-builds/win/native.node": "win",
        "node-builds/osx/native.node": "osx",
        "node-builds/lin/native.node": "lin",
        "node-builds/sol/native.node": "sol",
        "node-builds/tmp/placeholder": "tmp",
        "vendor/ext/index.js": "submodule file",
    }
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
    return root


TOP_LEVEL_LISTING = "\n".join([
    ".gitignore",
    "LICENSE",
    "README.md",
    "lib/core.js",
    "lib/util/helpers.js",
    "node-builds/lin/native.node",
    "node-builds/osx/native.node",
    "node-builds/sol/native.node",
    "node-builds/tmp/placeholder",
    "node-builds/win/native.node",
    "package.json",
    "vendor/ext",
]) + "\n"

SUBMODULE_LISTING = "Entering 'vendor/ext'\nvendor/ext/index.js\n"


@pytest.fixture
def git_listing(fake_runner):
    """FakeRunner 上预设 git 输出，对应 source_tree"""
    fake_runner.respond(("git", "-c", "core.quotepath=off", "ls-files"), stdout=TOP_LEVEL_LISTING)
    fake_runner.respond(("git", "submodule"), stdout=SUBMODULE_LISTING)
    return fake_runner
