"""
命令行接口单元测试
"""

import json

import pytest
import typer
from typer.testing import CliRunner

from relpack import __version__
from relpack.cli.commands.files import files_command, script_command
from relpack.cli.main import app


runner = CliRunner()


@pytest.fixture
def patched_runner(monkeypatch, git_listing):
    """让 CLI 创建的 Packager 使用 FakeRunner"""
    monkeypatch.setattr("relpack.package.packager.ProcessRunner", lambda: git_listing)
    return git_listing


class TestCli:
    """CLI 命令测试"""

    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.stdout

    def test_validate_ok(self, tmp_path):
        """测试验证通过的配置"""
        path = tmp_path / "relpack.yaml"
        path.write_text("product:\n  name: demo\n")

        result = runner.invoke(app, ["validate", "-c", str(path)])
        assert result.exit_code == 0

    def test_validate_failure_json(self, tmp_path):
        """测试验证失败时输出 JSON 并返回 1"""
        path = tmp_path / "relpack.yaml"
        path.write_text("product:\n  name: demo\ntools:\n  zip_level: 0\n")

        result = runner.invoke(app, ["validate", "-c", str(path), "--json"])
        assert result.exit_code == 1
        data = json.loads(result.stdout)
        assert data["error_count"] == 1
        assert data["errors"][0]["loc"] == ["tools", "zip_level"]

    def test_example(self, tmp_path):
        """测试生成的示例配置可以通过验证"""
        path = tmp_path / "example.yaml"

        result = runner.invoke(app, ["example", "-o", str(path)])
        assert result.exit_code == 0
        assert path.exists()

        result = runner.invoke(app, ["validate", "-c", str(path)])
        assert result.exit_code == 0

    def test_files(self, source_tree, patched_runner):
        """测试按平台列出文件"""
        result = runner.invoke(app, ["files", "--root", str(source_tree), "--platform", "osx"])
        assert result.exit_code == 0

        listed = [line for line in result.stdout.splitlines() if line and not line.startswith(" ")]
        assert "node-builds/osx/native.node" in listed
        assert "node-builds/tmp/placeholder" in listed
        assert "vendor/ext/index.js" in listed
        assert "node-builds/win/native.node" not in listed
        assert ".gitignore" not in listed

    def test_files_unknown_platform(self, source_tree, patched_runner):
        result = runner.invoke(app, ["files", "--root", str(source_tree), "--platform", "beos"])
        assert result.exit_code == 1
        assert patched_runner.calls == []

    def test_script_to_file(self, source_tree, patched_runner):
        """测试写出安装脚本"""
        output = source_tree / "installer.nsi"

        result = runner.invoke(app, ["script", "--root", str(source_tree), "-o", str(output)])
        assert result.exit_code == 0

        script = output.read_text(encoding="utf-8")
        assert '!define ROOT_PATH "."' in script
        assert 'File /oname=README.txt "${ROOT_PATH}\\README.md"' in script
        assert "node-builds\\osx" not in script

    def test_package_missing_config(self, tmp_path):
        """测试配置文件不存在时返回 1"""
        result = runner.invoke(app, ["package", "-c", str(tmp_path / "missing.yaml")])
        assert result.exit_code == 1

    def test_package_with_failed_artifact(self, source_tree, patched_runner, tmp_path):
        """测试有产物失败时返回 1"""
        patched_runner.respond(("makensis",), returncode=1, stderr="boom")

        result = runner.invoke(app, ["package", "--root", str(source_tree), "--target", "mac"])
        assert result.exit_code == 1
        assert patched_runner.calls_to("tar")

    def test_package_success(self, source_tree, patched_runner):
        result = runner.invoke(app, ["package", "--root", str(source_tree), "--skip-installer"])
        assert result.exit_code == 0
        assert not patched_runner.calls_to("makensis")
        assert len(patched_runner.calls_to("tar")) == 4
        assert len(patched_runner.calls_to("zip")) == 1


class TestCliErrorStream:
    """files / script 的错误信息只写到标准错误"""

    def test_files_unknown_platform_on_stderr(self, source_tree, capsys):
        with pytest.raises(typer.Exit):
            files_command(config=None, root=str(source_tree), platform="beos")

        captured = capsys.readouterr()
        assert captured.out == ""
        assert "beos" in captured.err

    def test_script_enumeration_failure_on_stderr(self, source_tree, patched_runner, capsys):
        patched_runner.respond(("git", "-c", "core.quotepath=off", "ls-files"), returncode=128,
                               stderr="fatal: boom")

        with pytest.raises(typer.Exit):
            script_command(config=None, root=str(source_tree), output=None)

        captured = capsys.readouterr()
        assert captured.out == ""
        assert "boom" in captured.err
