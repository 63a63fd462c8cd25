"""
NSIS 安装脚本生成器

遍历排好序的文件列表，先生成一组有类型的指令记录（设置输出目录、安装文件、
删除文件、删除目录），再统一渲染成 NSIS 语法填进模板。
"""

import posixpath
import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Union

from ..utils.logging import LogStage, debug, info
from ..utils.paths import to_windows_path
from .context import TemplateError
from .template import Template

REQUIRED_PLACEHOLDERS = ("install_file_list", "remove_file_list", "remove_dir_list")


@dataclass(frozen=True)
class SetOutPath:
    """设置安装输出目录（空字符串表示安装根目录）"""
    directory: str


@dataclass(frozen=True)
class InstallFile:
    """安装一个文件；rename_to 不为空时以新文件名安装"""
    source: str
    rename_to: Optional[str] = None

    @property
    def destination(self) -> str:
        if self.rename_to is None:
            return self.source
        return posixpath.join(posixpath.dirname(self.source), self.rename_to)


@dataclass(frozen=True)
class RemoveFile:
    path: str


@dataclass(frozen=True)
class RemoveDir:
    directory: str


@dataclass
class DirectivePlan:
    """一次生成过程中累积的全部指令"""
    install: List[Union[SetOutPath, InstallFile]] = field(default_factory=list)
    remove_files: List[RemoveFile] = field(default_factory=list)
    remove_dirs: List[RemoveDir] = field(default_factory=list)

    @property
    def output_dirs(self) -> List[str]:
        return [d.directory for d in self.install if isinstance(d, SetOutPath)]


def doc_name_pattern(doc_names: Sequence[str]) -> "re.Pattern[str]":
    """匹配 README、LICENSE（可带 .md 扩展名）这类文档文件名"""
    names = "|".join(re.escape(name) for name in doc_names)
    return re.compile(rf"^({names})(\.md)?$")


def plan_directives(files: Iterable[str], doc_names: Sequence[str] = ("README", "LICENSE")) -> DirectivePlan:
    """根据排好序的文件列表生成指令

    同一目录的文件在排序后是连续的，所以每个目录只在第一次出现时生成一次
    SetOutPath。RMDir 还要覆盖只含子目录的上级目录，否则卸载后会留下空目录。
    """
    pattern = doc_name_pattern(doc_names)
    plan = DirectivePlan()
    prev_dirname: Optional[str] = None
    removed_dirs = set()

    for path in files:
        dirname, basename = posixpath.split(path)

        if dirname != prev_dirname:
            prev_dirname = dirname
            plan.install.append(SetOutPath(dirname))
            for directory in _with_parents(dirname):
                if directory not in removed_dirs:
                    removed_dirs.add(directory)
                    plan.remove_dirs.append(RemoveDir(directory))

        match = pattern.match(basename)
        directive = InstallFile(path, rename_to=f"{match.group(1)}.txt" if match else None)
        plan.install.append(directive)
        plan.remove_files.append(RemoveFile(directive.destination))

    return plan


def _with_parents(directory: str) -> List[str]:
    """目录本身及其全部上级目录（不含安装根目录）；根目录返回 [""]"""
    if not directory:
        return [""]
    chain = []
    while directory:
        chain.append(directory)
        directory = posixpath.dirname(directory)
    return chain


class NsisRenderer:
    """把指令记录渲染成 NSIS 脚本片段"""

    indent = "  "
    root_define = "${ROOT_PATH}"
    install_dir = "$INSTDIR"

    def _install_path(self, path: str) -> str:
        if not path:
            return self.install_dir
        return f"{self.install_dir}\\{to_windows_path(path)}"

    def render_install(self, plan: DirectivePlan) -> str:
        lines = [f"{self.indent}SetOverwrite try"]
        for directive in plan.install:
            if isinstance(directive, SetOutPath):
                lines.append(f'{self.indent}SetOutPath "{self._install_path(directive.directory)}"')
            elif directive.rename_to:
                lines.append(
                    f'{self.indent}File /oname={directive.rename_to} '
                    f'"{self.root_define}\\{to_windows_path(directive.source)}"'
                )
            else:
                lines.append(f'{self.indent}File "{self.root_define}\\{to_windows_path(directive.source)}"')
        return "\n".join(lines) + "\n"

    def render_remove_files(self, plan: DirectivePlan) -> str:
        return "".join(
            f'{self.indent}Delete "{self._install_path(d.path)}"\n' for d in plan.remove_files
        )

    def render_remove_dirs(self, plan: DirectivePlan) -> str:
        # 子目录必须先于父目录删除，RMDir 不删除非空目录
        ordered = sorted(plan.remove_dirs, key=lambda d: d.directory, reverse=True)
        return "".join(
            f'{self.indent}RMDir "{self._install_path(d.directory)}"\n' for d in ordered
        )


class InstallerScriptGenerator:
    """安装脚本生成器"""

    def __init__(
        self,
        template: Template,
        doc_names: Sequence[str] = ("README", "LICENSE"),
        renderer: Optional[NsisRenderer] = None,
    ):
        self.template = template
        self.doc_names = tuple(doc_names)
        self.renderer = renderer or NsisRenderer()

    def validate_template(self) -> None:
        """模板缺少任何一个指令占位符都会生成不完整的安装器"""
        present = set(self.template.placeholders())
        missing = [name for name in REQUIRED_PLACEHOLDERS if name not in present]
        if missing:
            raise TemplateError(f"安装脚本模板缺少占位符: {', '.join(missing)}")

    def build_context(self, files: Iterable[str], version: str, root_path: str = ".",
                      **extra: str) -> Dict[str, str]:
        plan = plan_directives(files, self.doc_names)
        debug(f"安装目录数: {len(plan.output_dirs)}, 文件数: {len(plan.remove_files)}",
              stage=LogStage.TEMPLATE)

        context = {
            "root_path": root_path,
            "version": f"v{version}",
            "install_file_list": self.renderer.render_install(plan),
            "remove_file_list": self.renderer.render_remove_files(plan),
            "remove_dir_list": self.renderer.render_remove_dirs(plan),
        }
        context.update(extra)
        return context

    def generate(self, files: Iterable[str], version: str, root_path: str = ".", **extra: str) -> str:
        """生成完整的安装脚本文本

        Raises:
            TemplateError: 模板不完整
        """
        info("生成 NSIS 安装脚本", stage=LogStage.TEMPLATE)
        self.validate_template()
        return self.template.substitute(self.build_context(files, version, root_path, **extra))
