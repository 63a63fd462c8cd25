"""
模板引擎

对模板文本做 {{name}} 形式的占位符替换。未知占位符原样保留；替换只扫描一遍，
替换进去的值不会再被当作模板解析。
"""

import re
from pathlib import Path
from typing import List, Mapping, Union

from .context import TemplateError

PLACEHOLDER_PATTERN = re.compile(r"\{\{\s*([A-Za-z_][A-Za-z0-9_]*)\s*\}\}")


class Template:
    """文本模板"""

    def __init__(self, text: str):
        self.text = text

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "Template":
        """读取模板文件

        Raises:
            TemplateError: 文件不存在或无法按 UTF-8 读取
        """
        template_path = Path(path)
        try:
            return cls(template_path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError) as e:
            raise TemplateError(f"无法读取模板 {template_path}: {e}") from e

    def placeholders(self) -> List[str]:
        """模板中出现的占位符名称（按首次出现顺序，去重）"""
        names: List[str] = []
        for match in PLACEHOLDER_PATTERN.finditer(self.text):
            if match.group(1) not in names:
                names.append(match.group(1))
        return names

    def substitute(self, context: Mapping[str, str]) -> str:
        def replace(match: "re.Match[str]") -> str:
            name = match.group(1)
            if name in context:
                return str(context[name])
            return match.group(0)

        return PLACEHOLDER_PATTERN.sub(replace, self.text)


def render(text: str, context: Mapping[str, str]) -> str:
    """便捷函数：替换模板字符串中的占位符"""
    return Template(text).substitute(context)
