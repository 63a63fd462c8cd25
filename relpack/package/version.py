"""
版本号读取

从项目元数据（JSON，含 version 字段）中读取版本号，整个打包过程只读一次。
"""

import json
from pathlib import Path
from typing import Union

from ..config.schema import check_name_component
from .context import PackagingError


def read_version(metadata_path: Union[str, Path]) -> str:
    """读取元数据文件中的 version 字段

    Raises:
        PackagingError: 文件不可读、不是合法 JSON、缺少 version 或版本号含路径分隔符
    """
    path = Path(metadata_path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise PackagingError(f"无法读取版本元数据 {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise PackagingError(f"版本元数据不是合法 JSON {path}: {e}") from e

    version = data.get("version") if isinstance(data, dict) else None
    if not isinstance(version, str) or not version.strip():
        raise PackagingError(f"版本元数据缺少 version 字段: {path}")

    version = version.strip()
    try:
        # 版本号会拼进归档和暂存目录的名字
        return check_name_component(version, "版本号")
    except ValueError as e:
        raise PackagingError(f"{e} ({path})") from e
