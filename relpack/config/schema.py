"""
配置 Schema 定义

使用 Pydantic 定义打包配置模型，支持验证和类型检查。
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field, field_validator, model_validator


class Platform(str, Enum):
    """目标平台枚举

    ALL 表示不做任何平台裁剪。
    """
    ALL = "all"
    MAC = "mac"
    LINUX = "linux"
    WINDOWS = "windows"
    SOLARIS = "solaris"

    @classmethod
    def parse(cls, value: Union[str, "Platform"]) -> "Platform":
        """解析平台名称，接受常见别名（osx、win、lin、sol）"""
        if isinstance(value, cls):
            return value
        name = str(value).strip().lower()
        return cls(PLATFORM_ALIASES.get(name, name))


PLATFORM_ALIASES: Dict[str, str] = {
    "osx": "mac",
    "macos": "mac",
    "darwin": "mac",
    "lin": "linux",
    "win": "windows",
    "sol": "solaris",
}


def check_name_component(value: str, label: str) -> str:
    """检查会拼进产物文件名的字段

    归档和暂存目录都以它们命名，包含分隔符或 .. 会写到输出目录之外。
    """
    if any(sep in value for sep in ('/', '\\')) or '..' in value:
        raise ValueError(f"{label}不能包含路径分隔符或 '..': {value}")
    return value


class ArchiveFormat(str, Enum):
    """归档格式枚举"""
    ZIP = "zip"
    TAR_GZ = "tar.gz"


class ProductModel(BaseModel):
    """产品信息模型"""
    name: str = Field(..., description="产品名称，作为所有产物文件名的前缀", min_length=1, max_length=100)
    version: Optional[str] = Field(None, description="版本号（不填则从 version_file 读取）", min_length=1, max_length=40)
    version_file: Path = Field(Path("package.json"), description="包含 version 字段的 JSON 元数据文件")

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        """产品名称会出现在文件名里"""
        return check_name_component(v, "产品名称")

    @field_validator('version')
    @classmethod
    def validate_version(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return check_name_component(v, "版本号")


class FilesModel(BaseModel):
    """文件枚举配置"""
    exclude: List[str] = Field(default_factory=list, description="额外的排除模式（glob 格式）")
    noise_prefixes: List[str] = Field(
        default_factory=lambda: ["Entering "],
        description="子模块遍历输出中需要忽略的提示行前缀",
    )


class PlatformsModel(BaseModel):
    """平台过滤配置"""
    prebuilt_marker: str = Field("node-builds", description="预编译二进制目录标记", min_length=1)
    keep_markers: List[str] = Field(
        default_factory=lambda: ["tmp", "etc"],
        description="无论目标平台如何都保留的路径标记",
    )
    keywords: Dict[Platform, str] = Field(
        default_factory=lambda: {
            Platform.MAC: "osx",
            Platform.LINUX: "lin",
            Platform.WINDOWS: "win",
            Platform.SOLARIS: "sol",
        },
        description="平台到路径关键字的映射",
    )

    @field_validator('keywords', mode='before')
    @classmethod
    def normalize_keyword_keys(cls, v: Any) -> Any:
        if isinstance(v, dict):
            return {Platform.parse(k): val for k, val in v.items()}
        return v

    @model_validator(mode='after')
    def validate_keywords(self) -> 'PlatformsModel':
        if Platform.ALL in self.keywords:
            raise ValueError("平台 all 不需要关键字")
        for platform, keyword in self.keywords.items():
            if not keyword:
                raise ValueError(f"平台 {platform.value} 的关键字不能为空")
        return self


class InstallerModel(BaseModel):
    """Windows 安装器配置"""
    enabled: bool = Field(True, description="是否生成 Windows 安装器")
    template: Optional[Path] = Field(None, description="NSIS 脚本模板路径（默认使用内置模板）")
    doc_names: List[str] = Field(
        default_factory=lambda: ["README", "LICENSE"],
        description="安装时改名为 .txt 的文档文件名",
    )
    output_name: Optional[str] = Field(None, description="安装器文件名（默认 <产品>-v<版本>-windows-installer.exe）")

    @field_validator('output_name')
    @classmethod
    def validate_output_name(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return check_name_component(v, "安装器文件名")


class ArchiveTargetModel(BaseModel):
    """归档目标模型"""
    target: str = Field(..., description="目标标识，出现在归档文件名中", min_length=1)
    platform: Platform = Field(..., description="过滤使用的平台")
    format: ArchiveFormat = Field(ArchiveFormat.TAR_GZ, description="归档格式")

    @field_validator('platform', mode='before')
    @classmethod
    def parse_platform(cls, v: Any) -> Any:
        if isinstance(v, str):
            return Platform.parse(v)
        return v

    @field_validator('target')
    @classmethod
    def validate_target(cls, v: str) -> str:
        return check_name_component(v, "归档目标")


def default_archive_targets() -> List[ArchiveTargetModel]:
    """默认的五个归档目标"""
    return [
        ArchiveTargetModel(target="all", platform=Platform.ALL, format=ArchiveFormat.TAR_GZ),
        ArchiveTargetModel(target="mac", platform=Platform.MAC, format=ArchiveFormat.TAR_GZ),
        ArchiveTargetModel(target="linux", platform=Platform.LINUX, format=ArchiveFormat.TAR_GZ),
        ArchiveTargetModel(target="windows", platform=Platform.WINDOWS, format=ArchiveFormat.ZIP),
        ArchiveTargetModel(target="solaris", platform=Platform.SOLARIS, format=ArchiveFormat.TAR_GZ),
    ]


class ToolsModel(BaseModel):
    """外部工具配置"""
    git: str = Field("git", min_length=1)
    zip: str = Field("zip", min_length=1)
    tar: str = Field("tar", min_length=1)
    makensis: str = Field("makensis", min_length=1)
    zip_level: int = Field(9, description="zip 压缩级别", ge=1, le=9)


class ConfigModel(BaseModel):
    """配置元信息模型"""
    version: int = Field(1, description="配置 schema 版本", ge=1)

    @field_validator('version')
    @classmethod
    def validate_config_version(cls, v: int) -> int:
        SUPPORTED_VERSIONS = [1]
        if v not in SUPPORTED_VERSIONS:
            raise ValueError(f"不支持的配置版本 {v}，支持的版本: {SUPPORTED_VERSIONS}")
        return v


class RelpackConfig(BaseModel):
    """Relpack 主配置模型

    这是整个配置文件的根模型。root 为空时由加载器填入配置文件所在目录。
    """

    config: ConfigModel = Field(default_factory=ConfigModel, description="配置元信息")
    product: ProductModel = Field(..., description="产品信息")

    root: Path = Field(Path("."), description="打包根目录")
    output_dir: Optional[Path] = Field(None, description="产物输出目录（默认为打包根目录）")

    files: FilesModel = Field(default_factory=FilesModel)
    platforms: PlatformsModel = Field(default_factory=PlatformsModel)
    installer: InstallerModel = Field(default_factory=InstallerModel)
    archives: List[ArchiveTargetModel] = Field(default_factory=default_archive_targets)
    tools: ToolsModel = Field(default_factory=ToolsModel)

    model_config = {
        "extra": "forbid",
        "validate_assignment": True,
        "str_strip_whitespace": True,
    }

    @model_validator(mode='after')
    def validate_archive_targets(self) -> 'RelpackConfig':
        """目标标识决定输出文件名，必须唯一"""
        seen = set()
        for archive in self.archives:
            if archive.target in seen:
                raise ValueError(f"归档目标重复: {archive.target}")
            seen.add(archive.target)
        return self

    @model_validator(mode='after')
    def validate_platform_keywords(self) -> 'RelpackConfig':
        """每个要过滤的平台都必须有路径关键字"""
        needed = {a.platform for a in self.archives if a.platform != Platform.ALL}
        if self.installer.enabled:
            needed.add(Platform.WINDOWS)
        missing = sorted(p.value for p in needed if p not in self.platforms.keywords)
        if missing:
            raise ValueError(f"以下平台缺少路径关键字 (platforms.keywords): {', '.join(missing)}")
        return self

    def get_output_dir(self) -> Path:
        return self.output_dir if self.output_dir is not None else self.root

    def artifact_name(self, version: str, target: str) -> str:
        """产物基础名：<产品>-v<版本>-<目标>"""
        return f"{self.product.name}-v{version}-{target}"

    def installer_name(self, version: str) -> str:
        return self.installer.output_name or f"{self.artifact_name(version, 'windows')}-installer.exe"

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典格式（用于保存 YAML）"""
        data = self.model_dump(exclude_none=True)

        def convert_values(obj):
            if isinstance(obj, dict):
                return {convert_values(k): convert_values(v) for k, v in obj.items()}
            elif isinstance(obj, list):
                return [convert_values(item) for item in obj]
            elif isinstance(obj, Enum):
                return obj.value
            elif isinstance(obj, Path):
                return obj.as_posix()
            return obj

        return convert_values(data)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RelpackConfig':
        """从字典创建配置实例"""
        return cls.model_validate(data)
