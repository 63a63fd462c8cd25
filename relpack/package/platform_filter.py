"""
平台过滤器

去掉与目标平台无关的预编译二进制文件。Windows 安装器和各平台归档都用同一个
过滤器，保证两处的过滤规则一致。
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional, Tuple, Union

from ..config.schema import Platform, PlatformsModel
from ..utils.logging import LogStage, debug
from .context import FileList


@dataclass(frozen=True)
class FilterPolicy:
    """过滤策略

    路径包含 prebuilt_marker、不包含目标平台关键字、也不包含任何 keep_markers
    时被排除。所有判断都是路径子串匹配，作用于整条路径。
    """
    prebuilt_marker: str = "node-builds"
    keep_markers: Tuple[str, ...] = ("tmp", "etc")
    keywords: Dict[Platform, str] = field(default_factory=lambda: {
        Platform.MAC: "osx",
        Platform.LINUX: "lin",
        Platform.WINDOWS: "win",
        Platform.SOLARIS: "sol",
    })

    @classmethod
    def from_config(cls, model: PlatformsModel) -> "FilterPolicy":
        return cls(
            prebuilt_marker=model.prebuilt_marker,
            keep_markers=tuple(model.keep_markers),
            keywords=dict(model.keywords),
        )

    def keyword_for(self, platform: Platform) -> Optional[str]:
        if platform == Platform.ALL:
            return None
        try:
            return self.keywords[platform]
        except KeyError:
            raise ValueError(f"平台 {platform.value} 没有配置路径关键字") from None


class PlatformFilter:
    """平台过滤器"""

    def __init__(self, policy: Optional[FilterPolicy] = None):
        self.policy = policy or FilterPolicy()

    def is_excluded(self, path: str, platform: Union[Platform, str]) -> bool:
        """判断单个路径是否应当从该平台的产物中去掉"""
        keyword = self.policy.keyword_for(Platform.parse(platform))
        if keyword is None:
            return False
        if self.policy.prebuilt_marker not in path:
            return False
        if keyword in path:
            return False
        return not any(marker in path for marker in self.policy.keep_markers)

    def apply(self, files: Iterable[str], platform: Union[Platform, str]) -> FileList:
        """返回过滤后的新列表，输入不会被修改"""
        platform = Platform.parse(platform)
        kept = tuple(path for path in files if not self.is_excluded(path, platform))
        debug(f"平台 {platform.value}: 保留 {len(kept)} 个文件", stage=LogStage.FILTER)
        return kept
