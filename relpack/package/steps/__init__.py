"""打包步骤"""

from .step import PackagingStep
from .enumerate_step import EnumerateStep
from .installer_step import InstallerStep, render_installer_script
from .archive_step import ArchiveStep

__all__ = [
    "PackagingStep",
    "EnumerateStep",
    "InstallerStep",
    "ArchiveStep",
    "render_installer_script",
]
