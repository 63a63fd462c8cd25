"""
Relpack - 发布打包流水线

Enumerates version-tracked files, generates a Windows installer script and
produces per-platform release archives.
"""

__version__ = "0.1.0"
__author__ = "Project Team"
__license__ = "MIT"

from .config.schema import RelpackConfig
from .package.packager import Packager

__all__ = ["RelpackConfig", "Packager", "__version__"]
