"""
打包步骤基类模块

定义打包步骤的抽象接口。
"""

from abc import ABC, abstractmethod
from typing import Optional

from ..context import PackagingContext
from ..process import ProcessRunner


class PackagingStep(ABC):
    """打包步骤抽象基类"""

    def __init__(self, name: str, description: str, runner: Optional[ProcessRunner] = None):
        self.name = name
        self.description = description
        self.runner = runner or ProcessRunner()

    @abstractmethod
    async def execute(self, context: PackagingContext) -> None:
        """执行打包步骤"""
        pass
