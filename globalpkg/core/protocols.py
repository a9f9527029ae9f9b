"""领域协议定义

使用 typing.Protocol 而非 ABC，使实现类无需继承即可满足协议，
测试时直接注入 fake 实现。
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from globalpkg.utils.shell import CommandResult


class ResolverPort(Protocol):
    """外部依赖解析器（工具链）协议

    核心流程只依赖退出码和合并后的输出文本，不解析结构化输出。
    """

    def scaffold(self, working_dir: Path, project_name: str) -> CommandResult:
        """在 working_dir 中初始化一个最小可解析的工程骨架"""
        ...

    def resolve(
        self, working_dir: Path, *, offline: bool, upgrade: bool = False,
    ) -> CommandResult:
        """在 working_dir 中执行依赖解析（offline=True 时禁止联网）"""
        ...
