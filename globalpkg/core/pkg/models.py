"""全局包管理数据模型

数据类:
- InstallResult: 安装结果
- UninstallResult: 卸载结果
"""

from __future__ import annotations

from dataclasses import dataclass, field

DEPENDENCIES = "dependencies"
DEPENDENCY_OVERRIDES = "dependency_overrides"

# 清单中被识别的两个顶层段，install / uninstall 同时作用于二者
MANAGED_SECTIONS = (DEPENDENCIES, DEPENDENCY_OVERRIDES)

# 不带版本约束，接受最新可解析版本
ANY_CONSTRAINT = "any"


@dataclass
class InstallResult:
    """单次安装的结果"""

    name: str
    fetched: bool = False          # 是否走了暂存工程下载
    manifest_changed: bool = False


@dataclass
class UninstallResult:
    """单次卸载的结果，部分完成也是合法终态"""

    name: str
    removed_working_copy: bool = False
    manifest_changed: bool = False
    purged: list[str] = field(default_factory=list)
    aborted: bool = False
