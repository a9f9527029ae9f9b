"""集中配置管理

提供统一的配置入口: 工具链可执行文件、全局环境目录名、
共享缓存位置等。支持从 YAML 文件加载 + 编程式覆盖。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from globalpkg.utils.yaml_io import load_yaml

logger = logging.getLogger(__name__)


@dataclass
class Config:
    """全局配置"""

    # 工具链
    toolchain: str = "flutter"
    subprocess_timeout: int | None = None

    # 全局环境
    env_dir_name: str = ".flutter-pkg"
    manifest_name: str = "pubspec.yaml"
    project_name: str = "flutter_global_packages"
    sdk_constraint: str = ">=2.12.0 <4.0.0"
    flutter_constraint: str = ">=1.0.0"

    # 共享下载缓存
    registry: str = "pub.dev"
    cache_env_var: str = "PUB_CACHE"

    # 临时暂存工程
    staging_prefix: str = "flutter_pkg_temp"

    # 自定义扩展 (放不到字段里的配置项)
    extra: dict = field(default_factory=dict)

    @classmethod
    def from_file(cls, path: str) -> Config:
        """从 YAML 文件加载配置，不存在则返回默认"""
        data = load_yaml(path)
        if not data:
            return cls()
        known = {f.name for f in cls.__dataclass_fields__.values()}
        matched = {k: v for k, v in data.items() if k in known}
        extra = {k: v for k, v in data.items() if k not in known}
        cfg = cls(**matched)
        cfg.extra = extra
        return cfg


# 全局单例，首次 import 时不加载文件；由 CLI 入口显式初始化
_current: Config | None = None


def get_config() -> Config:
    """获取当前配置（未初始化则返回默认值）"""
    global _current  # noqa: PLW0603
    if _current is None:
        _current = Config()
    return _current


def init_config(path: str = "") -> Config:
    """从文件初始化全局配置，path 为空时使用默认值"""
    global _current  # noqa: PLW0603
    _current = Config.from_file(path) if path else Config()
    if path:
        logger.info("配置已加载: %s", path)
    return _current
