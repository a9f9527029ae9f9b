"""全局环境定位

GlobalEnvironmentLocator 在每次调用时构造一次，并显式传给各组件，
不做隐式的进程级查找。
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from globalpkg.core.config import Config
from globalpkg.core.exceptions import ConfigError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GlobalEnvironmentLocator:
    """全局环境与共享缓存的路径集合

    路径规则:
      - env_dir:       <home>/.flutter-pkg/
      - manifest_path: <env_dir>/pubspec.yaml
      - hosted_dir:    <cache_root>/hosted/<registry>/
    """

    home: Path
    env_dir: Path
    manifest_path: Path
    cache_root: Path
    hosted_dir: Path
    is_windows: bool = False

    @classmethod
    def from_environ(
        cls,
        environ: Mapping[str, str],
        *,
        is_windows: bool,
        config: Config,
    ) -> GlobalEnvironmentLocator:
        home_var = "USERPROFILE" if is_windows else "HOME"
        home_value = environ.get(home_var, "")
        if not home_value:
            raise ConfigError(f"无法确定用户主目录: 环境变量 {home_var} 未设置")
        home = Path(home_value)

        cache_root = _cache_root(environ, home, is_windows, config)
        env_dir = home / config.env_dir_name
        locator = cls(
            home=home,
            env_dir=env_dir,
            manifest_path=env_dir / config.manifest_name,
            cache_root=cache_root,
            hosted_dir=cache_root / "hosted" / config.registry,
            is_windows=is_windows,
        )
        logger.debug("全局环境: %s, 共享缓存: %s", env_dir, cache_root)
        return locator

    def working_copy(self, name: str) -> Path:
        """包在全局环境中的私有工作副本目录"""
        return self.env_dir / name


def _cache_root(
    environ: Mapping[str, str], home: Path, is_windows: bool, config: Config,
) -> Path:
    """共享缓存根目录: 环境变量覆盖优先，否则取平台默认位置"""
    override = environ.get(config.cache_env_var, "")
    if override:
        return Path(override)
    if is_windows:
        local_app_data = environ.get("LOCALAPPDATA", "")
        if not local_app_data:
            raise ConfigError(
                f"无法确定共享缓存位置: {config.cache_env_var} 与 LOCALAPPDATA 均未设置"
            )
        return Path(local_app_data) / "Pub" / "Cache"
    return home / ".pub-cache"
