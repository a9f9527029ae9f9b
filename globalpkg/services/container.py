"""服务容器 — 统一依赖注入

CLI 通过 get_container() 获取服务，而非直接 import 构造。
环境变量、平台、命令执行器和确认提示都可注入，测试时无需真正启动子进程。

依赖关系图（→ 表示依赖）:
  packages → locator, resolver
  resolver → executor

用法:
    container = ServiceContainer()
    container.packages.install("acme_widgets")

    # 测试: 注入 fake 执行器和临时 HOME
    container = ServiceContainer(environ={"HOME": str(tmp)}, executor=fake)
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from globalpkg.core.config import Config
    from globalpkg.core.pkg.locator import GlobalEnvironmentLocator
    from globalpkg.core.protocols import ResolverPort
    from globalpkg.services.pkg_service import PkgService
    from globalpkg.utils.shell import CommandExecutor

logger = logging.getLogger(__name__)


class ServiceContainer:
    """懒加载服务容器，每次命令调用构造一次"""

    def __init__(
        self,
        config: Config | None = None,
        *,
        environ: Mapping[str, str] | None = None,
        is_windows: bool | None = None,
        executor: CommandExecutor | None = None,
        prompt: Callable[[str], str] | None = None,
    ) -> None:
        self._instances: dict[str, object] = {}
        if config is None:
            from globalpkg.core.config import get_config
            config = get_config()
        self._config = config
        self._environ = environ if environ is not None else os.environ
        self._is_windows = sys.platform == "win32" if is_windows is None else is_windows
        self._executor = executor
        self._prompt = prompt

    @property
    def locator(self) -> GlobalEnvironmentLocator:
        if "locator" not in self._instances:
            from globalpkg.core.pkg.locator import GlobalEnvironmentLocator
            self._instances["locator"] = GlobalEnvironmentLocator.from_environ(
                self._environ, is_windows=self._is_windows, config=self._config,
            )
        return self._instances["locator"]  # type: ignore[return-value]

    @property
    def resolver(self) -> ResolverPort:
        if "resolver" not in self._instances:
            from globalpkg.core.pkg.resolver import ToolchainResolver
            from globalpkg.utils.shell import LocalExecutor
            self._instances["resolver"] = ToolchainResolver(
                self._config.toolchain,
                self._executor or LocalExecutor(),
                is_windows=self._is_windows,
                timeout=self._config.subprocess_timeout,
            )
        return self._instances["resolver"]  # type: ignore[return-value]

    @property
    def packages(self) -> PkgService:
        if "packages" not in self._instances:
            from globalpkg.services.pkg_service import PkgService
            kwargs = {"prompt": self._prompt} if self._prompt else {}
            self._instances["packages"] = PkgService(
                self.locator, self.resolver, self._config, **kwargs,
            )
        return self._instances["packages"]  # type: ignore[return-value]


# ---- 全局单例 ----

_global: ServiceContainer | None = None


def get_container(**kwargs: Any) -> ServiceContainer:
    """获取全局 ServiceContainer 单例，kwargs 仅在首次创建时生效"""
    global _global  # noqa: PLW0603
    if _global is None:
        _global = ServiceContainer(**kwargs)
    return _global


def set_container(container: ServiceContainer) -> None:
    """替换全局容器（CLI 入口或测试注入）"""
    global _global  # noqa: PLW0603
    _global = container


def reset_container() -> None:
    """重置全局容器（仅用于测试）"""
    global _global  # noqa: PLW0603
    _global = None
