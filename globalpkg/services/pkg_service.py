"""全局包服务 — install / uninstall / upgrade 编排

安装流程:
  校验参数 → 初始化全局环境 → 探测缓存 → {跳过 | 暂存下载}
  → 写入清单 → 离线解析

任一阶段失败即终止后续阶段。离线解析失败时不回滚清单，
清单可能残留一个尚未解析成功的依赖。

已知限制: 全局清单与共享缓存没有任何加锁保护，
同时运行的多个安装会竞争同一个清单文件。
"""

from __future__ import annotations

import logging
import shutil
from collections.abc import Callable

from globalpkg.core.config import Config
from globalpkg.core.exceptions import (
    EnvironmentUninitializedError,
    MissingArgumentError,
    UninstallError,
    UserAbortedError,
    ValidationError,
)
from globalpkg.core.pkg.cache import PackageCache
from globalpkg.core.pkg.locator import GlobalEnvironmentLocator
from globalpkg.core.pkg.manifest import ManifestStore
from globalpkg.core.pkg.models import InstallResult, UninstallResult
from globalpkg.core.pkg.resolver import OfflineResolver, ensure_success
from globalpkg.core.pkg.staging import StagingFetcher
from globalpkg.core.protocols import ResolverPort

logger = logging.getLogger(__name__)

_CONFIRM_ANSWERS = frozenset(("y", "yes"))


def _require_name(name: str | None) -> str:
    if not name or not name.strip():
        raise MissingArgumentError("请提供包名。")
    return name.strip()


class PkgService:
    """全局包管理服务"""

    def __init__(
        self,
        locator: GlobalEnvironmentLocator,
        resolver: ResolverPort,
        config: Config,
        *,
        prompt: Callable[[str], str] = input,
    ) -> None:
        self.locator = locator
        self.resolver = resolver
        self.config = config
        self.prompt = prompt
        self.cache = PackageCache(locator.hosted_dir)
        self.manifest = ManifestStore(locator.manifest_path)
        self.fetcher = StagingFetcher(resolver, config)
        self.offline = OfflineResolver(resolver, locator.env_dir)

    # ------------------------------------------------------------------
    # install
    # ------------------------------------------------------------------

    def install(self, name: str | None) -> InstallResult:
        pkg = _require_name(name)
        self.ensure_environment()

        result = InstallResult(name=pkg)
        if not self.cache.probe(pkg):
            logger.info("%s 未缓存，开始下载", pkg)
            self.fetcher.fetch(pkg)
            result.fetched = True

        result.manifest_changed = self.manifest.add(pkg)
        self.offline.run()
        logger.info("%s 已全局安装", pkg)
        return result

    def ensure_environment(self) -> None:
        """创建全局环境目录；清单不存在时先用工具链初始化，再写入固定模板"""
        env_dir = self.locator.env_dir
        env_dir.mkdir(parents=True, exist_ok=True)
        if self.manifest.exists():
            return

        logger.info("初始化全局环境: %s", env_dir)
        ensure_success(
            self.resolver.scaffold(env_dir, self.config.project_name),
            "初始化全局环境",
        )
        self.manifest.create(self.config)

    # ------------------------------------------------------------------
    # uninstall
    # ------------------------------------------------------------------

    def uninstall(
        self,
        name: str | None,
        *,
        force: bool = False,
        yes: bool = False,
        keep_manifest: bool = False,
    ) -> UninstallResult:
        """卸载包

        (a) 删除全局环境中的私有工作副本（不存在不算错误）
        (a') 除非 keep_manifest，从清单两个段中移除该包
        (b) 仅 force 时: 确认后从共享缓存删除所有 "<包名>-*" 版本目录

        拒绝确认时返回 aborted=True，不视为失败；已完成的步骤不回滚。
        """
        pkg = _require_name(name)
        working_copy = self.locator.working_copy(pkg)
        # 包名参与构造递归删除的路径，必须恰好指向全局环境下的一级子目录
        if (
            "/" in pkg or "\\" in pkg or ".." in pkg
            or working_copy.name != pkg
            or working_copy.parent != self.locator.env_dir
        ):
            raise ValidationError(f"非法包名: {pkg}")

        result = UninstallResult(name=pkg)
        try:
            if working_copy.is_dir():
                shutil.rmtree(working_copy)
                result.removed_working_copy = True
                logger.info("已从全局环境删除: %s", working_copy)

            if not keep_manifest and self.manifest.exists():
                result.manifest_changed = self.manifest.remove(pkg)

            if force:
                if not yes:
                    self._confirm_purge(pkg)
                result.purged = self.cache.purge(pkg)
        except UserAbortedError:
            logger.info("用户取消了缓存清理: %s", pkg)
            result.aborted = True
        except (OSError, ValueError) as e:
            raise UninstallError(f"卸载 {pkg} 失败: {e}") from e
        return result

    def _confirm_purge(self, name: str) -> None:
        answer = self.prompt(
            f"警告: 将从共享缓存中永久删除 {name}，可能影响其他工程。\n"
            "继续? (y/N)"
        )
        if (answer or "").strip().lower() not in _CONFIRM_ANSWERS:
            raise UserAbortedError("已中止。")

    # ------------------------------------------------------------------
    # upgrade / list
    # ------------------------------------------------------------------

    def upgrade(self) -> None:
        """离线升级: 对每个约束选取缓存中可满足的最新版本"""
        if not self.manifest.exists():
            raise EnvironmentUninitializedError("尚未安装任何全局包。")
        self.offline.run(upgrade=True)
        logger.info("全局包已离线升级")

    def list_installed(self) -> dict[str, str]:
        if not self.manifest.exists():
            return {}
        return self.manifest.installed()
