"""暂存工程下载器

缓存未命中时，创建一个一次性的临时工程，只声明 "<包名>: any" 一个依赖，
在线执行一次解析，唯一的作用是把包下载进共享缓存。
临时工程无论成败都会被删除。
"""

from __future__ import annotations

import logging
import shutil
import tempfile
from pathlib import Path

from globalpkg.core.config import Config
from globalpkg.core.pkg.manifest import render_template
from globalpkg.core.pkg.models import ANY_CONSTRAINT
from globalpkg.core.pkg.resolver import ensure_success
from globalpkg.core.protocols import ResolverPort
from globalpkg.utils.yaml_io import atomic_write

logger = logging.getLogger(__name__)


class StagingFetcher:
    """通过临时工程强制工具链下载指定包"""

    def __init__(self, resolver: ResolverPort, config: Config) -> None:
        self.resolver = resolver
        self.config = config

    def fetch(self, name: str) -> None:
        # mkdtemp 保证目录名唯一，并发安装不同包时不会冲突
        staging_dir = Path(tempfile.mkdtemp(prefix=self.config.staging_prefix))
        project_name = staging_dir.name.lower()
        logger.info("暂存工程: %s", staging_dir)
        try:
            ensure_success(
                self.resolver.scaffold(staging_dir, project_name),
                "创建临时工程",
            )
            atomic_write(
                staging_dir / self.config.manifest_name,
                render_template(
                    project_name,
                    "Temporary project for globalpkg install",
                    self.config,
                    {name: ANY_CONSTRAINT},
                    with_overrides=False,
                ),
            )
            ensure_success(
                self.resolver.resolve(staging_dir, offline=False),
                f"下载 {name} ",
            )
        finally:
            shutil.rmtree(staging_dir, ignore_errors=True)
        logger.info("%s 已下载到共享缓存", name)
