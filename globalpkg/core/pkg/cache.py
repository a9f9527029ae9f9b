"""共享下载缓存的探测与清理

按目录名判断包是否存在，不解析版本元数据:
  - probe: 在 hosted/<registry>/ 下递归查找名称恰好等于包名的目录
  - purge: 删除 hosted/<registry>/ 下名称以 "<包名>-" 开头的版本目录

两者匹配规则不同是有意为之: purge 需要匹配带版本号的目录名，
probe 只判断是否存在。
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from globalpkg.core.exceptions import MissingArgumentError

logger = logging.getLogger(__name__)


class PackageCache:
    """共享下载缓存（跨所有工程共享，不归全局环境独占）"""

    def __init__(self, hosted_dir: Path) -> None:
        self.hosted_dir = hosted_dir

    def probe(self, name: str) -> bool:
        """包是否已在缓存中。缓存根目录不存在视为未命中，不报错。

        只读操作；精度受限于目录名匹配，误判为未命中只会触发一次多余的下载。
        """
        if not name:
            raise MissingArgumentError("请提供包名。")
        if not self.hosted_dir.is_dir():
            logger.info("共享缓存不存在: %s", self.hosted_dir)
            return False
        hit = any(
            p.name == name and p.is_dir()
            for p in self.hosted_dir.rglob("*")
        )
        logger.info("缓存%s: %s", "命中" if hit else "未命中", name)
        return hit

    def purge(self, name: str) -> list[str]:
        """删除该包在缓存中的所有版本目录，返回被删除的目录名"""
        if not name:
            raise MissingArgumentError("请提供包名。")
        if not self.hosted_dir.is_dir():
            return []

        prefix = f"{name}-"
        removed: list[str] = []
        for d in sorted(self.hosted_dir.iterdir()):
            if d.is_dir() and d.name.startswith(prefix):
                shutil.rmtree(d)
                logger.info("已从共享缓存删除: %s", d.name)
                removed.append(d.name)
        return removed
