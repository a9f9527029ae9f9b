"""全局包管理模块

- locator.py: 全局环境与共享缓存路径
- cache.py: 共享缓存探测 / 清理
- manifest.py: 全局清单模型与持久化
- staging.py: 暂存工程下载
- resolver.py: 工具链调用与离线解析
"""

from globalpkg.core.pkg.cache import PackageCache
from globalpkg.core.pkg.locator import GlobalEnvironmentLocator
from globalpkg.core.pkg.manifest import Manifest, ManifestStore
from globalpkg.core.pkg.models import InstallResult, UninstallResult
from globalpkg.core.pkg.resolver import OfflineResolver, ToolchainResolver
from globalpkg.core.pkg.staging import StagingFetcher

__all__ = [
    "GlobalEnvironmentLocator",
    "InstallResult",
    "Manifest",
    "ManifestStore",
    "OfflineResolver",
    "PackageCache",
    "StagingFetcher",
    "ToolchainResolver",
    "UninstallResult",
]
