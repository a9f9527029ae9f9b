"""统一异常体系

所有业务异常继承 GlobalPkgError，CLI 层据此输出友好提示并以失败状态退出。
缓存未命中不是异常: PackageCache.probe 返回 False 即走下载路径。
"""

from __future__ import annotations


class GlobalPkgError(Exception):
    """基础异常"""

    code: str = "UNKNOWN"

    def __init__(self, message: str) -> None:
        super().__init__(message)


class ConfigError(GlobalPkgError):
    """配置缺失或内容无效（如找不到用户主目录）"""

    code = "CONFIG_ERROR"


class ValidationError(GlobalPkgError):
    """输入数据校验失败"""

    code = "VALIDATION_ERROR"


class MissingArgumentError(ValidationError):
    """未提供包名"""

    code = "MISSING_ARGUMENT"


class ExecutionError(GlobalPkgError):
    """外部工具链（create / pub get）返回非零退出码"""

    code = "SUBPROCESS_FAILURE"

    def __init__(
        self, message: str, *,
        returncode: int = -1, stdout: str = "", stderr: str = "",
    ) -> None:
        super().__init__(message)
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr


class EnvironmentUninitializedError(GlobalPkgError):
    """全局环境尚未初始化（从未安装过任何包）"""

    code = "ENVIRONMENT_UNINITIALIZED"


class UserAbortedError(GlobalPkgError):
    """用户拒绝了破坏性操作的确认"""

    code = "USER_ABORTED"


class UninstallError(GlobalPkgError):
    """卸载过程中出现意外错误"""

    code = "UNINSTALL_FAILED"
