"""外部工具链解析器

职责:
- ToolchainResolver: 通过 CommandExecutor 调用工具链的 create / pub get / pub upgrade
- OfflineResolver: 在全局环境中以离线模式重新解析
- ensure_success: 非零退出码统一转换为 ExecutionError
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from globalpkg.core.exceptions import ExecutionError
from globalpkg.core.protocols import ResolverPort
from globalpkg.utils.shell import CommandExecutor, CommandResult

logger = logging.getLogger(__name__)


def ensure_success(result: CommandResult, label: str) -> CommandResult:
    """子进程失败时抛出 ExecutionError，消息中原样附带 stdout/stderr"""
    if not result.success:
        raise ExecutionError(
            f"{label}失败 (rc={result.returncode}):\n{result.output}",
            returncode=result.returncode,
            stdout=result.stdout,
            stderr=result.stderr,
        )
    return result


class ToolchainResolver:
    """基于工具链命令行的 ResolverPort 实现"""

    def __init__(
        self,
        executable: str,
        executor: CommandExecutor,
        *,
        is_windows: bool = False,
        timeout: int | None = None,
    ) -> None:
        self.executable = f"{executable}.bat" if is_windows else executable
        self.executor = executor
        self.timeout = timeout

    def scaffold(self, working_dir: Path, project_name: str) -> CommandResult:
        return self._run([
            "create", "--template=package",
            "--project-name", project_name, ".",
        ], working_dir)

    def resolve(
        self, working_dir: Path, *, offline: bool, upgrade: bool = False,
    ) -> CommandResult:
        args = ["pub", "upgrade" if upgrade else "get"]
        if offline:
            args.append("--offline")
        return self._run(args, working_dir)

    def _run(self, args: list[str], working_dir: Path) -> CommandResult:
        cmd = [self.executable, *args]
        logger.info("  执行: %s (cwd=%s)", " ".join(cmd), working_dir)
        try:
            return self.executor.execute(cmd, cwd=str(working_dir), timeout=self.timeout)
        except subprocess.TimeoutExpired as e:
            raise ExecutionError(
                f"{self.executable} 执行超时 ({e.timeout}s): {' '.join(cmd)}",
            ) from e
        except OSError as e:
            raise ExecutionError(f"无法执行 {self.executable}: {e}") from e


class OfflineResolver:
    """在全局环境中离线重新解析依赖

    仅当清单中所有包都已在共享缓存中时才会成功；
    清单引用了未缓存的包属于合法的失败情形。失败时不回滚清单。
    """

    def __init__(self, resolver: ResolverPort, env_dir: Path) -> None:
        self.resolver = resolver
        self.env_dir = env_dir

    def run(self, *, upgrade: bool = False) -> CommandResult:
        label = "离线升级" if upgrade else "离线解析"
        logger.info("%s: %s", label, self.env_dir)
        result = self.resolver.resolve(self.env_dir, offline=True, upgrade=upgrade)
        return ensure_success(result, label)
