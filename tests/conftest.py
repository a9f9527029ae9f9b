"""共享 fixture — 临时 HOME / 共享缓存 + 模拟工具链

FakeToolchain 模拟 flutter 命令行的最小行为:
  - create:            写入骨架 pubspec.yaml
  - pub get/upgrade:   读取工作目录清单中的依赖；
                       在线模式把未缓存的包"下载"到 hosted/pub.dev/<name>/，
                       离线模式遇到未缓存的包即失败
"""

from __future__ import annotations

from pathlib import Path

import pytest

from globalpkg.core.config import Config
from globalpkg.core.pkg.locator import GlobalEnvironmentLocator
from globalpkg.core.pkg.manifest import Manifest
from globalpkg.core.pkg.models import MANAGED_SECTIONS
from globalpkg.core.pkg.resolver import ToolchainResolver
from globalpkg.services.pkg_service import PkgService
from globalpkg.utils.logger import reset_logging
from globalpkg.utils.shell import CommandResult


class FakeToolchain:
    """实现 CommandExecutor 协议的模拟工具链"""

    def __init__(self, hosted_dir: Path, known: set[str] | None = None) -> None:
        self.hosted_dir = hosted_dir
        self.known = known  # None 表示注册中心里什么包都有
        self.calls: list[tuple[list[str], str]] = []
        self.failures: dict[str, CommandResult] = {}

    def execute(
        self,
        cmd: str | list[str],
        *,
        cwd: str = ".",
        env: dict[str, str] | None = None,
        timeout: int | None = None,
    ) -> CommandResult:
        args = cmd.split() if isinstance(cmd, str) else list(cmd)
        self.calls.append((args, cwd))
        verb = args[1] if args[1] == "create" else args[2]
        if verb in self.failures:
            return self.failures[verb]

        work = Path(cwd)
        if verb == "create":
            (work / "pubspec.yaml").write_text("name: scaffold\n")
            (work / "lib").mkdir(exist_ok=True)
            return CommandResult(0, "All done!", "")

        manifest = Manifest.parse((work / "pubspec.yaml").read_text())
        names: list[str] = []
        for header in MANAGED_SECTIONS:
            names.extend(n for n in manifest.entries(header) if n not in names)

        for name in names:
            if (self.hosted_dir / name).is_dir():
                continue
            if "--offline" in args:
                return CommandResult(
                    1, "Resolving dependencies...",
                    f"Because {work.name} depends on {name} any which doesn't exist "
                    f"(could not find package {name} in cache), version solving failed.",
                )
            if self.known is not None and name not in self.known:
                return CommandResult(
                    65, "Resolving dependencies...",
                    f"Because {work.name} depends on {name} any which doesn't exist "
                    f"(could not find package {name} at https://pub.dev), "
                    "version solving failed.",
                )
            (self.hosted_dir / name).mkdir(parents=True)
        (work / "pubspec.lock").write_text("packages: {}\n")
        return CommandResult(0, "Got dependencies!", "")

    def verbs(self) -> list[str]:
        """按调用顺序返回动作: create / get / get --offline / upgrade --offline"""
        out = []
        for args, _ in self.calls:
            verb = " ".join(args[1:2] if args[1] == "create" else args[2:])
            out.append(verb)
        return out


class Answers:
    """按顺序回答确认提示，并记录提示内容"""

    def __init__(self, *answers: str) -> None:
        self.answers = list(answers)
        self.prompts: list[str] = []

    def __call__(self, message: str) -> str:
        self.prompts.append(message)
        return self.answers.pop(0)


@pytest.fixture(autouse=True)
def _clean_logging():
    yield
    reset_logging()


@pytest.fixture()
def environ(tmp_path: Path) -> dict[str, str]:
    home = tmp_path / "home"
    home.mkdir()
    return {"HOME": str(home), "PUB_CACHE": str(tmp_path / "pub-cache")}


@pytest.fixture()
def config() -> Config:
    return Config()


@pytest.fixture()
def locator(environ: dict[str, str], config: Config) -> GlobalEnvironmentLocator:
    return GlobalEnvironmentLocator.from_environ(environ, is_windows=False, config=config)


@pytest.fixture()
def toolchain(locator: GlobalEnvironmentLocator) -> FakeToolchain:
    return FakeToolchain(locator.hosted_dir)


@pytest.fixture()
def resolver(toolchain: FakeToolchain) -> ToolchainResolver:
    return ToolchainResolver("flutter", toolchain)


@pytest.fixture()
def answers() -> Answers:
    return Answers()


@pytest.fixture()
def service(
    locator: GlobalEnvironmentLocator,
    resolver: ToolchainResolver,
    config: Config,
    answers: Answers,
) -> PkgService:
    return PkgService(locator, resolver, config, prompt=answers)
