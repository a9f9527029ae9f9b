"""CLI 端到端测试 — click CliRunner + 模拟工具链"""

from __future__ import annotations

from pathlib import Path

import pytest
from click.testing import CliRunner

from globalpkg.cli import _ask, main
from globalpkg.core.config import Config
from globalpkg.services.container import ServiceContainer, reset_container, set_container


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture()
def container(environ: dict[str, str], toolchain):
    c = ServiceContainer(
        Config(), environ=environ, is_windows=False, executor=toolchain, prompt=_ask,
    )
    set_container(c)
    yield c
    reset_container()


def _seed_versions(container: ServiceContainer, name: str) -> Path:
    hosted = container.locator.hosted_dir
    for v in ("1.0.0", "1.2.0"):
        (hosted / f"{name}-{v}").mkdir(parents=True)
    return hosted


class TestInstallCommand:
    def test_install(self, runner: CliRunner, container: ServiceContainer) -> None:
        r = runner.invoke(main, ["install", "acme_widgets"])
        assert r.exit_code == 0, r.output
        assert "acme_widgets 已下载到共享缓存。" in r.output
        assert "acme_widgets 已全局安装!" in r.output

    def test_missing_name(self, runner: CliRunner, container: ServiceContainer, toolchain) -> None:
        r = runner.invoke(main, ["install"])
        assert r.exit_code == 1
        assert "请提供包名" in r.output
        assert toolchain.calls == []

    def test_resolver_failure_is_reported(
        self, runner: CliRunner, container: ServiceContainer, toolchain,
    ) -> None:
        toolchain.known = set()
        r = runner.invoke(main, ["install", "nope"])
        assert r.exit_code == 1
        assert "could not find package nope" in r.output

    def test_toolchain_not_on_path(self, runner: CliRunner, environ: dict[str, str]) -> None:
        set_container(ServiceContainer(
            Config(toolchain="definitely-not-a-flutter-binary"),
            environ=environ, is_windows=False,
        ))
        try:
            r = runner.invoke(main, ["install", "acme_widgets"])
        finally:
            reset_container()
        assert r.exit_code == 1
        assert "无法执行 definitely-not-a-flutter-binary" in r.output
        assert r.exception is None or isinstance(r.exception, SystemExit)


class TestUninstallCommand:
    def test_force_declined(self, runner: CliRunner, container: ServiceContainer) -> None:
        hosted = _seed_versions(container, "acme_widgets")
        r = runner.invoke(main, ["uninstall", "acme_widgets", "--force"], input="n\n")
        assert r.exit_code == 0, r.output
        assert "已中止。" in r.output
        assert len(list(hosted.iterdir())) == 2

    def test_force_confirmed(self, runner: CliRunner, container: ServiceContainer) -> None:
        hosted = _seed_versions(container, "acme_widgets")
        r = runner.invoke(main, ["uninstall", "acme_widgets", "-f"], input="y\n")
        assert r.exit_code == 0, r.output
        assert "已从共享缓存删除: acme_widgets-1.0.0" in r.output
        assert list(hosted.iterdir()) == []

    def test_force_yes(self, runner: CliRunner, container: ServiceContainer) -> None:
        hosted = _seed_versions(container, "acme_widgets")
        r = runner.invoke(main, ["uninstall", "acme_widgets", "-f", "-y"])
        assert r.exit_code == 0, r.output
        assert "继续?" not in r.output
        assert list(hosted.iterdir()) == []

    def test_after_install(self, runner: CliRunner, container: ServiceContainer) -> None:
        runner.invoke(main, ["install", "acme_widgets"])
        container.locator.working_copy("acme_widgets").mkdir()
        r = runner.invoke(main, ["uninstall", "acme_widgets"])
        assert r.exit_code == 0, r.output
        assert "已从全局环境删除。" in r.output
        assert "已从全局清单移除。" in r.output

    def test_missing_name(self, runner: CliRunner, container: ServiceContainer) -> None:
        r = runner.invoke(main, ["uninstall"])
        assert r.exit_code == 1
        assert "请提供包名" in r.output


class TestUpgradeAndList:
    def test_upgrade_without_install(
        self, runner: CliRunner, container: ServiceContainer, toolchain,
    ) -> None:
        r = runner.invoke(main, ["upgrade"])
        assert r.exit_code == 1
        assert "尚未安装任何全局包" in r.output
        assert toolchain.calls == []

    def test_upgrade(self, runner: CliRunner, container: ServiceContainer, toolchain) -> None:
        runner.invoke(main, ["install", "acme_widgets"])
        r = runner.invoke(main, ["upgrade"])
        assert r.exit_code == 0, r.output
        assert "所有全局包已升级!" in r.output
        assert toolchain.verbs()[-1] == "upgrade --offline"

    def test_list(self, runner: CliRunner, container: ServiceContainer) -> None:
        r = runner.invoke(main, ["list"])
        assert "没有已安装的全局包。" in r.output
        runner.invoke(main, ["install", "acme_widgets"])
        r = runner.invoke(main, ["list"])
        assert "acme_widgets" in r.output


def test_config_option_loads_file(tmp_path: Path, runner: CliRunner, monkeypatch) -> None:
    from globalpkg.core import config as cfgmod

    cfg_file = tmp_path / "globalpkg.yml"
    cfg_file.write_text("env_dir_name: .custom-pkg\n")
    monkeypatch.setattr(cfgmod, "_current", None)
    monkeypatch.setenv("HOME", str(tmp_path))
    r = runner.invoke(main, ["--config", str(cfg_file), "list"])
    assert r.exit_code == 0, r.output
    assert cfgmod.get_config().env_dir_name == ".custom-pkg"
    reset_container()


def test_version(runner: CliRunner) -> None:
    r = runner.invoke(main, ["--version"])
    assert r.exit_code == 0
    assert "0.1.0" in r.output
