"""CLI — 全局包管理命令"""

from __future__ import annotations

import click

from globalpkg.cli import _svc
from globalpkg.core.exceptions import GlobalPkgError


def register(group: click.Group) -> None:
    group.add_command(install)
    group.add_command(uninstall)
    group.add_command(upgrade)
    group.add_command(list_pkgs)


@click.command()
@click.argument("name", required=False)
def install(name: str | None) -> None:
    """全局安装一个包（已缓存时完全离线）"""
    try:
        result = _svc().packages.install(name)
    except GlobalPkgError as e:
        raise click.ClickException(str(e)) from e
    if result.fetched:
        click.echo(f"{result.name} 已下载到共享缓存。")
    click.echo(f"{result.name} 已全局安装!")


@click.command()
@click.argument("name", required=False)
@click.option("--force", "-f", is_flag=True, help="同时从共享缓存中删除该包（破坏性操作）")
@click.option("--yes", "-y", is_flag=True, help="使用 --force 时跳过确认")
@click.option("--keep-manifest", is_flag=True, help="保留全局清单中的条目")
def uninstall(name: str | None, force: bool, yes: bool, keep_manifest: bool) -> None:
    """卸载全局包"""
    if name:
        click.echo(f"卸载: {name}")
    try:
        result = _svc().packages.uninstall(
            name, force=force, yes=yes, keep_manifest=keep_manifest,
        )
    except GlobalPkgError as e:
        raise click.ClickException(str(e)) from e

    if result.removed_working_copy:
        click.echo("已从全局环境删除。")
    if result.manifest_changed:
        click.echo("已从全局清单移除。")
    if result.aborted:
        click.echo("已中止。")
        return
    for d in result.purged:
        click.echo(f"已从共享缓存删除: {d}")


@click.command()
def upgrade() -> None:
    """离线升级所有全局包"""
    click.echo("正在离线升级所有全局包...")
    try:
        _svc().packages.upgrade()
    except GlobalPkgError as e:
        raise click.ClickException(str(e)) from e
    click.echo("所有全局包已升级!")


@click.command(name="list")
def list_pkgs() -> None:
    """列出已全局安装的包"""
    try:
        packages = _svc().packages.list_installed()
    except GlobalPkgError as e:
        raise click.ClickException(str(e)) from e
    if not packages:
        click.echo("没有已安装的全局包。")
        return
    for name, constraint in packages.items():
        click.echo(f"  {name:30s} {constraint}")
