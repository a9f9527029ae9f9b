"""globalpkg 命令行接口

CLI 按领域拆分为子模块，每个模块注册自己的命令到 main group。
"""

from __future__ import annotations

import os

import click

from globalpkg import __version__
from globalpkg.core.config import init_config
from globalpkg.services.container import ServiceContainer, get_container, reset_container
from globalpkg.utils.logger import setup_logging


def _ask(message: str) -> str:
    """阻塞读取一行标准输入，无超时"""
    return click.prompt(message, default="", show_default=False)


def _svc() -> ServiceContainer:
    """获取全局服务容器的快捷方式"""
    return get_container(prompt=_ask)


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config", "config_path", default="", envvar="GLOBALPKG_CONFIG",
    help="配置文件路径（YAML）",
)
def main(config_path: str) -> None:
    """globalpkg - 离线优先的全局包管理器"""
    setup_logging(
        level=os.getenv("GLOBALPKG_LOG_LEVEL", "WARNING"),
        json_output=os.getenv("GLOBALPKG_LOG_JSON", "") == "1",
    )
    if config_path:
        init_config(config_path)
        reset_container()


# 注册各领域子命令
from globalpkg.cli.cmd_pkg import register as _reg_pkg  # noqa: E402

_reg_pkg(main)
