"""全局清单（pubspec.yaml）的有序模型与持久化

清单按行建模，而不是整体 YAML 反序列化再 dump:
  - ManifestSection: 被识别的顶层段（dependencies / dependency_overrides）
    及其缩进的条目
  - RawBlock: 其余所有行，原样保留

parse() / render() 逐字节往返，编辑只触及被修改的那一个段。
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Union

import yaml

from globalpkg.core.config import Config
from globalpkg.core.exceptions import ValidationError
from globalpkg.core.pkg.models import ANY_CONSTRAINT, DEPENDENCIES, MANAGED_SECTIONS
from globalpkg.utils.yaml_io import atomic_write, load_yaml, read_text

logger = logging.getLogger(__name__)

# "  <name>: <constraint>"，值可为空（如 path 依赖写在下一层缩进）
_ENTRY_RE = re.compile(
    r"^(?P<indent>[ \t]+)(?P<key>[^\s#:][^:]*?)[ \t]*:(?:[ \t]+(?P<value>.*?))?\r?$"
)

DEFAULT_INDENT = "  "


@dataclass
class ManifestEntry:
    """段内的一个条目，lines 含条目行及其更深缩进的续行"""

    key: str
    value: str
    lines: list[str]


@dataclass
class ManifestSection:
    header: str
    header_line: str
    body: list[Union[ManifestEntry, str]] = field(default_factory=list)

    @property
    def entries(self) -> list[ManifestEntry]:
        return [item for item in self.body if isinstance(item, ManifestEntry)]

    def find(self, key: str) -> ManifestEntry | None:
        for entry in self.entries:
            if entry.key == key:
                return entry
        return None

    def lines(self) -> list[str]:
        out = [self.header_line]
        for item in self.body:
            out.extend(item.lines if isinstance(item, ManifestEntry) else [item])
        return out


@dataclass
class RawBlock:
    lines: list[str]


Block = Union[ManifestSection, RawBlock]


def _is_header(line: str, header: str) -> bool:
    return not line[:1].isspace() and line.strip() == f"{header}:"


def _match_header(line: str) -> str | None:
    for header in MANAGED_SECTIONS:
        if _is_header(line, header):
            return header
    return None


def _is_filler(line: str) -> bool:
    """空行或无缩进的注释"""
    return not line.strip() or line.startswith("#")


def _in_body(line: str) -> bool:
    return _is_filler(line) or line[:1].isspace()


def _unquote(key: str) -> str:
    if len(key) >= 2 and key[0] == key[-1] and key[0] in "'\"":
        return key[1:-1]
    return key


@dataclass
class Manifest:
    """清单文档的有序块列表"""

    blocks: list[Block] = field(default_factory=list)
    trailing_newline: bool = True

    # ------------------------------------------------------------------
    # 解析 / 渲染
    # ------------------------------------------------------------------

    @classmethod
    def parse(cls, text: str) -> Manifest:
        trailing_newline = text == "" or text.endswith("\n")
        lines = text.split("\n")
        if trailing_newline:
            lines.pop()

        blocks: list[Block] = []
        i = 0
        while i < len(lines):
            header = _match_header(lines[i])
            if header is None:
                if blocks and isinstance(blocks[-1], RawBlock):
                    blocks[-1].lines.append(lines[i])
                else:
                    blocks.append(RawBlock([lines[i]]))
                i += 1
                continue

            section = ManifestSection(header=header, header_line=lines[i])
            i += 1
            base_indent: str | None = None
            # 段体: 直到下一个无缩进的非注释行，中间的空行和注释不截断段
            while i < len(lines) and _in_body(lines[i]):
                line = lines[i]
                indent = line[:len(line) - len(line.lstrip())]
                m = _ENTRY_RE.match(line) if line.strip() else None
                if m and (base_indent is None or indent == base_indent):
                    base_indent = indent
                    section.body.append(ManifestEntry(
                        key=_unquote(m.group("key")),
                        value=(m.group("value") or "").strip(),
                        lines=[line],
                    ))
                elif (
                    line.strip()
                    and base_indent is not None
                    and len(indent) > len(base_indent)
                    and isinstance(section.body[-1], ManifestEntry)
                ):
                    # 更深缩进的续行归属上一个条目
                    section.body[-1].lines.append(line)
                else:
                    section.body.append(line)
                i += 1

            # 段尾的空行和顶层注释归还给其后的原样块
            tail: list[str] = []
            while section.body and isinstance(section.body[-1], str) and _is_filler(section.body[-1]):
                tail.insert(0, section.body.pop())
            blocks.append(section)
            if tail:
                blocks.append(RawBlock(tail))

        return cls(blocks=blocks, trailing_newline=trailing_newline)

    def render(self) -> str:
        lines: list[str] = []
        for block in self.blocks:
            lines.extend(block.lines() if isinstance(block, ManifestSection) else block.lines)
        text = "\n".join(lines)
        if self.trailing_newline and lines:
            text += "\n"
        return text

    # ------------------------------------------------------------------
    # 查询
    # ------------------------------------------------------------------

    def section(self, header: str) -> ManifestSection | None:
        """同名段出现多次时以第一个为准"""
        for block in self.blocks:
            if isinstance(block, ManifestSection) and block.header == header:
                return block
        return None

    def entries(self, header: str) -> dict[str, str]:
        section = self.section(header)
        if section is None:
            return {}
        result: dict[str, str] = {}
        for entry in section.entries:
            result.setdefault(entry.key, entry.value)
        return result

    # ------------------------------------------------------------------
    # 编辑
    # ------------------------------------------------------------------

    def add(self, header: str, name: str, constraint: str = ANY_CONSTRAINT) -> bool:
        """向段中加入条目，已存在则不变。返回是否有改动。

        段不存在时在文档末尾追加段头和条目；存在时插入到段头之后。
        """
        section = self.section(header)
        if section is None:
            self.blocks.append(ManifestSection(
                header=header,
                header_line=f"{header}:",
                body=[ManifestEntry(name, constraint, [f"{DEFAULT_INDENT}{name}: {constraint}"])],
            ))
            return True

        if section.find(name) is not None:
            return False

        entries = section.entries
        indent = DEFAULT_INDENT
        if entries:
            m = _ENTRY_RE.match(entries[0].lines[0])
            if m:
                indent = m.group("indent")
        eol = "\r" if section.header_line.endswith("\r") else ""
        section.body.insert(0, ManifestEntry(
            name, constraint, [f"{indent}{name}: {constraint}{eol}"],
        ))
        return True

    def remove(self, header: str, name: str) -> bool:
        """从段中移除条目（含续行），段头保留。返回是否有改动。"""
        section = self.section(header)
        if section is None:
            return False
        entry = section.find(name)
        if entry is None:
            return False
        section.body.remove(entry)
        return True


# =========================================================================
# 模板
# =========================================================================

def render_template(
    project_name: str,
    description: str,
    config: Config,
    dependencies: dict[str, str] | None = None,
    *,
    with_overrides: bool = True,
) -> str:
    lines = [
        f"name: {project_name}",
        f"description: {description}",
        "publish_to: none",
        "version: 0.0.1",
        "",
        "environment:",
        f'  sdk: "{config.sdk_constraint}"',
        f'  flutter: "{config.flutter_constraint}"',
        "",
        "dependencies:",
    ]
    for name, constraint in (dependencies or {}).items():
        lines.append(f"{DEFAULT_INDENT}{name}: {constraint}")
    if with_overrides:
        lines.append("dependency_overrides:")
    return "\n".join(lines) + "\n"


# =========================================================================
# 全局清单持久化
# =========================================================================

class ManifestStore:
    """全局环境唯一的持久化清单

    add / remove 同时作用于 dependencies 与 dependency_overrides:
    override 条目让解析器优先使用本地缓存中的制品，离线解析依赖于此。
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def exists(self) -> bool:
        return self.path.is_file()

    def load(self) -> Manifest:
        if not self.path.exists():
            return Manifest()
        return Manifest.parse(read_text(self.path))

    def save(self, manifest: Manifest) -> None:
        atomic_write(self.path, manifest.render())

    def create(self, config: Config) -> None:
        """用固定模板创建清单（覆盖工具链脚手架生成的文件）"""
        atomic_write(self.path, render_template(
            config.project_name,
            "Global package managed by globalpkg",
            config,
        ))
        logger.info("已创建全局清单: %s", self.path)

    def add(self, name: str, constraint: str = ANY_CONSTRAINT) -> bool:
        manifest = self.load()
        changed = False
        for header in MANAGED_SECTIONS:
            changed = manifest.add(header, name, constraint) or changed
        if changed:
            self.save(manifest)
            logger.info("已写入清单: %s: %s", name, constraint)
        else:
            logger.info("清单中已存在: %s", name)
        return changed

    def remove(self, name: str) -> bool:
        manifest = self.load()
        changed = False
        for header in MANAGED_SECTIONS:
            changed = manifest.remove(header, name) or changed
        if changed:
            self.save(manifest)
            logger.info("已从清单移除: %s", name)
        return changed

    def installed(self) -> dict[str, str]:
        """已声明的全局依赖 {name: constraint}"""
        try:
            data = load_yaml(self.path)
        except yaml.YAMLError as e:
            raise ValidationError(f"全局清单格式错误: {self.path}: {e}") from e
        deps = data.get(DEPENDENCIES) or {}
        if not isinstance(deps, dict):
            raise ValidationError(f"全局清单中 {DEPENDENCIES} 必须是映射: {self.path}")
        return {
            str(k): ANY_CONSTRAINT if v is None else str(v)
            for k, v in deps.items()
        }
