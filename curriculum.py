#!/usr/bin/env python3
"""
Load a book curriculum (blocks -> modules -> topics) from curriculum.yaml.

Two block shapes are accepted:

    blocks:
      - id: basics            # numeric-prefix layout: content/NN-basics/NN-intro/<slug>/article.md
        order: 1
        title: Basics
        modules:
          - id: intro
            order: 1
            title: Introduction
            topics:
              - slug: hello-world
                title: Hello, World
                description: First program

      - id: appendix          # explicit-path layout, no module level
        title: Appendix
        path: appendix
        flat: true
        topics:
          - slug: glossary
            title: Glossary
            file: glossary.md

Usage:
    python curriculum.py PATH [--validate]
"""

import argparse
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator

import yaml

from errors import DocumentError


# --- Data Structures ---

@dataclass(frozen=True)
class Topic:
    """A single addressable article."""
    slug: str
    title: str
    description: str | None = None
    file: str | None = None


@dataclass(frozen=True)
class Module:
    """A group of topics inside a block."""
    id: str
    title: str
    topics: tuple[Topic, ...] = ()
    order: int | None = None
    path: str | None = None


@dataclass(frozen=True)
class Block:
    """Top-level curriculum group. Flat blocks hold topics directly."""
    id: str
    title: str
    modules: tuple[Module, ...] = ()
    topics: tuple[Topic, ...] = ()
    description: str | None = None
    order: int | None = None
    path: str | None = None
    flat: bool = False


@dataclass(frozen=True)
class Curriculum:
    blocks: tuple[Block, ...] = ()


@dataclass(frozen=True)
class TopicEntry:
    """A topic together with the block and module it sits in."""
    topic: Topic
    block: Block
    module: Module | None = None

    @property
    def slug(self) -> str:
        return self.topic.slug

    @property
    def title(self) -> str:
        return self.topic.title


# --- Parsing ---

def _text(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)


def _order(value: Any, where: str, source: Path) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise DocumentError(source, f"{where}: 'order' must be an integer, got {value!r}")
    return value


def _ordered(items: list, orders: list[int | None]) -> list:
    """Sort siblings by their declared order when every sibling declares one."""
    if items and all(o is not None for o in orders):
        return [item for _, item in sorted(zip(orders, items), key=lambda pair: pair[0])]
    return items


def _require_list(raw: dict, key: str, where: str, source: Path) -> list:
    value = raw.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise DocumentError(source, f"{where}: '{key}' must be a list")
    return value


def _parse_topic(raw: Any, where: str, source: Path) -> Topic:
    if not isinstance(raw, dict) or not raw.get('slug'):
        raise DocumentError(source, f"{where}: topic needs a 'slug'")
    slug = str(raw['slug'])
    return Topic(
        slug=slug,
        title=_text(raw.get('title')) or slug,
        description=_text(raw.get('description')),
        file=_text(raw.get('file') or raw.get('path')),
    )


def _parse_topics(raw: dict, where: str, source: Path) -> tuple[Topic, ...]:
    items = _require_list(raw, 'topics', where, source)
    return tuple(_parse_topic(t, f"{where} topic #{i + 1}", source) for i, t in enumerate(items))


def _parse_module(raw: Any, where: str, source: Path) -> Module:
    if not isinstance(raw, dict) or not raw.get('id'):
        raise DocumentError(source, f"{where}: module needs an 'id'")
    module_id = str(raw['id'])
    where = f"{where} module '{module_id}'"
    return Module(
        id=module_id,
        title=_text(raw.get('title')) or module_id,
        topics=_parse_topics(raw, where, source),
        order=_order(raw.get('order'), where, source),
        path=_text(raw.get('path')),
    )


def _parse_block(raw: Any, index: int, source: Path) -> Block:
    if not isinstance(raw, dict) or not raw.get('id'):
        raise DocumentError(source, f"block #{index + 1} needs an 'id'")
    block_id = str(raw['id'])
    where = f"block '{block_id}'"
    flat = raw.get('flat') is True

    modules = ()
    topics = ()
    if flat:
        if raw.get('modules'):
            print(f"  Warning: {where} is flat, ignoring its modules")
        topics = _parse_topics(raw, where, source)
    else:
        raw_modules = _require_list(raw, 'modules', where, source)
        parsed = [_parse_module(m, where, source) for m in raw_modules]
        modules = tuple(_ordered(parsed, [m.order for m in parsed]))

    return Block(
        id=block_id,
        title=_text(raw.get('title')) or block_id,
        modules=modules,
        topics=topics,
        description=_text(raw.get('description')),
        order=_order(raw.get('order'), where, source),
        path=_text(raw.get('path')),
        flat=flat,
    )


def parse_curriculum(data: Any, source: Path) -> Curriculum:
    """Build a Curriculum from an already-parsed YAML document."""
    if data is None:
        return Curriculum()
    if not isinstance(data, dict):
        raise DocumentError(source, 'curriculum must be a mapping with a "blocks" list')

    raw_blocks = _require_list(data, 'blocks', 'curriculum', source)
    blocks = [_parse_block(b, i, source) for i, b in enumerate(raw_blocks)]
    return Curriculum(blocks=tuple(_ordered(blocks, [b.order for b in blocks])))


def load_curriculum(path: Path) -> Curriculum | None:
    """
    Read curriculum.yaml.

    Returns None when the file does not exist (the locale is simply absent).
    Raises DocumentError when the file exists but cannot be used.
    """
    if not path.exists():
        return None

    try:
        data = yaml.safe_load(path.read_text(encoding='utf-8'))
    except yaml.YAMLError as e:
        raise DocumentError(path, f"invalid YAML: {e}") from e

    return parse_curriculum(data, path)


# --- Traversal ---

def iter_topics(curriculum: Curriculum) -> Iterator[TopicEntry]:
    """Yield every topic in curriculum order, flattened."""
    for block in curriculum.blocks:
        if block.flat:
            for topic in block.topics:
                yield TopicEntry(topic=topic, block=block)
            continue
        for module in block.modules:
            for topic in module.topics:
                yield TopicEntry(topic=topic, block=block, module=module)


def validate_curriculum(curriculum: Curriculum) -> list[str]:
    """Check for structural issues that do not stop a sync but are worth fixing."""
    issues = []

    seen = {}
    for entry in iter_topics(curriculum):
        where = entry.block.id if entry.module is None else f"{entry.block.id}/{entry.module.id}"
        if entry.slug in seen:
            issues.append(f"{entry.slug}: duplicate slug (in {seen[entry.slug]} and {where})")
        else:
            seen[entry.slug] = where

    for block in curriculum.blocks:
        if block.flat and not block.topics:
            issues.append(f"{block.id}: flat block has no topics")
        if not block.flat and not block.modules:
            issues.append(f"{block.id}: block has no modules")
        for module in block.modules:
            if not module.topics:
                issues.append(f"{block.id}/{module.id}: module has no topics")

    return issues


def count_nodes(curriculum: Curriculum) -> tuple[int, int, int]:
    """Return (blocks, modules, topics)."""
    modules = sum(len(b.modules) for b in curriculum.blocks)
    topics = sum(1 for _ in iter_topics(curriculum))
    return len(curriculum.blocks), modules, topics


def main():
    parser = argparse.ArgumentParser(
        description='Load a curriculum.yaml and report its structure'
    )
    parser.add_argument('path', type=Path, help='Path to curriculum.yaml')
    parser.add_argument(
        '--validate',
        action='store_true',
        help='Check for duplicate slugs and empty groups'
    )

    args = parser.parse_args()

    try:
        curriculum = load_curriculum(args.path)
    except DocumentError as e:
        print(f"Error: {e}")
        return 1

    if curriculum is None:
        print(f"Error: Curriculum not found: {args.path}")
        return 1

    blocks, modules, topics = count_nodes(curriculum)
    print(f"Blocks:  {blocks}")
    print(f"Modules: {modules}")
    print(f"Topics:  {topics}")

    if args.validate:
        issues = validate_curriculum(curriculum)
        if issues:
            print("\n--- Validation Issues ---")
            for issue in issues:
                print(f"  {issue}")
            return 1
        print("\nNo validation issues found.")

    return 0


if __name__ == '__main__':
    sys.exit(main())
