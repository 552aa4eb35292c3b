#!/usr/bin/env python3
"""
Generate table of contents and sidebar descriptors for the site generator.

Creates (in the data directory):
- toc.json             - published blocks/modules/topics, keyed by locale
- sidebar.json         - one sidebar per locale
- sidebar-unified.json - a single sidebar built on the base locale, with
                         per-node label translations for the other locales

Run standalone to rebuild both sidebars from an existing toc.json.

Usage:
    python generate_sidebar.py [--config PATH] [--root PATH]
"""

import argparse
import json
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Iterable

from articles import topic_link
from config import SyncConfig, load_config
from curriculum import TopicEntry
from errors import DocumentError, SyncError


# --- Data Structures ---

@dataclass(frozen=True)
class TocTopic:
    slug: str
    title: str


@dataclass(frozen=True)
class TocModule:
    id: str
    title: str
    topics: tuple[TocTopic, ...] = ()


@dataclass(frozen=True)
class TocBlock:
    """A block with at least one published topic. Flat blocks use topics, others modules."""
    id: str
    title: str
    flat: bool = False
    modules: tuple[TocModule, ...] = ()
    topics: tuple[TocTopic, ...] = ()


@dataclass
class SidebarLink:
    label: str
    link: str | None = None
    slug: str | None = None
    translations: dict[str, str] | None = None

    def to_dict(self) -> dict[str, Any]:
        item = {'label': self.label}
        if self.translations is not None:
            item['translations'] = self.translations
        if self.link is not None:
            item['link'] = self.link
        else:
            item['slug'] = self.slug
        return item


@dataclass
class SidebarGroup:
    label: str
    items: list = field(default_factory=list)
    collapsed: bool = False
    translations: dict[str, str] | None = None

    def to_dict(self) -> dict[str, Any]:
        group = {'label': self.label}
        if self.translations is not None:
            group['translations'] = self.translations
        group['collapsed'] = self.collapsed
        group['items'] = [item.to_dict() for item in self.items]
        return group


# --- Table of contents ---

def build_toc(entries: Iterable[TopicEntry]) -> list[TocBlock]:
    """
    Table of contents over the given topic entries, in the order given.

    Pass the catalog's own entries so the TOC lists exactly the topics that
    were emitted. Blocks and modules with no entry never appear.
    """
    groups = []
    for entry in entries:
        if not groups or groups[-1][0] is not entry.block:
            groups.append((entry.block, []))
        modules = groups[-1][1]
        if not modules or modules[-1][0] is not entry.module:
            modules.append((entry.module, []))
        modules[-1][1].append(TocTopic(entry.slug, entry.title))

    blocks = []
    for block, modules in groups:
        if block.flat:
            topics = tuple(topic for _, group in modules for topic in group)
            blocks.append(TocBlock(id=block.id, title=block.title, flat=True, topics=topics))
        else:
            blocks.append(TocBlock(
                id=block.id,
                title=block.title,
                modules=tuple(TocModule(m.id, m.title, tuple(group)) for m, group in modules),
            ))
    return blocks


def _topic_dict(topic: TocTopic) -> dict[str, Any]:
    return {'slug': topic.slug, 'title': topic.title}


def toc_to_dict(blocks: list[TocBlock]) -> dict[str, Any]:
    return {
        'blocks': [
            {
                'id': block.id,
                'title': block.title,
                'flat': block.flat,
                'modules': [
                    {
                        'id': module.id,
                        'title': module.title,
                        'topics': [_topic_dict(t) for t in module.topics],
                    }
                    for module in block.modules
                ],
                'topics': [_topic_dict(t) for t in block.topics],
            }
            for block in blocks
        ]
    }


def toc_from_dict(data: dict[str, Any]) -> list[TocBlock]:
    """Inverse of toc_to_dict, for rebuilding sidebars from toc.json."""
    def topics(raw):
        return tuple(TocTopic(str(t['slug']), str(t['title'])) for t in raw.get('topics') or [])

    return [
        TocBlock(
            id=str(block['id']),
            title=str(block['title']),
            flat=block.get('flat') is True,
            modules=tuple(
                TocModule(str(m['id']), str(m['title']), topics(m)) for m in block.get('modules') or []
            ),
            topics=topics(block),
        )
        for block in data.get('blocks') or []
    ]


# --- Sidebars ---

def _no_translations(key: tuple, label: str) -> None:
    return None


def _chapters(
    blocks: list[TocBlock],
    link_for: Callable[[TocTopic], SidebarLink],
    translate: Callable[[tuple, str], dict[str, str] | None],
) -> list[SidebarGroup]:
    chapters = []
    for block in blocks:
        items = []
        if block.flat:
            items = [link_for(topic) for topic in block.topics]
        for module in block.modules:
            if len(module.topics) > 1:
                items.append(SidebarGroup(
                    label=module.title,
                    items=[link_for(topic) for topic in module.topics],
                    collapsed=True,
                    translations=translate(('module', block.id, module.id), module.title),
                ))
            elif len(module.topics) == 1:
                # Single topic: no subgroup
                items.append(link_for(module.topics[0]))

        if items:
            chapters.append(SidebarGroup(
                label=block.title,
                items=items,
                collapsed=False,
                translations=translate(('block', block.id), block.title),
            ))
    return chapters


def build_sidebar(locale_code: str, toc: list[TocBlock], book_title: str) -> list[SidebarGroup]:
    """Sidebar for one locale: a book group wrapping one group per block."""
    chapters = _chapters(
        toc,
        lambda topic: SidebarLink(label=topic.title, link=topic_link(locale_code, topic.slug)),
        _no_translations,
    )
    if not chapters:
        return []
    return [SidebarGroup(label=book_title or locale_code, items=chapters, collapsed=False)]


def collect_labels(tocs: dict[str, list[TocBlock]]) -> dict[tuple, dict[str, str]]:
    """Map each stable node key to its label in every locale that has it."""
    labels = {}
    for code, blocks in tocs.items():
        for block in blocks:
            labels.setdefault(('block', block.id), {})[code] = block.title
            for module in block.modules:
                labels.setdefault(('module', block.id, module.id), {})[code] = module.title
                for topic in module.topics:
                    labels.setdefault(('topic', topic.slug), {})[code] = topic.title
            for topic in block.topics:
                labels.setdefault(('topic', topic.slug), {})[code] = topic.title
    return labels


def differing_labels(by_locale: dict[str, str], base_locale: str, base_label: str) -> dict[str, str]:
    return {
        code: label for code, label in by_locale.items()
        if code != base_locale and label != base_label
    }


def build_unified_sidebar(
    tocs: dict[str, list[TocBlock]],
    base_locale: str,
    book_titles: dict[str, str],
) -> list[SidebarGroup]:
    """
    One sidebar for all locales.

    The base locale's published structure is the backbone. Topics are
    addressed by slug so the site generator prefixes the active locale.
    """
    base = tocs.get(base_locale) or []
    if not base:
        return []

    labels = collect_labels(tocs)

    def translate(key, label):
        return differing_labels(labels.get(key, {}), base_locale, label)

    def link_for(topic):
        return SidebarLink(
            label=topic.title,
            slug=topic.slug,
            translations=translate(('topic', topic.slug), topic.title),
        )

    chapters = _chapters(base, link_for, translate)
    if not chapters:
        return []

    base_title = book_titles.get(base_locale) or base_locale
    return [SidebarGroup(
        label=base_title,
        items=chapters,
        collapsed=False,
        translations=differing_labels(
            {code: title for code, title in book_titles.items() if title},
            base_locale,
            base_title,
        ),
    )]


def sidebars_to_dict(sidebars: dict[str, list[SidebarGroup]]) -> dict[str, list]:
    return {code: [group.to_dict() for group in groups] for code, groups in sidebars.items()}


# --- Output ---

def write_json(path: Path, data: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
        f.write('\n')


def write_sidebars(config: SyncConfig, tocs: dict[str, list[TocBlock]]) -> tuple[Path, Path]:
    """Write sidebar.json and sidebar-unified.json from per-locale TOCs."""
    sidebars = {
        loc.code: build_sidebar(loc.code, tocs.get(loc.code, []), loc.book_title)
        for loc in config.locales
    }
    sidebar_path = config.data_dir / 'sidebar.json'
    write_json(sidebar_path, sidebars_to_dict(sidebars))

    unified = build_unified_sidebar(tocs, config.base_locale, config.book_titles)
    unified_path = config.data_dir / 'sidebar-unified.json'
    write_json(unified_path, [group.to_dict() for group in unified])
    return sidebar_path, unified_path


def load_toc_file(toc_path: Path) -> dict[str, list[TocBlock]]:
    try:
        with open(toc_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise DocumentError(toc_path, f"invalid JSON: {e}") from e
    if not isinstance(data, dict):
        raise DocumentError(toc_path, 'expected an object keyed by locale')
    try:
        return {code: toc_from_dict(entry or {}) for code, entry in data.items()}
    except (KeyError, TypeError, AttributeError) as e:
        raise DocumentError(toc_path, f"unexpected structure: {e}") from e


def main():
    parser = argparse.ArgumentParser(
        description='Rebuild sidebar.json and sidebar-unified.json from toc.json'
    )
    parser.add_argument(
        '--config',
        type=Path,
        default=None,
        help='YAML config file (default: built-in locales)'
    )
    parser.add_argument(
        '--root',
        type=Path,
        default=None,
        help='Directory relative paths resolve against'
    )

    args = parser.parse_args()

    try:
        config = load_config(args.config, args.root)
        toc_path = config.data_dir / 'toc.json'
        if not toc_path.exists():
            print(f"Error: toc.json not found: {toc_path}")
            print("Run sync_content.py first to generate it.")
            return 1
        tocs = load_toc_file(toc_path)
        sidebar_path, unified_path = write_sidebars(config, tocs)
    except SyncError as e:
        print(f"Error: {e}")
        return 1

    print(f"Generated: {sidebar_path}")
    print(f"Generated: {unified_path}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
