#!/usr/bin/env python3
"""
Build the catalog of published topics for one book locale.

Walks the curriculum in order, finds each topic's article file under the
book's content/ directory, reads its YAML frontmatter and keeps only the
topics whose frontmatter says `published: true`. The resulting catalog is
what both the article sync and the table of contents are built from.

Usage:
    python build_catalog.py --book-dir PATH [--locale CODE] [--output PATH] [--stats]

Options:
    --book-dir PATH   Book directory containing curriculum.yaml and content/
    --locale CODE     Locale code recorded in the output (default: book dir suffix)
    --output PATH     Write the catalog as JSON
    --stats           Print missing / unpublished topic lists
"""

import argparse
import json
import re
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from config import ARTICLE_FILE, CONTENT_SUBDIR, CURRICULUM_FILE
from curriculum import Block, Curriculum, Module, Topic, TopicEntry, iter_topics, load_curriculum
from errors import DocumentError


FRONTMATTER_RE = re.compile(r'^---[ \t]*\r?\n(?:(.*?)\r?\n)?---[ \t]*(?:\r?\n|$)', re.DOTALL)
PREFIXED_DIR_RE = re.compile(r'^(\d+)-(.+)$')
BOOL_TAG = 'tag:yaml.org,2002:bool'


class FrontmatterLoader(yaml.SafeLoader):
    """SafeLoader with YAML 1.2 booleans: yes/no/on/off stay strings."""


FrontmatterLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != BOOL_TAG]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}
FrontmatterLoader.add_implicit_resolver(
    BOOL_TAG,
    re.compile(r'^(?:true|True|TRUE|false|False|FALSE)$'),
    list('tTfF'),
)


# --- Data Structures ---

@dataclass(frozen=True)
class Article:
    """An article file split into frontmatter and body."""
    metadata: dict[str, Any] | None
    body: str


@dataclass(frozen=True)
class PublishedTopic:
    """A topic whose article resolved and is marked published."""
    entry: TopicEntry
    source: Path
    article: Article

    @property
    def slug(self) -> str:
        return self.entry.slug

    @property
    def title(self) -> str:
        return self.entry.title


@dataclass
class Catalog:
    """Published topics of one locale, in curriculum order."""
    locale: str
    topics: list[PublishedTopic] = field(default_factory=list)
    missing: list[str] = field(default_factory=list)
    unpublished: list[str] = field(default_factory=list)
    duplicates: list[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.topics) + len(self.missing) + len(self.unpublished) + len(self.duplicates)


# --- Frontmatter ---

def split_article(content: str, source: Path | None = None) -> Article:
    """
    Split article text into parsed YAML frontmatter and body.

    metadata is None when there is no frontmatter block, when it is not
    valid YAML, or when it does not parse to a mapping.
    """
    match = FRONTMATTER_RE.match(content)
    if not match:
        return Article(metadata=None, body=content)

    body = content[match.end():]
    try:
        metadata = yaml.load(match.group(1) or '', Loader=FrontmatterLoader)
    except yaml.YAMLError as e:
        print(f"  Warning: Invalid YAML in {source or 'frontmatter'}: {e}")
        return Article(metadata=None, body=body)

    return Article(metadata=metadata if isinstance(metadata, dict) else None, body=body)


def read_article(file_path: Path) -> Article | None:
    """Read an article file. Returns None if it cannot be read."""
    try:
        content = file_path.read_text(encoding='utf-8')
    except (OSError, UnicodeDecodeError) as e:
        print(f"  Warning: Could not read {file_path}: {e}")
        return None
    return split_article(content, file_path)


def is_published(metadata: dict[str, Any] | None) -> bool:
    """Only the boolean true publishes; "true", 1 and friends do not."""
    return bool(metadata) and metadata.get('published') is True


# --- Source resolution ---

def find_prefixed_dir(parent: Path, node_id: str, order: int | None = None) -> Path | None:
    """
    Locate the `NN-<node_id>` directory under parent.

    The declared order gives the directory name directly. Without an order,
    or when that name does not exist, the parent is listed once and the
    lowest-numbered match wins.
    """
    if order is not None:
        candidate = parent / f"{order:02d}-{node_id}"
        if candidate.is_dir():
            return candidate

    if not parent.is_dir():
        return None

    matches = []
    for child in parent.iterdir():
        m = PREFIXED_DIR_RE.match(child.name)
        if m and m.group(2) == node_id and child.is_dir():
            matches.append((int(m.group(1)), child.name, child))
    if not matches:
        return None
    return min(matches)[2]


def resolve_block_dir(content_root: Path, block: Block) -> Path | None:
    if block.path:
        block_dir = content_root / block.path
        return block_dir if block_dir.is_dir() else None
    return find_prefixed_dir(content_root, block.id, block.order)


def resolve_module_dir(block_dir: Path, module: Module) -> Path | None:
    if module.path:
        module_dir = block_dir / module.path
        return module_dir if module_dir.is_dir() else None
    return find_prefixed_dir(block_dir, module.id, module.order)


def resolve_topic_file(parent: Path, topic: Topic) -> Path | None:
    if topic.file:
        candidate = parent / topic.file
    else:
        candidate = parent / topic.slug / ARTICLE_FILE
    return candidate if candidate.is_file() else None


def resolve_source(content_root: Path, block: Block, module: Module | None, topic: Topic) -> Path | None:
    """
    Find the article file for a topic, or None.

    Flat blocks keep their topics directly under the block directory, so
    any module passed in is ignored for them.
    """
    block_dir = resolve_block_dir(content_root, block)
    if block_dir is None:
        return None

    if block.flat:
        return resolve_topic_file(block_dir, topic)

    if module is None:
        return None
    module_dir = resolve_module_dir(block_dir, module)
    if module_dir is None:
        return None
    return resolve_topic_file(module_dir, topic)


# --- Catalog ---

def build_catalog(curriculum: Curriculum | None, content_root: Path, locale: str) -> Catalog:
    """Resolve and filter every curriculum topic of one locale."""
    catalog = Catalog(locale=locale)
    if curriculum is None:
        return catalog

    seen = set()
    for entry in iter_topics(curriculum):
        if entry.slug in seen:
            print(f"  Warning: Duplicate slug '{entry.slug}' in {locale}, keeping the first")
            catalog.duplicates.append(entry.slug)
            continue

        source = resolve_source(content_root, entry.block, entry.module, entry.topic)
        if source is None:
            catalog.missing.append(entry.slug)
            continue

        article = read_article(source)
        if article is None or not is_published(article.metadata):
            catalog.unpublished.append(entry.slug)
            continue

        seen.add(entry.slug)
        catalog.topics.append(PublishedTopic(entry=entry, source=source, article=article))

    return catalog


def catalog_to_dict(catalog: Catalog, content_root: Path) -> dict[str, Any]:
    """JSON-friendly view of a catalog, with sources relative to content_root."""
    topics = []
    for published in catalog.topics:
        entry = published.entry
        try:
            rel_path = published.source.relative_to(content_root)
        except ValueError:
            rel_path = published.source
        topics.append({
            'slug': entry.slug,
            'title': entry.title,
            'block': entry.block.id,
            'module': entry.module.id if entry.module else None,
            'path': rel_path.as_posix(),
        })

    return {
        'locale': catalog.locale,
        'published_count': len(catalog.topics),
        'topics': topics,
        'missing': catalog.missing,
        'unpublished': catalog.unpublished,
        'duplicates': catalog.duplicates,
    }


def print_catalog_stats(catalog: Catalog) -> None:
    """Print which topics were left out and why."""
    print("\n--- Catalog Statistics ---")
    print(f"Topics in curriculum: {catalog.total}")
    print(f"Published: {len(catalog.topics)}")
    for label, slugs in (
        ('Missing source', catalog.missing),
        ('Unpublished', catalog.unpublished),
        ('Duplicate slug', catalog.duplicates),
    ):
        print(f"{label}: {len(slugs)}")
        for slug in slugs:
            print(f"  {slug}")


def main():
    parser = argparse.ArgumentParser(
        description='Build the published-topic catalog for one book locale'
    )
    parser.add_argument(
        '--book-dir',
        type=Path,
        required=True,
        help='Book directory containing curriculum.yaml and content/'
    )
    parser.add_argument(
        '--locale',
        default=None,
        help='Locale code (default: last dash-separated part of the book dir name)'
    )
    parser.add_argument(
        '--output',
        type=Path,
        default=None,
        help='Write the catalog to this JSON file'
    )
    parser.add_argument(
        '--stats',
        action='store_true',
        help='List missing and unpublished topics'
    )

    args = parser.parse_args()
    locale = args.locale or args.book_dir.resolve().name.rsplit('-', 1)[-1]
    content_root = args.book_dir / CONTENT_SUBDIR

    try:
        curriculum = load_curriculum(args.book_dir / CURRICULUM_FILE)
    except DocumentError as e:
        print(f"Error: {e}")
        return 1

    if curriculum is None:
        print(f"Error: {CURRICULUM_FILE} not found in {args.book_dir}")
        return 1

    print(f"Book directory: {args.book_dir}")
    catalog = build_catalog(curriculum, content_root, locale)
    print(f"Published topics: {len(catalog.topics)}")

    if args.output:
        with open(args.output, 'w', encoding='utf-8') as f:
            json.dump(catalog_to_dict(catalog, content_root), f, indent=2, ensure_ascii=False)
        print(f"\nCatalog written to {args.output}")

    if args.stats:
        print_catalog_stats(catalog)

    return 0


if __name__ == '__main__':
    sys.exit(main())
