#!/usr/bin/env python3
"""
Merge per-locale author lists into one cross-locale authors.json.

Each book keeps its own authors.yaml:

    authors:
      - id: jdoe
        name: Jane Doe
        role: Author
        bio: Writes about concurrency.
        quote: Share memory by communicating.
        github: jdoe
        socials:
          telegram: jdoe

Records are merged by id. role and bio become locale-keyed maps; books lists
every locale the author appears in; quote and social handles take the first
non-empty value seen, in the configured locale order.

Usage:
    python merge_authors.py [--config PATH] [--root PATH] [--output PATH]
"""

import argparse
import json
import sys
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Iterable

import yaml

from config import load_config
from errors import DocumentError, SyncError


SOCIAL_FIELDS = ('github', 'telegram', 'twitter')


# --- Data Structures ---

@dataclass(frozen=True)
class MergedAuthor:
    """One author across all locales."""
    id: str
    name: str
    books: tuple[str, ...] = ()
    role: dict[str, str] = field(default_factory=dict)
    bio: dict[str, str] = field(default_factory=dict)
    quote: str | None = None
    github: str | None = None
    telegram: str | None = None
    twitter: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'books': list(self.books),
            'role': dict(self.role),
            'bio': dict(self.bio),
            'quote': self.quote,
            'github': self.github,
            'telegram': self.telegram,
            'twitter': self.twitter,
        }


# --- Loading ---

def load_authors(path: Path) -> list[dict[str, Any]]:
    """
    Read one locale's authors.yaml.

    A missing file means no authors. Broken YAML or an unexpected shape is
    fatal; individual entries without an id are skipped.
    """
    if not path.exists():
        return []

    try:
        data = yaml.safe_load(path.read_text(encoding='utf-8'))
    except yaml.YAMLError as e:
        raise DocumentError(path, f"invalid YAML: {e}") from e

    if data is None:
        return []
    if isinstance(data, dict):
        data = data.get('authors') or []
    if not isinstance(data, list):
        raise DocumentError(path, "expected a list of authors or an 'authors' list")

    authors = []
    for i, author in enumerate(data):
        if not isinstance(author, dict) or not author.get('id'):
            print(f"  Warning: {path.name}: author #{i + 1} has no id, skipping")
            continue
        authors.append(author)
    return authors


def author_names(authors: Iterable[dict[str, Any]]) -> dict[str, str]:
    """id -> display name for one locale."""
    names = {}
    for author in authors:
        author_id = str(author['id'])
        names[author_id] = str(author.get('name') or author_id)
    return names


# --- Merging ---

def _nonempty(value: Any) -> str | None:
    if value is None or value == '':
        return None
    return str(value)


def _social(author: dict[str, Any], name: str) -> str | None:
    value = _nonempty(author.get(name))
    if value is None and isinstance(author.get('socials'), dict):
        value = _nonempty(author['socials'].get(name))
    return value


def _first(current: str | None, candidate: str | None) -> str | None:
    return current if current is not None else candidate


def merge_author(existing: MergedAuthor | None, locale: str, author: dict[str, Any]) -> MergedAuthor:
    """Fold one locale's record into the merged record (or start a new one)."""
    author_id = str(author['id'])
    if existing is None:
        existing = MergedAuthor(id=author_id, name=str(author.get('name') or author_id))

    role = dict(existing.role)
    bio = dict(existing.bio)
    if _nonempty(author.get('role')) is not None:
        role[locale] = str(author['role'])
    if _nonempty(author.get('bio')) is not None:
        bio[locale] = str(author['bio'])

    books = existing.books if locale in existing.books else existing.books + (locale,)

    return replace(
        existing,
        books=books,
        role=role,
        bio=bio,
        quote=_first(existing.quote, _nonempty(author.get('quote'))),
        **{name: _first(getattr(existing, name), _social(author, name)) for name in SOCIAL_FIELDS},
    )


def merge_authors(per_locale: Iterable[tuple[str, list[dict[str, Any]]]]) -> list[MergedAuthor]:
    """Merge (locale, authors) pairs, keeping first-seen order."""
    merged = {}
    for locale, authors in per_locale:
        for author in authors:
            author_id = str(author['id'])
            merged[author_id] = merge_author(merged.get(author_id), locale, author)
    return list(merged.values())


def main():
    parser = argparse.ArgumentParser(
        description='Merge per-locale authors.yaml files into authors.json'
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
    parser.add_argument(
        '--output',
        type=Path,
        default=None,
        help='Output file (default: <data_dir>/authors.json)'
    )

    args = parser.parse_args()

    try:
        config = load_config(args.config, args.root)
        per_locale = []
        for loc in config.locales:
            authors = load_authors(loc.authors_path)
            print(f"Found {len(authors)} authors in {loc.code} book")
            per_locale.append((loc.code, authors))
    except SyncError as e:
        print(f"Error: {e}")
        return 1

    merged = merge_authors(per_locale)
    output = args.output or config.data_dir / 'authors.json'
    output.parent.mkdir(parents=True, exist_ok=True)
    with open(output, 'w', encoding='utf-8') as f:
        json.dump([author.to_dict() for author in merged], f, indent=2, ensure_ascii=False)
        f.write('\n')

    print(f"Total unique authors: {len(merged)}")
    print(f"Written: {output}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
