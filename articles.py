"""
Rewrite published articles for the site generator.

Each published topic becomes <content_dir>/<locale>/<slug>.md with a
rewritten frontmatter block, its first top-level heading removed (the site
renders the title itself) and a prev/next navigation block appended.
"""

import html
import math
import re
import shutil
from datetime import date, datetime
from pathlib import Path
from typing import Any, Iterator, Sequence, TypeVar

import yaml

from build_catalog import PublishedTopic
from config import Locale, PRESERVED_FILES, TOC_MAX_HEADING_LEVEL, TOC_MIN_HEADING_LEVEL, WORDS_PER_MINUTE


T = TypeVar('T')

H1_RE = re.compile(r'^#\s+\S')
FENCE_RE = re.compile(r'^\s*(```|~~~)')


# ---------------------------------------------------------------------------
# Navigation
# ---------------------------------------------------------------------------

def link_neighbors(items: Sequence[T]) -> Iterator[tuple[T, T | None, T | None]]:
    """Yield (item, previous, next) for each item; ends get None."""
    for i, item in enumerate(items):
        prev = items[i - 1] if i > 0 else None
        nxt = items[i + 1] if i < len(items) - 1 else None
        yield item, prev, nxt


def topic_link(locale_code: str, slug: str) -> str:
    return f"/{locale_code}/{slug}/"


def render_navigation(locale: Locale, prev: PublishedTopic | None, nxt: PublishedTopic | None) -> str:
    """Render the lesson navigation block, or '' when there are no neighbours."""
    if prev is None and nxt is None:
        return ''

    lines = ['<nav class="lesson-nav">']
    if prev is not None:
        lines.append(f'  <a href="{topic_link(locale.code, prev.slug)}" class="lesson-nav-link">')
        lines.append(f'    <span class="lesson-nav-label">{html.escape(locale.prev_label)}</span>')
        lines.append(f'    <span class="lesson-nav-title">{html.escape(prev.title)}</span>')
        lines.append('  </a>')
    else:
        lines.append('  <div></div>')
    if nxt is not None:
        lines.append(f'  <a href="{topic_link(locale.code, nxt.slug)}" class="lesson-nav-link" style="text-align: right;">')
        lines.append(f'    <span class="lesson-nav-label">{html.escape(locale.next_label)}</span>')
        lines.append(f'    <span class="lesson-nav-title">{html.escape(nxt.title)}</span>')
        lines.append('  </a>')
    else:
        lines.append('  <div></div>')
    lines.append('</nav>')
    return '\n'.join(lines) + '\n'


# ---------------------------------------------------------------------------
# Body transforms
# ---------------------------------------------------------------------------

def strip_first_heading(body: str) -> str:
    """
    Remove the first `# ` heading line outside fenced code, plus the blank
    lines after it. Leading blank lines go too when the heading opened the
    body.
    """
    lines = body.split('\n')
    in_fence = False
    for i, line in enumerate(lines):
        if FENCE_RE.match(line):
            in_fence = not in_fence
            continue
        if in_fence or not H1_RE.match(line):
            continue

        rest = i + 1
        while rest < len(lines) and not lines[rest].strip():
            rest += 1
        before = lines[:i]
        if not any(l.strip() for l in before):
            before = []
        return '\n'.join(before + lines[rest:])
    return body


def count_words(text: str) -> int:
    return len(text.split())


def reading_time(text: str, words_per_minute: int = WORDS_PER_MINUTE) -> int:
    """Minutes to read, rounded up, never less than 1."""
    return max(1, math.ceil(count_words(text) / words_per_minute))


# ---------------------------------------------------------------------------
# Frontmatter
# ---------------------------------------------------------------------------

def _as_text(value: Any) -> str | None:
    if value is None or value == '':
        return None
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)


def build_frontmatter(
    published: PublishedTopic,
    body: str,
    author_names: dict[str, str],
    words_per_minute: int = WORDS_PER_MINUTE,
) -> dict[str, Any]:
    """Destination frontmatter; every key is always present."""
    source = published.article.metadata or {}
    topic = published.entry.topic

    author = _as_text(source.get('author'))
    author_name = None
    if author:
        author_name = author_names.get(author, author)

    return {
        'title': _as_text(source.get('title')) or topic.title,
        'description': _as_text(source.get('description')) or topic.description,
        'tableOfContents': {
            'minHeadingLevel': TOC_MIN_HEADING_LEVEL,
            'maxHeadingLevel': TOC_MAX_HEADING_LEVEL,
        },
        'author': author,
        'authorName': author_name,
        'updatedAt': _as_text(source.get('updatedAt')),
        'readingTime': reading_time(body, words_per_minute),
    }


def dump_frontmatter(frontmatter: dict[str, Any]) -> str:
    return yaml.dump(frontmatter, default_flow_style=False, allow_unicode=True, sort_keys=False, width=200)


def render_article(
    published: PublishedTopic,
    locale: Locale,
    prev: PublishedTopic | None,
    nxt: PublishedTopic | None,
    author_names: dict[str, str],
    words_per_minute: int = WORDS_PER_MINUTE,
) -> str:
    """Full text of the destination article."""
    body = strip_first_heading(published.article.body)
    frontmatter = build_frontmatter(published, body, author_names, words_per_minute)

    nav = render_navigation(locale, prev, nxt)
    if nav:
        body = body.rstrip('\n') + '\n\n---\n\n' + nav
    elif body and not body.endswith('\n'):
        body += '\n'

    return '---\n' + dump_frontmatter(frontmatter) + '---\n' + body


# ---------------------------------------------------------------------------
# Destination tree
# ---------------------------------------------------------------------------

def clear_destination(dest_dir: Path, preserve: Sequence[str] = PRESERVED_FILES) -> list[str]:
    """
    Empty dest_dir entry by entry, leaving the hand-authored files named in
    preserve where they are.

    Returns the names of the files that were kept.
    """
    dest_dir.mkdir(parents=True, exist_ok=True)

    kept = []
    for path in sorted(dest_dir.iterdir()):
        if path.name in preserve and path.is_file():
            kept.append(path.name)
        elif path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        else:
            path.unlink()
    return kept


def emit_articles(
    topics: Sequence[PublishedTopic],
    locale: Locale,
    dest_dir: Path,
    author_names: dict[str, str],
    words_per_minute: int = WORDS_PER_MINUTE,
) -> list[Path]:
    """Write one rewritten article per published topic. Returns the written paths."""
    written = []
    for published, prev, nxt in link_neighbors(topics):
        text = render_article(published, locale, prev, nxt, author_names, words_per_minute)
        out_path = dest_dir / f"{published.slug}.md"
        out_path.write_text(text, encoding='utf-8')
        written.append(out_path)
    return written
