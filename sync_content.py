#!/usr/bin/env python3
"""
Sync book content into the documentation site.

Reads every configured locale's book (curriculum.yaml, authors.yaml and the
content/ article tree), keeps the topics marked `published: true`, and
regenerates everything the site generator consumes. Outputs are rebuilt
from scratch on every run; running twice on the same input gives the same
files.

Usage:
    python sync_content.py [--config PATH] [--root PATH]

Produces:
    <content_dir>/
      ru/<slug>.md        - rewritten articles with prev/next navigation
      en/<slug>.md          (index.mdx and authors.mdx are left in place)
    <data_dir>/
      toc.json            - published table of contents, keyed by locale
      sidebar.json        - per-locale sidebar
      sidebar-unified.json - base-locale sidebar with label translations
      authors.json        - authors merged across locales
"""

import argparse
import sys
import time
from dataclasses import dataclass, field
from pathlib import Path

from articles import clear_destination, emit_articles
from build_catalog import Catalog, build_catalog
from config import SyncConfig, load_config
from curriculum import Curriculum, load_curriculum
from errors import SyncError
from generate_sidebar import TocBlock, build_toc, toc_to_dict, write_json, write_sidebars
from merge_authors import author_names, load_authors, merge_authors


# ---------------------------------------------------------------------------
# Run bookkeeping
# ---------------------------------------------------------------------------

@dataclass
class LocaleReport:
    """What happened to one locale during a run."""
    code: str
    found: bool = False
    published: int = 0
    missing: int = 0
    unpublished: int = 0
    duplicates: int = 0
    written: int = 0
    preserved: list[str] = field(default_factory=list)


@dataclass
class SyncReport:
    locales: list[LocaleReport] = field(default_factory=list)
    authors: int = 0
    outputs: list[Path] = field(default_factory=list)

    @property
    def written(self) -> int:
        return sum(r.written for r in self.locales)


@dataclass
class LocaleInput:
    curriculum: Curriculum | None
    authors: list[dict]


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------

def load_inputs(config: SyncConfig) -> dict[str, LocaleInput]:
    """
    Read every structured document up front.

    A broken curriculum or author list raises before any output is touched.
    """
    inputs = {}
    for loc in config.locales:
        inputs[loc.code] = LocaleInput(
            curriculum=load_curriculum(loc.curriculum_path),
            authors=load_authors(loc.authors_path),
        )
    return inputs


def sync_locale(config: SyncConfig, code: str, data: LocaleInput) -> tuple[LocaleReport, list[TocBlock]]:
    """Filter, emit and build the TOC for one locale."""
    loc = config.locale(code)
    report = LocaleReport(code=code)

    print(f"\n=== Processing {loc.label} ({code}) ===")
    if data.curriculum is None:
        print(f"  Warning: Skipping {code}: curriculum not found at {loc.curriculum_path}")
        return report, []

    report.found = True
    print(f"  Blocks: {len(data.curriculum.blocks)}")

    catalog: Catalog = build_catalog(data.curriculum, loc.content_root, code)
    report.published = len(catalog.topics)
    report.missing = len(catalog.missing)
    report.unpublished = len(catalog.unpublished)
    report.duplicates = len(catalog.duplicates)

    print(f"  Total topics: {catalog.total}")
    print(f"  Published topics: {report.published}")
    if catalog.missing:
        print(f"  Skipped (no source file): {report.missing}")
    if catalog.unpublished:
        print(f"  Not published: {report.unpublished}")

    dest_dir = config.content_dir / code
    report.preserved = clear_destination(dest_dir, config.preserve)
    written = emit_articles(
        catalog.topics,
        loc,
        dest_dir,
        author_names(data.authors),
        config.words_per_minute,
    )
    report.written = len(written)
    print(f"  Synced: {report.written} files")

    return report, build_toc(t.entry for t in catalog.topics)


def run_sync(config: SyncConfig) -> SyncReport:
    """Run the whole pipeline for every configured locale."""
    inputs = load_inputs(config)
    report = SyncReport()

    tocs = {}
    for loc in config.locales:
        locale_report, toc = sync_locale(config, loc.code, inputs[loc.code])
        report.locales.append(locale_report)
        tocs[loc.code] = toc

    print("\n=== Writing data files ===")
    toc_path = config.data_dir / 'toc.json'
    write_json(toc_path, {code: toc_to_dict(blocks) for code, blocks in tocs.items()})
    print(f"  Written: toc.json ({len(tocs)} locales)")

    sidebar_path, unified_path = write_sidebars(config, tocs)
    print("  Written: sidebar.json")
    print("  Written: sidebar-unified.json")

    merged = merge_authors((loc.code, inputs[loc.code].authors) for loc in config.locales)
    for loc in config.locales:
        print(f"  Found {len(inputs[loc.code].authors)} authors in {loc.code} book")
    authors_path = config.data_dir / 'authors.json'
    write_json(authors_path, [author.to_dict() for author in merged])
    report.authors = len(merged)
    print(f"  Written: authors.json ({report.authors} unique authors)")

    report.outputs = [toc_path, sidebar_path, unified_path, authors_path]
    return report


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

def main(argv: list[str] | None = None):
    parser = argparse.ArgumentParser(
        description='Sync published book content into the documentation site.',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python sync_content.py
    python sync_content.py --root ~/godojo
    python sync_content.py --config sync.yaml
        """,
    )
    parser.add_argument(
        '--config',
        type=Path,
        default=None,
        help='YAML config file with locales and output paths (default: built-in settings)',
    )
    parser.add_argument(
        '--root',
        type=Path,
        default=None,
        help='Directory that relative paths resolve against '
             '(default: the config file directory, or the current directory)',
    )

    args = parser.parse_args(argv)
    start_time = time.time()

    try:
        config = load_config(args.config, args.root)
        print(f"Content directory: {config.content_dir}")
        print(f"Data directory:    {config.data_dir}")
        report = run_sync(config)
    except SyncError as e:
        print(f"Error: {e}")
        return 1

    elapsed = time.time() - start_time
    print()
    print("=" * 50)
    print(f"  Sync complete in {elapsed:.1f}s")
    for locale_report in report.locales:
        status = f"{locale_report.written} articles" if locale_report.found else 'skipped'
        print(f"  {locale_report.code}: {status}")
    print(f"  {report.authors} authors")
    print("=" * 50)
    return 0


if __name__ == '__main__':
    sys.exit(main())
