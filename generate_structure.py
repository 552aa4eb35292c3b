#!/usr/bin/env python3
"""
Create the book's content tree from curriculum.yaml.

For every block, module and topic in the curriculum this creates the
numbered directories (content/NN-<block>/NN-<module>/<slug>/), an
_index.yaml describing each block and module, and an article.md stub with
`published: false`. Blocks and topics that declare an explicit path or file
are created there instead. Existing files are never overwritten, so it is
safe to re-run after extending the curriculum.

Usage:
    python generate_structure.py --book-dir PATH [--locale CODE] [--dry-run]
"""

import argparse
import sys
from dataclasses import dataclass
from pathlib import Path

import yaml

from config import ARTICLE_FILE, CONTENT_SUBDIR, CURRICULUM_FILE
from curriculum import Block, Module, Topic, load_curriculum
from errors import DocumentError


# --- Configuration ---

INDEX_FILE = '_index.yaml'
CODE_LANGUAGE = 'go'

SECTION_STUBS = {
    'ru': [
        ('Введение', 'TODO: Добавить введение'),
        ('Основная часть', 'TODO: Добавить основной контент'),
        ('Примеры кода', None),
        ('Практика', 'TODO: Добавить упражнения'),
        ('Итоги', 'TODO: Добавить итоги'),
    ],
    'en': [
        ('Introduction', 'TODO: Add introduction'),
        ('Main Content', 'TODO: Add main content'),
        ('Code Examples', None),
        ('Practice', 'TODO: Add exercises'),
        ('Summary', 'TODO: Add summary'),
    ],
}

CODE_STUB = {
    'ru': '// TODO: Добавить пример',
    'en': '// TODO: Add example',
}


@dataclass
class ScaffoldCounts:
    modules: int = 0
    topics: int = 0
    dirs: int = 0
    files: int = 0


# --- Templates ---

def article_template(topic: Topic, locale: str) -> str:
    """article.md stub for a topic, unpublished."""
    frontmatter = yaml.dump(
        {
            'title': topic.title,
            'description': topic.description or '',
            'slug': topic.slug,
            'published': False,
        },
        default_flow_style=False, allow_unicode=True, sort_keys=False, width=200,
    )
    lines = ['---', frontmatter.rstrip('\n'), '---', '', f'# {topic.title}', '']
    if topic.description:
        lines += [f'> {topic.description}', '']

    for heading, stub in SECTION_STUBS.get(locale, SECTION_STUBS['en']):
        lines += [f'## {heading}', '']
        if stub is None:
            lines += [
                f'```{CODE_LANGUAGE}',
                'package main',
                '',
                'func main() {',
                f'    {CODE_STUB.get(locale, CODE_STUB["en"])}',
                '}',
                '```',
            ]
        else:
            lines.append(stub)
        lines.append('')

    return '\n'.join(lines)


def block_index(block: Block, order: int) -> str:
    data = {
        'id': block.id,
        'order': order,
        'title': block.title,
        'description': block.description,
    }
    if block.flat:
        data['topicsCount'] = len(block.topics)
    else:
        data['modulesCount'] = len(block.modules)
    return yaml.dump(data, default_flow_style=False, allow_unicode=True, sort_keys=False)


def module_index(module: Module, block: Block, order: int) -> str:
    return yaml.dump(
        {
            'id': module.id,
            'order': order,
            'title': module.title,
            'block': block.id,
            'topicsCount': len(module.topics),
        },
        default_flow_style=False, allow_unicode=True, sort_keys=False,
    )


# --- Scaffolding ---

def _dir_name(node_id: str, order: int) -> str:
    return f"{order:02d}-{node_id}"


class Scaffolder:
    """Creates missing directories and files, counting what it made."""

    def __init__(self, content_root: Path, locale: str, dry_run: bool = False):
        self.content_root = content_root
        self.locale = locale
        self.dry_run = dry_run
        self.counts = ScaffoldCounts()

    def ensure_dir(self, path: Path) -> None:
        if path.exists():
            return
        if not self.dry_run:
            path.mkdir(parents=True, exist_ok=True)
        self.counts.dirs += 1
        print(f"  + {path.relative_to(self.content_root)}/")

    def ensure_file(self, path: Path, content: str) -> None:
        if path.exists():
            return
        if not self.dry_run:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding='utf-8')
        self.counts.files += 1
        print(f"  + {path.relative_to(self.content_root)}")

    def topic(self, parent: Path, topic: Topic) -> None:
        self.counts.topics += 1
        if topic.file:
            self.ensure_file(parent / topic.file, article_template(topic, self.locale))
            return
        topic_dir = parent / topic.slug
        self.ensure_dir(topic_dir)
        self.ensure_file(topic_dir / ARTICLE_FILE, article_template(topic, self.locale))

    def block(self, block: Block, position: int) -> None:
        order = block.order if block.order is not None else position
        block_dir = self.content_root / (block.path or _dir_name(block.id, order))
        self.ensure_dir(block_dir)
        self.ensure_file(block_dir / INDEX_FILE, block_index(block, order))

        if block.flat:
            for topic in block.topics:
                self.topic(block_dir, topic)
            return

        for m_pos, module in enumerate(block.modules, start=1):
            self.counts.modules += 1
            m_order = module.order if module.order is not None else m_pos
            module_dir = block_dir / (module.path or _dir_name(module.id, m_order))
            self.ensure_dir(module_dir)
            self.ensure_file(module_dir / INDEX_FILE, module_index(module, block, m_order))
            for topic in module.topics:
                self.topic(module_dir, topic)


def generate_structure(book_dir: Path, locale: str, dry_run: bool = False) -> ScaffoldCounts:
    """Scaffold content/ for the curriculum in book_dir."""
    curriculum_path = book_dir / CURRICULUM_FILE
    curriculum = load_curriculum(curriculum_path)
    if curriculum is None:
        raise DocumentError(curriculum_path, 'curriculum not found')

    scaffolder = Scaffolder(book_dir / CONTENT_SUBDIR, locale, dry_run)
    if not dry_run:
        scaffolder.content_root.mkdir(parents=True, exist_ok=True)
    for position, block in enumerate(curriculum.blocks, start=1):
        scaffolder.block(block, position)
    return scaffolder.counts


def main():
    parser = argparse.ArgumentParser(
        description='Create the content directory tree and article stubs from curriculum.yaml'
    )
    parser.add_argument(
        '--book-dir',
        type=Path,
        required=True,
        help='Book directory containing curriculum.yaml'
    )
    parser.add_argument(
        '--locale',
        default=None,
        help='Language of the article stubs (default: last dash-separated part of the book dir name)'
    )
    parser.add_argument(
        '--dry-run',
        action='store_true',
        help='Show what would be created without writing anything'
    )

    args = parser.parse_args()
    locale = args.locale or args.book_dir.resolve().name.rsplit('-', 1)[-1]

    if args.dry_run:
        print('DRY RUN — no files will be created\n')

    print(f"Generating structure from {args.book_dir / CURRICULUM_FILE}")
    try:
        counts = generate_structure(args.book_dir, locale, dry_run=args.dry_run)
    except DocumentError as e:
        print(f"Error: {e}")
        return 1

    print('\n--- Summary ---')
    print(f'  Modules:             {counts.modules}')
    print(f'  Topics:              {counts.topics}')
    print(f'  Directories created: {counts.dirs}')
    print(f'  Files created:       {counts.files}')
    return 0


if __name__ == '__main__':
    sys.exit(main())
