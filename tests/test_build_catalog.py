import json
import sys

import pytest

import build_catalog
from build_catalog import (
    build_catalog as make_catalog,
    catalog_to_dict,
    find_prefixed_dir,
    is_published,
    resolve_source,
    split_article,
)
from conftest import article, make_ru_book, write
from curriculum import Block, Module, Topic, load_curriculum, parse_curriculum
from generate_sidebar import build_toc, toc_to_dict


# --- Frontmatter ---

def test_split_article_parses_metadata_and_body():
    result = split_article('---\ntitle: Hi\npublished: true\n---\n# Hi\n\nBody\n')
    assert result.metadata == {'title': 'Hi', 'published': True}
    assert result.body == '# Hi\n\nBody\n'


def test_split_article_without_frontmatter():
    result = split_article('# Just text\n')
    assert result.metadata is None
    assert result.body == '# Just text\n'


def test_split_article_with_empty_frontmatter():
    result = split_article('---\n---\nBody')
    assert result.metadata is None
    assert result.body == 'Body'


def test_split_article_invalid_yaml_warns(capsys):
    result = split_article('---\ntitle: [oops\n---\nBody\n')
    assert result.metadata is None
    assert result.body == 'Body\n'
    assert 'Warning: Invalid YAML' in capsys.readouterr().out


@pytest.mark.parametrize('metadata, expected', [
    ({'published': True}, True),
    ({'published': False}, False),
    ({'published': 'true'}, False),
    ({'published': 1}, False),
    ({'title': 'no flag'}, False),
    ({}, False),
    (None, False),
])
def test_only_boolean_true_publishes(metadata, expected):
    assert is_published(metadata) is expected


@pytest.mark.parametrize('value, expected', [
    ('true', True),
    ('True', True),
    ('TRUE', True),
    ('false', False),
    ('yes', False),
    ('Yes', False),
    ('on', False),
    ('y', False),
    ("'true'", False),
])
def test_frontmatter_published_only_for_literal_true(value, expected):
    metadata = split_article(f'---\npublished: {value}\n---\nBody\n').metadata
    assert is_published(metadata) is expected


def test_frontmatter_keeps_yes_and_on_as_strings():
    metadata = split_article('---\npublished: yes\ntoc: off\n---\n').metadata
    assert metadata == {'published': 'yes', 'toc': 'off'}


# --- Source resolution ---

def test_find_prefixed_dir_uses_declared_order(tmp_path):
    (tmp_path / '03-basics').mkdir()
    assert find_prefixed_dir(tmp_path, 'basics', 3) == tmp_path / '03-basics'


def test_find_prefixed_dir_falls_back_to_lowest_match(tmp_path):
    (tmp_path / '07-basics').mkdir()
    (tmp_path / '04-basics').mkdir()
    (tmp_path / '01-other').mkdir()
    (tmp_path / '02-basics-extra').mkdir()
    assert find_prefixed_dir(tmp_path, 'basics', 1) == tmp_path / '04-basics'
    assert find_prefixed_dir(tmp_path, 'basics') == tmp_path / '04-basics'


def test_find_prefixed_dir_has_no_numeric_cap(tmp_path):
    (tmp_path / '150-late').mkdir()
    assert find_prefixed_dir(tmp_path, 'late') == tmp_path / '150-late'
    assert find_prefixed_dir(tmp_path, 'late', 150) == tmp_path / '150-late'


def test_find_prefixed_dir_missing(tmp_path):
    assert find_prefixed_dir(tmp_path, 'nothing') is None
    assert find_prefixed_dir(tmp_path / 'absent', 'nothing') is None


def test_resolve_numeric_prefix_layout(tmp_path):
    source = write(tmp_path / '01-basics/02-intro/hello/article.md', article('Hello'))
    block = Block(id='basics', title='Basics', order=1)
    module = Module(id='intro', title='Intro', order=2)
    assert resolve_source(tmp_path, block, module, Topic(slug='hello', title='Hello')) == source
    assert resolve_source(tmp_path, block, module, Topic(slug='absent', title='Absent')) is None


def test_resolve_explicit_paths(tmp_path):
    source = write(tmp_path / 'part-one/chapter/intro.md', article('Intro'))
    block = Block(id='one', title='One', path='part-one')
    module = Module(id='chapter', title='Chapter', path='chapter')
    assert resolve_source(tmp_path, block, module, Topic(slug='intro', title='Intro', file='intro.md')) == source


def test_flat_block_never_resolves_modules(tmp_path):
    source = write(tmp_path / 'appendix/glossary.md', article('Glossary'))
    block = Block(id='appendix', title='Appendix', path='appendix', flat=True)
    topic = Topic(slug='glossary', title='Glossary', file='glossary.md')
    stray_module = Module(id='nowhere', title='Nowhere', path='does-not-exist')

    assert resolve_source(tmp_path, block, None, topic) == source
    assert resolve_source(tmp_path, block, stray_module, topic) == source


def test_flat_block_default_article_location(tmp_path):
    source = write(tmp_path / '05-extras/faq/article.md', article('FAQ'))
    block = Block(id='extras', title='Extras', order=5, flat=True)
    assert resolve_source(tmp_path, block, None, Topic(slug='faq', title='FAQ')) == source


def test_modular_block_needs_a_module(tmp_path):
    write(tmp_path / '01-basics/hello/article.md', article('Hello'))
    block = Block(id='basics', title='Basics', order=1)
    assert resolve_source(tmp_path, block, None, Topic(slug='hello', title='Hello')) is None


# --- Catalog ---

def test_catalog_keeps_published_topics_in_order(tmp_path):
    book = make_ru_book(tmp_path / 'go-ru')
    curriculum = load_curriculum(book / 'curriculum.yaml')

    catalog = make_catalog(curriculum, book / 'content', 'ru')

    assert [t.slug for t in catalog.topics] == ['hello', 'setup', 'ints', 'glossary']
    assert catalog.missing == ['ghost']
    assert catalog.unpublished == ['draft-one', 'wip-topic']
    assert catalog.total == 7
    assert catalog.topics[0].article.metadata['author'] == 'jdoe'


def test_catalog_skips_duplicate_slugs(tmp_path, capsys):
    write(tmp_path / 'content/a/dup.md', article('First'))
    write(tmp_path / 'content/b/dup.md', article('Second'))
    curriculum = parse_curriculum({
        'blocks': [
            {'id': 'a', 'title': 'A', 'path': 'a', 'flat': True, 'topics': [{'slug': 'dup', 'title': 'One', 'file': 'dup.md'}]},
            {'id': 'b', 'title': 'B', 'path': 'b', 'flat': True, 'topics': [{'slug': 'dup', 'title': 'Two', 'file': 'dup.md'}]},
        ]
    }, tmp_path / 'curriculum.yaml')

    catalog = make_catalog(curriculum, tmp_path / 'content', 'en')

    assert [t.title for t in catalog.topics] == ['One']
    assert catalog.duplicates == ['dup']
    assert 'Duplicate slug' in capsys.readouterr().out

    toc = toc_to_dict(build_toc(t.entry for t in catalog.topics))
    assert [b['id'] for b in toc['blocks']] == ['a']
    assert toc['blocks'][0]['topics'] == [{'slug': 'dup', 'title': 'One'}]


def test_toc_leaves_out_unpublished_slug_twin(tmp_path):
    write(tmp_path / 'content/a/dup.md', article('First'))
    write(tmp_path / 'content/b/dup.md', article('Second', published=False))
    curriculum = parse_curriculum({
        'blocks': [
            {'id': 'a', 'title': 'A', 'path': 'a', 'flat': True, 'topics': [{'slug': 'dup', 'title': 'One', 'file': 'dup.md'}]},
            {'id': 'b', 'title': 'B', 'path': 'b', 'flat': True, 'topics': [{'slug': 'dup', 'title': 'Two', 'file': 'dup.md'}]},
            {'id': 'c', 'title': 'C', 'path': 'c', 'flat': True, 'topics': [{'slug': 'dup', 'title': 'Three', 'file': 'dup.md'}]},
        ]
    }, tmp_path / 'curriculum.yaml')

    catalog = make_catalog(curriculum, tmp_path / 'content', 'en')
    toc = build_toc(t.entry for t in catalog.topics)

    assert [b.id for b in toc] == ['a']


def test_catalog_for_absent_curriculum_is_empty(tmp_path):
    catalog = make_catalog(None, tmp_path, 'en')
    assert catalog.topics == []
    assert catalog.total == 0


def test_catalog_to_dict_uses_relative_paths(tmp_path):
    book = make_ru_book(tmp_path / 'go-ru')
    catalog = make_catalog(load_curriculum(book / 'curriculum.yaml'), book / 'content', 'ru')

    data = catalog_to_dict(catalog, book / 'content')

    assert data['published_count'] == 4
    assert data['topics'][0] == {
        'slug': 'hello',
        'title': 'Привет',
        'block': 'basics',
        'module': 'intro',
        'path': '01-basics/01-intro/hello/article.md',
    }
    assert data['topics'][-1]['module'] is None


def test_cli_writes_catalog(tmp_path, monkeypatch, capsys):
    book = make_ru_book(tmp_path / 'go-ru')
    output = tmp_path / 'catalog.json'
    monkeypatch.setattr(sys, 'argv', ['build_catalog.py', '--book-dir', str(book), '--output', str(output), '--stats'])

    assert build_catalog.main() == 0

    data = json.loads(output.read_text(encoding='utf-8'))
    assert data['locale'] == 'ru'
    assert data['missing'] == ['ghost']
    assert 'Catalog Statistics' in capsys.readouterr().out


def test_cli_fails_without_curriculum(tmp_path, monkeypatch, capsys):
    monkeypatch.setattr(sys, 'argv', ['build_catalog.py', '--book-dir', str(tmp_path)])
    assert build_catalog.main() == 1
    assert 'Error:' in capsys.readouterr().out
