import json
import sys

import pytest

import merge_authors
from conftest import make_en_book, make_ru_book, write
from errors import DocumentError
from merge_authors import author_names, load_authors, merge_authors as merge


def test_quote_from_first_locale_and_bio_per_locale():
    merged = merge([
        ('ru', [{'id': 'jdoe', 'name': 'Иван', 'bio': 'Био', 'quote': 'Цитата'}]),
        ('en', [{'id': 'jdoe', 'name': 'John', 'bio': 'Bio'}]),
    ])

    assert len(merged) == 1
    author = merged[0]
    assert author.quote == 'Цитата'
    assert author.bio == {'ru': 'Био', 'en': 'Bio'}
    assert author.books == ('ru', 'en')
    assert author.name == 'Иван'


def test_singleton_fields_are_never_overwritten():
    merged = merge([
        ('ru', [{'id': 'a', 'name': 'A', 'quote': '', 'github': None}]),
        ('en', [{'id': 'a', 'name': 'A', 'quote': 'Second', 'github': 'a-gh', 'socials': {'telegram': 'a_tg'}}]),
        ('de', [{'id': 'a', 'name': 'A', 'quote': 'Third', 'github': 'other', 'twitter': 'a_tw'}]),
    ])[0]

    assert merged.quote == 'Second'
    assert merged.github == 'a-gh'
    assert merged.telegram == 'a_tg'
    assert merged.twitter == 'a_tw'


def test_merge_keeps_first_seen_order():
    merged = merge([
        ('ru', [{'id': 'b', 'name': 'B'}, {'id': 'a', 'name': 'A'}]),
        ('en', [{'id': 'c', 'name': 'C'}, {'id': 'a', 'name': 'A', 'role': 'Editor'}]),
    ])

    assert [a.id for a in merged] == ['b', 'a', 'c']
    assert merged[1].role == {'en': 'Editor'}
    assert merged[2].books == ('en',)


def test_merge_does_not_mutate_inputs():
    ru = [{'id': 'a', 'name': 'A', 'role': 'R'}]
    en = [{'id': 'a', 'name': 'A', 'role': 'E'}]
    first = merge([('ru', ru)])
    merge([('ru', ru), ('en', en)])
    assert first[0].role == {'ru': 'R'}
    assert ru == [{'id': 'a', 'name': 'A', 'role': 'R'}]


def test_to_dict_has_every_field():
    record = merge([('en', [{'id': 'a', 'name': 'A'}])])[0].to_dict()
    assert record == {
        'id': 'a',
        'name': 'A',
        'books': ['en'],
        'role': {},
        'bio': {},
        'quote': None,
        'github': None,
        'telegram': None,
        'twitter': None,
    }


def test_load_authors_accepts_mapping_or_list(tmp_path):
    mapping = write(tmp_path / 'a.yaml', 'authors:\n  - id: a\n    name: A\n')
    bare = write(tmp_path / 'b.yaml', '- id: b\n  name: B\n')
    assert load_authors(mapping) == [{'id': 'a', 'name': 'A'}]
    assert load_authors(bare) == [{'id': 'b', 'name': 'B'}]


def test_load_authors_missing_or_empty(tmp_path):
    assert load_authors(tmp_path / 'absent.yaml') == []
    assert load_authors(write(tmp_path / 'empty.yaml', '')) == []


def test_load_authors_skips_entries_without_id(tmp_path, capsys):
    path = write(tmp_path / 'authors.yaml', 'authors:\n  - name: Nobody\n  - id: a\n    name: A\n')
    assert load_authors(path) == [{'id': 'a', 'name': 'A'}]
    assert 'has no id' in capsys.readouterr().out


@pytest.mark.parametrize('text', ['authors: [broken\n', 'just a string\n'])
def test_load_authors_malformed_is_fatal(tmp_path, text):
    with pytest.raises(DocumentError):
        load_authors(write(tmp_path / 'authors.yaml', text))


def test_author_names():
    assert author_names([{'id': 'a', 'name': 'Ann'}, {'id': 'b'}]) == {'a': 'Ann', 'b': 'b'}


def test_cli_writes_merged_authors(tmp_path, monkeypatch):
    make_ru_book(tmp_path / 'books/go-language-ru')
    make_en_book(tmp_path / 'books/go-language-en')
    output = tmp_path / 'authors.json'
    monkeypatch.setattr(sys, 'argv', ['merge_authors.py', '--root', str(tmp_path), '--output', str(output)])

    assert merge_authors.main() == 0

    authors = json.loads(output.read_text(encoding='utf-8'))
    assert len(authors) == 1
    assert authors[0]['books'] == ['ru', 'en']
    assert authors[0]['quote'] == 'Цитата'
    assert authors[0]['github'] == 'jdoe'
    assert authors[0]['role'] == {'ru': 'Автор', 'en': 'Author'}
