from pathlib import Path

import pytest
import yaml

from config import SyncConfig, build_config


def write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding='utf-8')
    return path


def article(title: str, published=True, body: str = 'Some words here.', **extra) -> str:
    meta = {'title': title, 'published': published, **extra}
    return '---\n' + yaml.safe_dump(meta, allow_unicode=True, sort_keys=False) + '---\n\n' + f'# {title}\n\n{body}\n'


RU_CURRICULUM = {
    'blocks': [
        {
            'id': 'basics',
            'order': 1,
            'title': 'Основы',
            'modules': [
                {
                    'id': 'intro',
                    'order': 1,
                    'title': 'Введение',
                    'topics': [
                        {'slug': 'hello', 'title': 'Привет', 'description': 'Первая программа'},
                        {'slug': 'ghost', 'title': 'Призрак'},
                        {'slug': 'setup', 'title': 'Установка'},
                    ],
                },
                {
                    'id': 'types',
                    'order': 2,
                    'title': 'Типы',
                    'topics': [{'slug': 'ints', 'title': 'Целые числа'}],
                },
                {
                    'id': 'drafts',
                    'order': 3,
                    'title': 'Черновики',
                    'topics': [{'slug': 'draft-one', 'title': 'Черновик'}],
                },
            ],
        },
        {
            'id': 'advanced',
            'order': 2,
            'title': 'Продвинутое',
            'modules': [
                {
                    'id': 'wip',
                    'order': 1,
                    'title': 'В работе',
                    'topics': [{'slug': 'wip-topic', 'title': 'Скоро'}],
                },
            ],
        },
        {
            'id': 'appendix',
            'order': 3,
            'title': 'Приложение',
            'path': 'appendix',
            'flat': True,
            'topics': [{'slug': 'glossary', 'title': 'Глоссарий', 'file': 'glossary.md'}],
        },
    ]
}

EN_CURRICULUM = {
    'blocks': [
        {
            'id': 'basics',
            'order': 1,
            'title': 'Basics',
            'modules': [
                {
                    'id': 'intro',
                    'order': 1,
                    'title': 'Introduction',
                    'topics': [
                        {'slug': 'hello', 'title': 'Hello'},
                        {'slug': 'setup', 'title': 'Установка'},
                    ],
                },
            ],
        },
    ]
}


def make_ru_book(book_dir: Path) -> Path:
    write(book_dir / 'curriculum.yaml', yaml.safe_dump(RU_CURRICULUM, allow_unicode=True, sort_keys=False))
    content = book_dir / 'content'
    write(content / '01-basics/01-intro/hello/article.md',
          article('Привет', author='jdoe', updatedAt='2024-03-01', body='Раз два три.'))
    write(content / '01-basics/01-intro/setup/article.md', article('Установка'))
    write(content / '01-basics/02-types/ints/article.md', article('Целые числа', author='nobody'))
    write(content / '01-basics/03-drafts/draft-one/article.md', article('Черновик', published=False))
    write(content / '02-advanced/01-wip/wip-topic/article.md', article('Скоро', published='true'))
    write(content / 'appendix/glossary.md', article('Глоссарий'))
    write(book_dir / 'authors.yaml', yaml.safe_dump({
        'authors': [
            {'id': 'jdoe', 'name': 'Иван Доу', 'role': 'Автор', 'bio': 'Пишет о Go.', 'quote': 'Цитата'},
        ]
    }, allow_unicode=True))
    return book_dir


def make_en_book(book_dir: Path) -> Path:
    write(book_dir / 'curriculum.yaml', yaml.safe_dump(EN_CURRICULUM, allow_unicode=True, sort_keys=False))
    content = book_dir / 'content'
    write(content / '01-basics/01-intro/hello/article.md', article('Hello', author='jdoe'))
    write(content / '01-basics/01-intro/setup/article.md', article('Setup'))
    write(book_dir / 'authors.yaml', yaml.safe_dump({
        'authors': [
            {'id': 'jdoe', 'name': 'John Doe', 'role': 'Author', 'bio': 'Writes about Go.', 'github': 'jdoe'},
        ]
    }))
    return book_dir


def site_config(root: Path) -> SyncConfig:
    return build_config({
        'content_dir': 'site/docs',
        'data_dir': 'site/data',
        'locales': [
            {'code': 'ru', 'label': 'Русский', 'book_dir': 'books/go-ru', 'book_title': 'Учебник Go',
             'prev_label': '← Предыдущий', 'next_label': 'Следующий →'},
            {'code': 'en', 'label': 'English', 'book_dir': 'books/go-en', 'book_title': 'Go Tutorial'},
        ],
    }, root)


@pytest.fixture
def site(tmp_path: Path) -> SyncConfig:
    make_ru_book(tmp_path / 'books/go-ru')
    make_en_book(tmp_path / 'books/go-en')
    return site_config(tmp_path)
