"""
Locale and path configuration for the content sync scripts.

Defaults live in the module-level constants below. An optional YAML file
(passed with --config) overrides them:

    base_locale: ru
    content_dir: apps/web/src/content/docs
    data_dir: apps/web/src/data
    preserve: [index.mdx, authors.mdx]
    locales:
      - code: ru
        label: Русский
        book_dir: books/go-language-ru
        book_title: Учебник Go
        prev_label: ← Предыдущий
        next_label: Следующий →

Relative paths resolve against the directory holding the config file, or
against --root when no config file is given.
"""

from dataclasses import dataclass, field
from pathlib import Path

import yaml

from errors import DocumentError


# --- Configuration ---

CURRICULUM_FILE = 'curriculum.yaml'
AUTHORS_FILE = 'authors.yaml'
CONTENT_SUBDIR = 'content'
ARTICLE_FILE = 'article.md'

CONTENT_DIR = Path('apps/web/src/content/docs')
DATA_DIR = Path('apps/web/src/data')

# Hand-authored pages that survive the destination clear
PRESERVED_FILES = ('index.mdx', 'authors.mdx')

WORDS_PER_MINUTE = 200
TOC_MIN_HEADING_LEVEL = 2
TOC_MAX_HEADING_LEVEL = 3

DEFAULT_LOCALES = [
    {
        'code': 'ru',
        'label': 'Русский',
        'book_dir': 'books/go-language-ru',
        'book_title': 'Учебник Go',
        'prev_label': '← Предыдущий',
        'next_label': 'Следующий →',
    },
    {
        'code': 'en',
        'label': 'English',
        'book_dir': 'books/go-language-en',
        'book_title': 'Go Tutorial',
        'prev_label': '← Previous',
        'next_label': 'Next →',
    },
]


# --- Data Structures ---

@dataclass(frozen=True)
class Locale:
    """One language variant of the book."""
    code: str
    label: str
    book_dir: Path
    book_title: str
    prev_label: str = '← Previous'
    next_label: str = 'Next →'

    @property
    def curriculum_path(self) -> Path:
        return self.book_dir / CURRICULUM_FILE

    @property
    def authors_path(self) -> Path:
        return self.book_dir / AUTHORS_FILE

    @property
    def content_root(self) -> Path:
        return self.book_dir / CONTENT_SUBDIR


@dataclass
class SyncConfig:
    """Everything a sync run needs to know about where things live."""
    locales: list[Locale]
    content_dir: Path
    data_dir: Path
    base_locale: str
    preserve: tuple[str, ...] = PRESERVED_FILES
    words_per_minute: int = WORDS_PER_MINUTE
    book_titles: dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        if not self.book_titles:
            self.book_titles = {loc.code: loc.book_title for loc in self.locales}

    def locale(self, code: str) -> Locale | None:
        for loc in self.locales:
            if loc.code == code:
                return loc
        return None


# --- Loading ---

def _make_locale(raw: dict, base_dir: Path, source: Path) -> Locale:
    if not isinstance(raw, dict) or not raw.get('code'):
        raise DocumentError(source, f"locale entry needs a 'code': {raw!r}")
    code = str(raw['code'])
    book_dir = raw.get('book_dir')
    if not book_dir:
        raise DocumentError(source, f"locale '{code}' needs a 'book_dir'")
    return Locale(
        code=code,
        label=str(raw.get('label') or code),
        book_dir=base_dir / book_dir,
        book_title=str(raw.get('book_title') or ''),
        prev_label=str(raw.get('prev_label') or '← Previous'),
        next_label=str(raw.get('next_label') or 'Next →'),
    )


def build_config(raw: dict, base_dir: Path, source: Path | None = None) -> SyncConfig:
    """Build a SyncConfig from a parsed mapping, filling in defaults."""
    source = source or base_dir
    locales = [_make_locale(item, base_dir, source) for item in raw.get('locales') or DEFAULT_LOCALES]
    if not locales:
        raise DocumentError(source, 'no locales configured')

    codes = [loc.code for loc in locales]
    if len(set(codes)) != len(codes):
        raise DocumentError(source, f"duplicate locale codes: {codes}")

    base_locale = str(raw.get('base_locale') or codes[0])
    if base_locale not in codes:
        raise DocumentError(source, f"base_locale '{base_locale}' is not one of {codes}")

    preserve = raw.get('preserve')
    if preserve is None:
        preserve = PRESERVED_FILES

    words_per_minute = raw.get('words_per_minute', WORDS_PER_MINUTE)
    if isinstance(words_per_minute, bool) or not isinstance(words_per_minute, int) or words_per_minute <= 0:
        raise DocumentError(source, f"words_per_minute must be a positive integer, got {words_per_minute!r}")

    return SyncConfig(
        locales=locales,
        content_dir=base_dir / raw.get('content_dir', CONTENT_DIR),
        data_dir=base_dir / raw.get('data_dir', DATA_DIR),
        base_locale=base_locale,
        preserve=tuple(str(name) for name in preserve),
        words_per_minute=words_per_minute,
    )


def load_config(config_path: Path | None = None, root: Path | None = None) -> SyncConfig:
    """Load configuration from a YAML file, or the defaults relative to root."""
    if config_path is None:
        return build_config({}, root or Path('.'))

    try:
        raw = yaml.safe_load(config_path.read_text(encoding='utf-8'))
    except OSError as e:
        raise DocumentError(config_path, f"cannot read config: {e}") from e
    except yaml.YAMLError as e:
        raise DocumentError(config_path, f"invalid YAML: {e}") from e

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise DocumentError(config_path, 'config must be a mapping')

    return build_config(raw, root or config_path.parent, config_path)
