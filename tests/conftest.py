"""Shared fixtures: mdBook payloads and book project directories."""

import pytest

from tests.helpers import make_chapter

WAVEDROM_CHAPTER = """\
# Timing

```wavedrom
{signal:[{name:'clk',wave:'p..'}]}
```

Text
"""


@pytest.fixture
def context():
    return {
        "root": "/path/to/book",
        "config": {
            "book": {"authors": ["AUTHOR"], "language": "en", "src": "src"},
            "preprocessor": {"wavedrom": {"command": "mdbook-wavedrom"}},
        },
        "renderer": "html",
        "mdbook_version": "0.4.37",
        "__non_exhaustive": None,
    }


@pytest.fixture
def book():
    nested = make_chapter("Nested", WAVEDROM_CHAPTER, number=[1, 1], path="intro/nested.md")
    return {
        "sections": [
            make_chapter("Intro", "# Intro\n", sub_items=[nested], number=[1], path="intro.md"),
            "Separator",
            {"PartTitle": "Reference"},
            make_chapter("Signals", WAVEDROM_CHAPTER, number=[2], path="signals.md"),
        ],
        "__non_exhaustive": None,
    }


@pytest.fixture
def book_dir(tmp_path):
    """A book project with a minimal book.toml."""
    root = tmp_path / "book"
    root.mkdir()
    (root / "book.toml").write_text(
        '[book]\n'
        'authors = ["Jane Doe"]\n'
        'language = "en"\n'
        'src = "src"\n'
        'title = "Timing diagrams"\n'
    )
    return root
