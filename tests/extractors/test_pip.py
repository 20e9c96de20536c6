"""Tests for the pip manifest extractor."""

from __future__ import annotations

from pathlib import Path

from depgroups.extractors.pip import (
    PipExtractor,
    parse_pyproject,
    parse_requirement,
    parse_requirements,
)
from depgroups.models import dependency_mapping


def _write(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def test_requirements_keep_hyphenated_names_and_skip_comments() -> None:
    text = "scikit-learn==1.3.0\ndjango-cors-headers==4.0.0\n# not a dependency\n\n"

    deps = parse_requirements(text)

    assert [(dep.name, dep.constraint) for dep in deps] == [
        ("scikit-learn", "==1.3.0"),
        ("django-cors-headers", "==4.0.0"),
    ]
    assert [dep.line for dep in deps] == [1, 2]
    assert all(dep.source == "requirements.txt" for dep in deps)


def test_requirements_operators_extras_and_wildcards() -> None:
    text = """\
requests[security,socks]>=2.31.0
numpy~=1.26
pandas<=2.1.0
Django==4.2.*
zope.interface>=6.0, <7
"""

    mapping = dependency_mapping(parse_requirements(text))

    assert mapping == {
        "requests": ">=2.31.0",
        "numpy": "~=1.26",
        "pandas": "<=2.1.0",
        "Django": "==4.2.*",
        "zope.interface": ">=6.0,<7",
    }


def test_requirements_vcs_urls_use_egg_or_repository_name() -> None:
    text = """\
git+https://github.com/org/widgets.git#egg=widget-tools
-e git+https://github.com/org/gadgets.git@v1.2#egg=gadgets
git+https://github.com/org/sprockets.git@main
"""

    deps = parse_requirements(text)

    assert [(dep.name, dep.constraint) for dep in deps] == [
        ("widget-tools", None),
        ("gadgets", None),
        ("sprockets", None),
    ]


def test_requirements_skip_options_and_malformed_lines() -> None:
    text = """\
--index-url https://pypi.example.org/simple
-r base.txt
flask>=3.0  # web framework
this is not a requirement
==1.0
pytest-cov
"""

    deps = parse_requirements(text)

    assert [(dep.name, dep.constraint, dep.line) for dep in deps] == [
        ("flask", ">=3.0", 3),
        ("pytest-cov", None, 6),
    ]


def test_requirements_hashes_and_line_continuations() -> None:
    text = """\
# This file is autogenerated by pip-compile
django==4.2.7 \\
    --hash=sha256:abc \\
    --hash=sha256:0123
    # via -r requirements.in
flask==3.0.0 --hash=sha256:def
requests[socks]>=2.31 ; python_version >= "3.8" \\
    --hash=sha256:fed
"""

    deps = parse_requirements(text)

    assert [(dep.name, dep.constraint, dep.line) for dep in deps] == [
        ("django", "==4.2.7", 2),
        ("flask", "==3.0.0", 6),
        ("requests", ">=2.31", 7),
    ]


def test_requirements_duplicates_last_write_wins() -> None:
    mapping = dependency_mapping(parse_requirements("django==3.2\nflask\ndjango==4.2\n"))

    assert mapping == {"flask": None, "django": "==4.2"}


def test_parse_requirement_handles_markers_and_direct_references() -> None:
    assert parse_requirement("tomli>=2.0; python_version < '3.11'") == ("tomli", ">=2.0")
    assert parse_requirement("pkg @ https://example.org/pkg-1.0.tar.gz") == ("pkg", None)
    assert parse_requirement("") is None


def test_pyproject_pep621_list_dependencies() -> None:
    text = """\
[project]
name = "service"
version = "0.1.0"
dependencies = ["fastapi>=0.110.0", "pydantic>=2.0.0"]

[project.urls]
homepage = "https://example.org"
"""

    mapping = dependency_mapping(parse_pyproject(text))

    assert mapping == {"fastapi": ">=0.110.0", "pydantic": ">=2.0.0"}


def test_pyproject_multiline_arrays_and_optional_groups() -> None:
    text = """\
[project]
name = "service"
dependencies = [
    "httpx>=0.27",  # client
    "uvicorn[standard]>=0.29",
]

[project.optional-dependencies]
test = ["pytest>=8", "pytest-cov"]
docs = [
    "mkdocs",
]
"""

    deps = parse_pyproject(text)

    assert [(dep.name, dep.constraint) for dep in deps] == [
        ("httpx", ">=0.27"),
        ("uvicorn", ">=0.29"),
        ("pytest", ">=8"),
        ("pytest-cov", None),
        ("mkdocs", None),
    ]
    assert deps[0].line == 3


def test_pyproject_table_style_poetry_dependencies() -> None:
    text = """\
[tool.poetry.dependencies]
python = "^3.11"
django = "^4.2"
celery = { version = "^5.3", extras = ["redis"] }
local-lib = { path = "../local-lib" }

[tool.poetry.group.dev.dependencies]
pytest = "^8.0"

[tool.black]
line-length = 100
"""

    mapping = dependency_mapping(parse_pyproject(text))

    assert mapping == {
        "django": "^4.2",
        "celery": "^5.3",
        "local-lib": None,
        "pytest": "^8.0",
    }


def test_extractor_dispatches_on_file_name(tmp_path: Path) -> None:
    _write(tmp_path / "requirements.txt", "flask==3.0.0\n")
    _write(tmp_path / "pyproject.toml", '[project]\ndependencies = ["django"]\n')

    extractor = PipExtractor()

    assert [dep.name for dep in extractor.extract(tmp_path / "requirements.txt")] == ["flask"]
    assert [dep.name for dep in extractor.extract(tmp_path / "pyproject.toml")] == ["django"]
    assert extractor.extract(tmp_path / "missing.txt") == []
