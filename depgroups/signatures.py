"""Static registry of framework signatures per ecosystem.

Priority ranks: 1 marks application frameworks that may be elected primary,
2 marks foundational libraries, 3 marks tooling families.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Sequence, Tuple

from .models import (
    ECOSYSTEM_BUNDLER,
    ECOSYSTEM_CARGO,
    ECOSYSTEM_NPM,
    ECOSYSTEM_PIP,
    FrameworkSignature,
)

PRIMARY_RANK_THRESHOLD = 1

_SignatureSpec = Tuple[str, str, int, Mapping[str, Sequence[str]]]

# (framework, category, priority, {role: patterns}); the "core" role supplies
# the reported framework version.
_NPM: Sequence[_SignatureSpec] = (
    (
        "react",
        "web",
        1,
        {
            "core": ("react", "react-dom"),
            "routing": ("react-router", "react-router-dom", "@tanstack/react-router"),
            "state": ("zustand", "jotai", "redux", "@reduxjs/toolkit"),
            "query": ("@tanstack/react-query", "swr"),
            "forms": ("react-hook-form", "formik"),
            "ui": ("@mui/material", "@chakra-ui/react", "@radix-ui/react-*", "@headlessui/react"),
            "meta": ("next", "remix", "gatsby"),
        },
    ),
    (
        "vue",
        "web",
        1,
        {
            "core": ("vue",),
            "routing": ("vue-router",),
            "state": ("pinia", "vuex"),
            "ecosystem": ("@vue/*", "vueuse"),
            "ui": ("vuetify", "element-plus", "@vueuse/core"),
            "meta": ("nuxt",),
        },
    ),
    (
        "angular",
        "web",
        1,
        {
            "core": ("@angular/core", "@angular/common", "@angular/platform-browser"),
            "routing": ("@angular/router",),
            "forms": ("@angular/forms",),
            "state": ("@ngrx/*", "@ngxs/*"),
            "ui": ("@angular/material", "@ng-bootstrap/ng-bootstrap"),
            "cli": ("@angular/cli", "@angular-devkit/*"),
        },
    ),
    (
        "svelte",
        "web",
        1,
        {"core": ("svelte",), "meta": ("@sveltejs/kit",)},
    ),
    (
        "testing",
        "testing",
        3,
        {"frameworks": ("jest", "vitest", "@testing-library/*", "playwright", "@playwright/test")},
    ),
    (
        "build",
        "build-tooling",
        3,
        {"tools": ("vite", "webpack", "turbo", "nx", "@nx/*", "esbuild", "rollup")},
    ),
    ("storybook", "ui-tooling", 3, {"core": ("@storybook/*",)}),
)

_PIP: Sequence[_SignatureSpec] = (
    (
        "django",
        "web",
        1,
        {
            "core": ("django",),
            "rest": ("djangorestframework", "django-rest-framework"),
            "async": ("channels", "django-channels"),
            "cms": ("wagtail", "django-cms"),
        },
    ),
    (
        "flask",
        "web",
        1,
        {"core": ("flask",), "extensions": ("flask-sqlalchemy", "flask-restful", "flask-cors")},
    ),
    (
        "fastapi",
        "web",
        1,
        {"core": ("fastapi",), "async": ("uvicorn", "starlette"), "validation": ("pydantic",)},
    ),
    (
        "datascience",
        "data-tooling",
        2,
        {
            "core": ("numpy", "pandas", "scipy"),
            "ml": ("scikit-learn", "tensorflow", "torch", "pytorch"),
            "viz": ("matplotlib", "seaborn", "plotly"),
        },
    ),
    (
        "testing",
        "testing",
        3,
        {"frameworks": ("pytest", "unittest2", "nose2"), "helpers": ("pytest-*", "coverage")},
    ),
    (
        "web",
        "web-servers",
        3,
        {"servers": ("gunicorn", "uwsgi"), "async": ("aiohttp", "tornado")},
    ),
)

_CARGO: Sequence[_SignatureSpec] = (
    (
        "actix",
        "web",
        1,
        {"core": ("actix-web", "actix-rt"), "middleware": ("actix-cors", "actix-session")},
    ),
    ("rocket", "web", 1, {"core": ("rocket",), "features": ("rocket_contrib",)}),
    (
        "async",
        "async-runtime",
        2,
        {"runtime": ("tokio", "async-std"), "helpers": ("futures",)},
    ),
    (
        "serde",
        "serialization",
        2,
        {"core": ("serde", "serde_json"), "formats": ("serde_yaml", "serde_derive")},
    ),
    ("testing", "testing", 3, {"frameworks": ("criterion", "proptest")}),
)

_BUNDLER: Sequence[_SignatureSpec] = (
    (
        "rails",
        "web",
        1,
        {
            "core": ("rails",),
            "database": ("activerecord", "pg", "mysql2"),
            "testing": ("rspec-rails", "factory_bot_rails"),
            "frontend": ("webpacker", "importmap-rails"),
        },
    ),
    ("sinatra", "web", 1, {"core": ("sinatra",), "extensions": ("sinatra-contrib",)}),
    (
        "testing",
        "testing",
        3,
        {
            "frameworks": ("rspec", "rspec-*", "minitest"),
            "helpers": ("capybara", "factory_bot", "factory_bot_*"),
        },
    ),
    (
        "utilities",
        "utilities",
        3,
        {"async": ("sidekiq", "delayed_job"), "http": ("faraday", "httparty")},
    ),
)


def _build(ecosystem: str, specs: Iterable[_SignatureSpec]) -> Tuple[FrameworkSignature, ...]:
    signatures: List[FrameworkSignature] = []
    for framework, category, priority, roles in specs:
        patterns: List[str] = []
        for role_patterns in roles.values():
            for pattern in role_patterns:
                if pattern not in patterns:
                    patterns.append(pattern)
        signatures.append(
            FrameworkSignature(
                ecosystem=ecosystem,
                framework=framework,
                category=category,
                priority=priority,
                patterns=tuple(patterns),
                core=tuple(roles.get("core", ())),
            )
        )
    return tuple(signatures)


def _build_registry() -> Mapping[str, Tuple[FrameworkSignature, ...]]:
    registry: Dict[str, Tuple[FrameworkSignature, ...]] = {
        ECOSYSTEM_NPM: _build(ECOSYSTEM_NPM, _NPM),
        ECOSYSTEM_PIP: _build(ECOSYSTEM_PIP, _PIP),
        ECOSYSTEM_CARGO: _build(ECOSYSTEM_CARGO, _CARGO),
        ECOSYSTEM_BUNDLER: _build(ECOSYSTEM_BUNDLER, _BUNDLER),
    }
    return MappingProxyType(registry)


SIGNATURES: Mapping[str, Tuple[FrameworkSignature, ...]] = _build_registry()


def signatures_for(ecosystem: str) -> Tuple[FrameworkSignature, ...]:
    """Return the ordered signatures for ``ecosystem`` (empty when unknown)."""
    return SIGNATURES.get(ecosystem, ())


__all__ = ["PRIMARY_RANK_THRESHOLD", "SIGNATURES", "signatures_for"]
