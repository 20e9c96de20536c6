"""End-to-end tests for the planning pipeline."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from depgroups.planner import Planner
from tests._fixtures.repo_builder import RepoBuilder


def test_pep621_project_gets_fastapi_core_group(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "pyproject.toml": """
            [project]
            name = "api"
            dependencies = ["fastapi>=0.110.0", "pydantic>=2.0.0"]
            """,
        }
    )

    result = Planner().plan(repo_builder.path(), "pro")

    report = result.reports["pip"]
    assert report.dependencies == {"fastapi": ">=0.110.0", "pydantic": ">=2.0.0"}
    assert report.primary == "fastapi"
    assert report.frameworks["fastapi"].primary is True
    entry = result.configuration.entry_for("pip")
    assert entry is not None
    groups = {group.name: group for group in entry.groups}
    assert groups["fastapi-core"].packages == ("fastapi", "pydantic")
    assert result.configuration.to_dict()["updates"][0]["groups"]["fastapi-core"]["patterns"] == [
        "fastapi",
        "uvicorn",
        "starlette",
        "pydantic",
    ]


def test_requirements_with_comment_yield_two_dependencies(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "requirements.txt": """
            scikit-learn==1.3.0
            django-cors-headers==4.0.0
            # not a dependency
            """,
        }
    )

    result = Planner().plan(repo_builder.path())

    report = result.reports["pip"]
    assert report.dependencies == {
        "scikit-learn": "==1.3.0",
        "django-cors-headers": "==4.0.0",
    }
    assert report.primary is None
    assert list(report.frameworks) == ["datascience"]
    assert len(result.configuration.updates) == 1


def test_polyglot_project_gets_independent_entries(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "package.json": json.dumps(
                {"dependencies": {"react": "^18.2.0"}, "devDependencies": {"jest": "^29.0.0"}}
            ),
            "Cargo.toml": """
            [dependencies]
            tokio = { version = "1", features = ["full"] }
            serde = "1.0"
            """,
            "Gemfile": """
            source "https://rubygems.org"
            gem 'rails', '~> 7.1'
            gem 'rspec-rails', group: :test
            """,
        }
    )

    result = Planner().plan(repo_builder.path(), "enterprise")

    configuration = result.configuration
    assert [entry.ecosystem for entry in configuration.updates] == ["npm", "cargo", "bundler"]
    for entry in configuration.updates:
        assert entry.groups, entry.ecosystem
    assert result.reports["npm"].primary == "react"
    assert result.reports["cargo"].primary is None
    assert result.reports["bundler"].primary == "rails"
    npm_groups = {group.name for group in configuration.entry_for("npm").groups}
    assert {"react-core", "testing-frameworks"} <= npm_groups


def test_empty_project_yields_empty_configuration(repo_builder: RepoBuilder) -> None:
    repo_builder.write({"README.md": "# nothing here\n"})

    result = Planner().plan(repo_builder.path())

    assert result.configuration.is_empty
    assert result.reports == {}


def test_manifest_without_dependencies_is_absent(repo_builder: RepoBuilder) -> None:
    repo_builder.write({"package.json": "{\"name\": \"empty\"}", "Gemfile": "gem 'sinatra'\n"})

    result = Planner().plan(repo_builder.path())

    assert [entry.ecosystem for entry in result.configuration.updates] == ["bundler"]


def test_requirements_without_dependencies_defers_to_pyproject(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "requirements.txt": "-e .\n",
            "pyproject.toml": """
            [project]
            name = "svc"
            dependencies = ["fastapi>=0.110.0"]
            """,
        }
    )

    result = Planner().plan(repo_builder.path(), "pro")

    report = result.reports["pip"]
    assert report.manifest == "pyproject.toml"
    assert report.dependencies == {"fastapi": ">=0.110.0"}
    assert "fastapi-core" in [group.name for group in result.groups["pip"]]


def test_ecosystem_without_frameworks_gets_single_ungrouped_entry(repo_builder: RepoBuilder) -> None:
    repo_builder.write({"requirements.txt": "requests==2.31.0\n"})

    result = Planner().plan(repo_builder.path(), "pro")

    entry = result.configuration.entry_for("pip")
    assert entry is not None
    assert entry.groups == ()


def test_plan_is_deterministic(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "package.json": json.dumps(
                {"dependencies": {"@angular/core": "^17", "@angular/router": "^17", "@ngrx/store": "^17"}}
            ),
            "requirements.txt": "django==4.2\ndjango-filter==23.5\npytest-cov\n",
        }
    )

    first = Planner().plan(repo_builder.path())
    second = Planner().plan(repo_builder.path())

    assert first.configuration == second.configuration
    assert first.configuration.to_dict() == second.configuration.to_dict()


def test_plan_uses_project_configuration(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            ".depgroups.yml": """
            tier: free
            promotional_grouping: false
            schedule:
              interval: monthly
            """,
            ".github/workflows/ci.yml": "name: CI\n",
            "requirements.txt": "flask==3.0.0\n",
        }
    )

    result = Planner().plan(repo_builder.path())

    configuration = result.configuration
    assert configuration.grouped is False
    assert [entry.ecosystem for entry in configuration.updates] == ["pip", "github-actions"]
    assert configuration.updates[0].schedule.interval == "monthly"


def test_tier_argument_overrides_configuration(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            ".depgroups.yml": "tier: free\npromotional_grouping: false\n",
            "requirements.txt": "flask==3.0.0\n",
        }
    )

    result = Planner().plan(repo_builder.path(), "pro")

    assert result.configuration.tier == "pro"
    assert result.configuration.grouped is True


def test_invalid_configuration_falls_back_to_defaults(repo_builder: RepoBuilder) -> None:
    repo_builder.write({".depgroups.yml": "tier: gold\n", "Gemfile": "gem 'rails'\n"})

    result = Planner().plan(repo_builder.path())

    assert result.configuration.tier == "free"
    assert not result.configuration.is_empty


def test_nested_manifests_are_reported(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "package.json": json.dumps({"dependencies": {"vue": "^3.4.0"}}),
            "packages/admin/package.json": json.dumps({"dependencies": {"react": "^18"}}),
        }
    )

    result = Planner().plan(repo_builder.path())

    assert result.nested == ["packages/admin/package.json"]
    assert list(result.reports["npm"].frameworks) == ["vue"]


def test_plan_many_isolates_failures(repo_builder: RepoBuilder, tmp_path: Path) -> None:
    repo_builder.write({"Gemfile": "gem 'rails'\n"})
    missing = tmp_path / "missing"

    outcome = Planner().plan_many([repo_builder.path(), missing])

    assert not outcome.ok
    assert list(outcome.results) == [str(repo_builder.path())]
    assert str(missing) in outcome.failures


def test_plan_rejects_missing_root(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        Planner().plan(tmp_path / "missing")
