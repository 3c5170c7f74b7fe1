"""
Module to load the catalog of repositories and issues from a source.

Rows of the `repos` and `issues` tables are retrieved in full, then converted to annotated
catalog items. The catalog is the only link between retrieval and the filter/pagination
engine: loading never evaluates filters, and the engine never queries a source.
"""

import logging

from collections.abc import Mapping
from dataclasses import dataclass
from issuefinder.config import Settings
from issuefinder.engine import FilterPaginationEngine, View
from issuefinder.fetch import fetch_all
from issuefinder.model import Item, ItemType
from issuefinder.policy import ViewMode
from issuefinder.source import Source
from issuefinder.sql import Table
from issuefinder.sqlite import Database, SQLiteSource
from typing import Any


_logger = logging.getLogger(__name__)


REPOS_TABLE = "repos"
ISSUES_TABLE = "issues"

EASY = "easy"
MEDIUM = "medium"
HARD = "hard"


@dataclass
class RepoRow:
    """Row of the repos table."""

    full_name: str
    name: str
    stars: int
    forks: int
    health_score: float | None
    language: str
    last_active: str | None


@dataclass
class IssueRow:
    """Row of the issues table."""

    url: str
    repo_id: str
    title: str
    difficulty_score: float | None
    created_at: str


def difficulty_level(score: float | None) -> str:
    """Return the difficulty facet value of a difficulty score; empty if not scored."""
    if score is None:
        return ""
    if score < 30:
        return EASY
    if score < 60:
        return MEDIUM
    return HARD


def repository_annotations(row: Mapping[str, Any]) -> dict[str, str]:
    """Return annotations of a repository row. A repository's difficulty mirrors its health."""
    health_score = row.get("health_score")
    return {
        "type": ItemType.REPOSITORY.value,
        "name": row.get("name") or row.get("full_name") or "",
        "lang": (row.get("language") or "").lower(),
        "difficulty": difficulty_level(100 - health_score if health_score is not None else None),
    }


def issue_annotations(
    row: Mapping[str, Any],
    repositories: Mapping[str, Mapping[str, Any]],
) -> dict[str, str]:
    """
    Return annotations of an issue row. An issue takes the language of its repository.

    Parameters:
    • row: issue row
    • repositories: repository rows, keyed by full name
    """
    repo = row.get("repo_id") or ""
    return {
        "type": ItemType.ISSUE.value,
        "title": row.get("title") or "",
        "repo": repo,
        "lang": (repositories.get(repo, {}).get("language") or "").lower(),
        "difficulty": difficulty_level(row.get("difficulty_score")),
    }


def catalog_tables() -> list[Table]:
    """Return the tables of the catalog."""
    return [
        Table(REPOS_TABLE, RepoRow, "full_name"),
        Table(ISSUES_TABLE, IssueRow, "url"),
    ]


def open_source(settings: Settings) -> SQLiteSource:
    """Return a source reading the catalog from the configured SQLite database."""
    if not settings.database_path:
        raise ValueError("database_path is not configured")
    return SQLiteSource(Database(settings.database_path), catalog_tables())


@dataclass(frozen=True)
class Catalog:
    """Repositories and issues loaded for display."""

    repositories: tuple[Item, ...] = ()
    issues: tuple[Item, ...] = ()

    def engine(
        self,
        mode: ViewMode,
        settings: Settings | None = None,
        view: View | None = None,
    ) -> FilterPaginationEngine:
        """Return a filter/pagination engine over the catalog items."""
        settings = settings or Settings()
        return FilterPaginationEngine(
            self.repositories, self.issues, mode, page_size=settings.page_size, view=view
        )


async def load_catalog(source: Source, settings: Settings | None = None) -> Catalog:
    """
    Load the catalog from a source.

    Repositories are ordered by stars, issues by creation time, both descending. Raises
    RetrievalError if either table cannot be retrieved in full.
    """
    settings = settings or Settings()
    options = dict(max_items=settings.max_items, step=settings.step, min_cap=settings.min_cap)
    repo_rows = await fetch_all(source, REPOS_TABLE, "*", "stars", False, **options)
    issue_rows = await fetch_all(source, ISSUES_TABLE, "*", "created_at", False, **options)
    by_full_name = {row["full_name"]: row for row in repo_rows if row.get("full_name")}
    catalog = Catalog(
        repositories=tuple(Item.from_annotations(repository_annotations(r)) for r in repo_rows),
        issues=tuple(Item.from_annotations(issue_annotations(r, by_full_name)) for r in issue_rows),
    )
    _logger.info(
        "loaded %d repositories and %d issues", len(catalog.repositories), len(catalog.issues)
    )
    return catalog
