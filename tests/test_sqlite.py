import pytest
import tempfile

from dataclasses import astuple
from issuefinder.catalog import IssueRow, RepoRow, catalog_tables
from issuefinder.error import RetrievalError
from issuefinder.fetch import fetch_all
from issuefinder.sql import Expression, Param
from issuefinder.sqlite import CodecError, Database, SQLiteCodec, SQLiteSource


pytestmark = pytest.mark.asyncio


REPOS_DDL = (
    "CREATE TABLE repos (full_name TEXT PRIMARY KEY, name TEXT NOT NULL, stars INTEGER NOT NULL, "
    "forks INTEGER NOT NULL, health_score REAL, language TEXT NOT NULL, last_active TEXT);"
)

ISSUES_DDL = (
    "CREATE TABLE issues (url TEXT PRIMARY KEY, repo_id TEXT NOT NULL, title TEXT NOT NULL, "
    "difficulty_score REAL, created_at TEXT NOT NULL);"
)


@pytest.fixture(scope="function")
def database():
    with tempfile.TemporaryDirectory() as dir:
        yield Database(f"{dir}/test.db")


def _insert(table, row):
    return Expression(
        f"INSERT INTO {table.name} VALUES (",
        Expression.join((Param(v, t) for v, t in zip(astuple(row), table.columns.values())), ", "),
        ");",
    )


def _repo(n):
    return RepoRow(
        full_name=f"owner/repo{n:04d}",
        name=f"repo{n:04d}",
        stars=n % 7,
        forks=n,
        health_score=None if n % 5 == 0 else 50.0,
        language="Python",
        last_active=None,
    )


def _issue(n):
    return IssueRow(
        url=f"https://example.com/issues/{n:04d}",
        repo_id="owner/repo0000",
        title=f"Issue {n}",
        difficulty_score=float(n),
        created_at=f"2024-01-01T00:00:{n % 60:02d}Z",
    )


async def _populate(database, repos: int = 0, issues: int = 0):
    repo_table, issue_table = catalog_tables()
    async with database.transaction():
        await database.execute(Expression(REPOS_DDL))
        await database.execute(Expression(ISSUES_DDL))
        for n in range(repos):
            await database.execute(_insert(repo_table, _repo(n)))
        for n in range(issues):
            await database.execute(_insert(issue_table, _issue(n)))
    return SQLiteSource(database, [repo_table, issue_table])


async def _count(database, table):
    async with database.transaction():
        rows = await database.execute(
            Expression(f"SELECT COUNT(*) AS count FROM {table};"), {"count": int}
        )
        return [row async for row in rows][0]["count"]


async def test_populate_count(database):
    await _populate(database, repos=3, issues=2)
    assert await _count(database, "repos") == 3
    assert await _count(database, "issues") == 2


async def test_transaction_rollback(database):
    repo_table, _ = catalog_tables()
    await _populate(database)
    with pytest.raises(RuntimeError):
        async with database.transaction():
            await database.execute(_insert(repo_table, _repo(1)))
            raise RuntimeError
    assert await _count(database, "repos") == 0


async def test_nested_transaction_rollback(database):
    repo_table, _ = catalog_tables()
    await _populate(database)
    async with database.transaction():
        await database.execute(_insert(repo_table, _repo(1)))
        with pytest.raises(RuntimeError):
            async with database.transaction():
                await database.execute(_insert(repo_table, _repo(2)))
                raise RuntimeError
    assert await _count(database, "repos") == 1


async def test_execute_requires_transaction(database):
    with pytest.raises(RuntimeError):
        async with database.connection():
            await database.execute(Expression("SELECT 1;"))


async def test_codecs():
    assert SQLiteCodec.get(int).decode(3) == 3
    assert SQLiteCodec.get(float).encode(2) == 2.0
    assert SQLiteCodec.get(str | None).encode(None) is None
    assert SQLiteCodec.get(float | None).decode(1.5) == 1.5
    with pytest.raises(CodecError):
        SQLiteCodec.get(str).decode(1)
    with pytest.raises(CodecError):
        SQLiteCodec.get(float).encode(True)
    with pytest.raises(TypeError):
        SQLiteCodec.get(bytes)


async def test_source_query_decodes_rows(database):
    source = await _populate(database, repos=2)
    rows = await source.query("repos", "*", "full_name", True, 0, 9)
    assert rows[0] == {
        "full_name": "owner/repo0000",
        "name": "repo0000",
        "stars": 0,
        "forks": 0,
        "health_score": None,
        "language": "Python",
        "last_active": None,
    }
    assert rows[1]["health_score"] == 50.0


async def test_source_query_projection_and_range(database):
    source = await _populate(database, repos=10)
    rows = await source.query("repos", "name, forks", "forks", False, 2, 4)
    assert rows == [
        {"name": "repo0007", "forks": 7},
        {"name": "repo0006", "forks": 6},
        {"name": "repo0005", "forks": 5},
    ]


async def test_source_query_capped(database):
    source = await _populate(database, repos=30)
    source.max_rows = 8
    rows = await source.query("repos", "name", "forks", True, 0, 999)
    assert len(rows) == 8


async def test_source_unknown_table(database):
    source = SQLiteSource(database, [])
    with pytest.raises(RetrievalError):
        await source.query("repos", "*", "stars", True, 0, 9)


async def test_source_unknown_column(database):
    source = await _populate(database)
    with pytest.raises(RetrievalError):
        await source.query("repos", "name, secret", "stars", True, 0, 9)
    with pytest.raises(RetrievalError):
        await source.query("repos", "name", "secret", True, 0, 9)


async def test_source_missing_table_in_database(database):
    source = SQLiteSource(database, catalog_tables())  # tables never created
    with pytest.raises(RetrievalError):
        await source.query("repos", "*", "stars", True, 0, 9)


async def test_fetch_all_ties_neither_skipped_nor_repeated(database):
    source = await _populate(database, repos=250)
    source.max_rows = 100
    rows = await fetch_all(source, "repos", "full_name, stars", "stars", False, step=999)
    names = [row["full_name"] for row in rows]
    assert len(names) == 250
    assert len(set(names)) == 250
    stars = [row["stars"] for row in rows]
    assert stars == sorted(stars, reverse=True)
