import pytest

from issuefinder.error import RetrievalError
from issuefinder.memory import MemorySource


pytestmark = pytest.mark.asyncio


def _rows():
    return [
        {"id": 1, "stars": 5, "name": "a"},
        {"id": 2, "stars": None, "name": "b"},
        {"id": 3, "stars": 9, "name": "c"},
        {"id": 4, "stars": 5, "name": "d"},
    ]


async def test_query_ascending():
    source = MemorySource({"repos": _rows()})
    rows = await source.query("repos", "*", "stars", True, 0, 99)
    assert [row["id"] for row in rows] == [1, 4, 3, 2]


async def test_query_descending_nulls_last():
    source = MemorySource({"repos": _rows()})
    rows = await source.query("repos", "id", "stars", False, 0, 99)
    assert rows == [{"id": 3}, {"id": 1}, {"id": 4}, {"id": 2}]


async def test_query_range_inclusive():
    source = MemorySource({"repos": _rows()})
    rows = await source.query("repos", "id", "id", True, 1, 2)
    assert rows == [{"id": 2}, {"id": 3}]


async def test_query_capped():
    source = MemorySource({"repos": _rows()}, max_rows=3)
    rows = await source.query("repos", "id", "id", True, 0, 99)
    assert len(rows) == 3


async def test_query_past_end():
    source = MemorySource({"repos": _rows()})
    assert await source.query("repos", "*", "id", True, 10, 20) == []


async def test_query_returns_copies():
    source = MemorySource({"repos": _rows()})
    rows = await source.query("repos", "*", "id", True, 0, 0)
    rows[0]["name"] = "changed"
    rows = await source.query("repos", "*", "id", True, 0, 0)
    assert rows[0]["name"] == "a"


async def test_insert_and_clear():
    source = MemorySource()
    source.insert("issues", {"id": 1}, {"id": 2})
    assert len(await source.query("issues", "*", "id", True, 0, 9)) == 2
    source.clear()
    with pytest.raises(RetrievalError):
        await source.query("issues", "*", "id", True, 0, 9)


async def test_invalid_projection():
    source = MemorySource({"repos": _rows()})
    with pytest.raises(RetrievalError):
        await source.query("repos", "id; DROP TABLE repos", "id", True, 0, 9)


async def test_unorderable_column():
    source = MemorySource({"repos": [{"id": 1, "v": "a"}, {"id": 2, "v": 3}]})
    with pytest.raises(RetrievalError):
        await source.query("repos", "*", "v", True, 0, 9)
