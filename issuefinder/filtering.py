"""Pure predicate evaluation of filter state against catalog items."""

from collections.abc import Iterable
from issuefinder.model import ALL, FilterState, Item, ItemType


def matches_search(item: Item, search: str) -> bool:
    """
    Return if an item matches search text.

    The search is a case-insensitive substring test against the item name and, for issues,
    against the owning repository name. Empty search text matches every item.
    """
    search = search.strip().lower()
    if not search:
        return True
    if search in item.name.lower():
        return True
    return item.type is ItemType.ISSUE and search in item.repo.lower()


def matches_facet(value: str, selected: str) -> bool:
    """Return if a facet value satisfies the selected facet value."""
    return selected == ALL or value == selected


def matches(item: Item, state: FilterState) -> bool:
    """
    Return if an item satisfies all filters of a filter state.

    Repositories are only constrained by a difficulty filter when they carry a difficulty of
    their own.
    """
    if not matches_search(item, state.search):
        return False
    if not matches_facet(item.language, state.language):
        return False
    if item.type is ItemType.REPOSITORY and not item.difficulty:
        return True
    return matches_facet(item.difficulty, state.difficulty)


def match_indices(items: Iterable[Item], state: FilterState) -> list[int]:
    """Return the positions of matching items, in collection order."""
    return [index for index, item in enumerate(items) if matches(item, state)]
