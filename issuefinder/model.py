"""
Catalog item and filter state types.

Items are built from annotations: simple string attributes attached to each displayed card.
Recognized annotations (an optional "data-" prefix on names is ignored):

  • type: item type discriminator, "repository" (or "repo") or "issue"
  • name: repository name
  • title: issue title
  • repo: owning repository name (issues)
  • lang: language facet
  • difficulty: difficulty facet

A missing or non-string annotation reads as an empty string.
"""

from __future__ import annotations

import dataclasses
import enum
import logging

from collections.abc import Mapping
from dataclasses import dataclass
from issuefinder.error import AnnotationMissing
from typing import Any


_logger = logging.getLogger(__name__)


ALL = "all"  # facet sentinel: no constraint


class ItemType(enum.Enum):
    """Type of catalog item."""

    REPOSITORY = "repository"
    ISSUE = "issue"

    @classmethod
    def parse(cls, value: str) -> ItemType | None:
        """Return the item type for a type discriminator, or None if not recognized."""
        value = value.strip().lower()
        if value == "repo":
            return cls.REPOSITORY
        try:
            return cls(value)
        except ValueError:
            return None


def annotation(annotations: Mapping[str, Any], name: str) -> str:
    """
    Return the value of a named annotation.

    Raises AnnotationMissing if the annotation is absent or its value is not a string.
    """
    for key in (name, f"data-{name}"):
        value = annotations.get(key)
        if value is not None:
            if not isinstance(value, str):
                raise AnnotationMissing(name)
            return value
    raise AnnotationMissing(name)


def _read(annotations: Mapping[str, Any], name: str) -> str:
    try:
        return annotation(annotations, name)
    except AnnotationMissing as am:
        _logger.debug("%s; reading as empty", am)
        return ""


@dataclass(frozen=True)
class Item:
    """
    A displayable catalog item.

    Attributes:
    • type: repository or issue
    • name: repository name or issue title
    • repo: owning repository name (issues only)
    • language: language facet
    • difficulty: difficulty facet
    """

    type: ItemType | None
    name: str = ""
    repo: str = ""
    language: str = ""
    difficulty: str = ""

    @classmethod
    def from_annotations(cls, annotations: Mapping[str, Any]) -> Item:
        """Build an item from its annotations, tolerating missing ones."""
        type = ItemType.parse(_read(annotations, "type"))
        if type is ItemType.ISSUE:
            name = _read(annotations, "title")
            repo = _read(annotations, "repo")
        else:
            name = _read(annotations, "name")
            repo = ""
        return cls(
            type=type,
            name=name,
            repo=repo,
            language=_read(annotations, "lang"),
            difficulty=_read(annotations, "difficulty"),
        )


@dataclass(frozen=True)
class FilterState:
    """
    Search and facet filters selected by the user.

    Attributes:
    • search: search text; empty to match all items
    • language: language facet value, or "all"
    • difficulty: difficulty facet value, or "all"
    """

    search: str = ""
    language: str = ALL
    difficulty: str = ALL

    def replace(self, **changes) -> FilterState:
        """Return a new filter state with the specified fields replaced."""
        return dataclasses.replace(self, **changes)
