"""
Visibility policies and view mode detection.

A visibility policy decides which matching items of a collection are displayed. Each policy
owns a cursor, which is reset to its initial value whenever the filters change:

  • ProgressiveReveal: displays the first `limit` matches; the limit starts at one page size
    and grows by one page size each time the user asks to see more
  • NumberedPage: displays one page of matches; the cursor is the 1-based page number
  • Hidden: displays nothing

The policy of each collection is chosen once, from the view mode of the current
navigational context.
"""

from __future__ import annotations

import enum
import logging

from issuefinder.model import ItemType
from issuefinder.pagination import PageControl, clamp_page, page_controls, page_slice, total_pages
from issuefinder.validation import MinValue, validate_arguments
from typing import Annotated


_logger = logging.getLogger(__name__)


PAGE_SIZE = 10


class ViewMode(enum.Enum):
    """Navigational context in which the catalog is displayed."""

    DASHBOARD = "dashboard"
    REPOSITORIES = "repositories"
    ISSUES = "issues"
    OTHER = "other"


def detect_view_mode(path: str) -> ViewMode:
    """Return the view mode for a navigation path."""
    if path in {"/", "/index.html"}:
        return ViewMode.DASHBOARD
    if "/repositories" in path:
        return ViewMode.REPOSITORIES
    if "/issues" in path:
        return ViewMode.ISSUES
    return ViewMode.OTHER


class VisibilityPolicy:
    """Base class for visibility policies."""

    def reset(self) -> None:
        """Reset the cursor to its initial value."""

    def window(self, matches: int) -> slice:
        """Return the slice of matches to display."""
        raise NotImplementedError

    def show_more(self, matches: int) -> bool:
        """Return if more matches can be revealed."""
        return False

    def controls(self, matches: int) -> tuple[PageControl, ...]:
        """Return pagination controls for the matches."""
        return ()


class Hidden(VisibilityPolicy):
    """Policy that displays no items."""

    def window(self, matches: int) -> slice:
        return slice(0, 0)

    def __repr__(self):
        return "Hidden()"


class ProgressiveReveal(VisibilityPolicy):
    """
    Policy that displays a growing prefix of matches.

    Parameters:
    • page_size: initial limit, and increment of each reveal
    """

    @validate_arguments
    def __init__(self, page_size: Annotated[int, MinValue(1)] = PAGE_SIZE):
        self.page_size = page_size
        self.limit = page_size

    def __repr__(self):
        return f"ProgressiveReveal(limit={self.limit}, page_size={self.page_size})"

    def reset(self) -> None:
        self.limit = self.page_size

    def reveal_more(self) -> None:
        """Raise the limit by one page size."""
        self.limit += self.page_size
        _logger.debug("reveal limit raised to %d", self.limit)

    def window(self, matches: int) -> slice:
        return slice(0, self.limit)

    def show_more(self, matches: int) -> bool:
        return matches > self.limit


class NumberedPage(VisibilityPolicy):
    """
    Policy that displays one numbered page of matches.

    Parameters:
    • page_size: number of matches per page
    """

    @validate_arguments
    def __init__(self, page_size: Annotated[int, MinValue(1)] = PAGE_SIZE):
        self.page_size = page_size
        self.page = 1

    def __repr__(self):
        return f"NumberedPage(page={self.page}, page_size={self.page_size})"

    def reset(self) -> None:
        self.page = 1

    def select(self, page: int, matches: int) -> int:
        """Select a page, constrained to the existing pages. Returns the selected page."""
        self.page = clamp_page(page, max(1, total_pages(matches, self.page_size)))
        _logger.debug("page %d selected", self.page)
        return self.page

    def window(self, matches: int) -> slice:
        return page_slice(self.page, self.page_size)

    def controls(self, matches: int) -> tuple[PageControl, ...]:
        return page_controls(matches, self.page, self.page_size)


_POLICIES = {
    ViewMode.DASHBOARD: {ItemType.REPOSITORY: ProgressiveReveal, ItemType.ISSUE: ProgressiveReveal},
    ViewMode.REPOSITORIES: {ItemType.REPOSITORY: NumberedPage},
    ViewMode.ISSUES: {ItemType.ISSUE: NumberedPage},
}


def policy_for(mode: ViewMode, collection: ItemType, page_size: int = PAGE_SIZE) -> VisibilityPolicy:
    """Return the visibility policy of a collection in a view mode."""
    policy_class = _POLICIES.get(mode, {}).get(collection)
    if policy_class is None:
        return Hidden()
    return policy_class(page_size)
