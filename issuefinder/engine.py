"""
Filter and pagination engine.

The engine holds two collections of catalog items (repositories and issues), the current
filter state and one visibility policy per collection. Every user interaction (search text
edited, facet selected, page selected, more items revealed) updates that state and renders
the result: which items are visible, how many items match, whether each collection shows its
empty state or its reveal-more affordance, and the pagination control.

Evaluation is pure (see `window_collection`); the render step hands the resulting `Rendering`
to an optional view, which is responsible for presenting it.
"""

from __future__ import annotations

import logging

from collections.abc import Sequence
from dataclasses import dataclass
from issuefinder.busy import DELAY, Control, busy
from issuefinder.filtering import match_indices
from issuefinder.model import FilterState, Item, ItemType
from issuefinder.pagination import PageControl
from issuefinder.policy import (
    PAGE_SIZE,
    NumberedPage,
    ProgressiveReveal,
    ViewMode,
    VisibilityPolicy,
    policy_for,
)
from typing import Protocol


_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CollectionRendering:
    """
    Rendered state of a collection.

    Attributes:
    • visible: visibility of each item, in collection order
    • count: number of matching items
    • empty: empty state is displayed
    • show_more: reveal-more affordance is displayed
    """

    visible: tuple[bool, ...]
    count: int
    empty: bool
    show_more: bool

    @property
    def visible_count(self) -> int:
        return sum(self.visible)


@dataclass(frozen=True)
class Rendering:
    """
    Rendered state of the catalog.

    Attributes:
    • repositories: rendered repository collection
    • issues: rendered issue collection
    • pagination: pagination controls; empty if no control is displayed
    • scroll_to_origin: view should scroll back to its origin
    """

    repositories: CollectionRendering
    issues: CollectionRendering
    pagination: tuple[PageControl, ...] = ()
    scroll_to_origin: bool = False

    def __getitem__(self, collection: ItemType) -> CollectionRendering:
        return self.repositories if collection is ItemType.REPOSITORY else self.issues


class View(Protocol):
    """Presents renderings of the catalog."""

    def render(self, rendering: Rendering) -> None: ...


def window_collection(
    items: Sequence[Item],
    state: FilterState,
    policy: VisibilityPolicy,
) -> CollectionRendering:
    """Evaluate filters and a visibility policy against a collection of items."""
    indices = match_indices(items, state)
    visible = [False] * len(items)
    for index in indices[policy.window(len(indices))]:
        visible[index] = True
    return CollectionRendering(
        visible=tuple(visible),
        count=len(indices),
        empty=not indices and bool(items),
        show_more=policy.show_more(len(indices)),
    )


class FilterPaginationEngine:
    """
    Keeps item visibility consistent with filters and pagination cursors.

    Parameters:
    • repositories: repository items, in display order
    • issues: issue items, in display order
    • mode: view mode that selects the visibility policy of each collection
    • page_size: number of items per page, and per reveal
    • view: view to present each rendering; None to only return renderings

    Any change to the filter state resets the cursors of both collections.
    """

    def __init__(
        self,
        repositories: Sequence[Item],
        issues: Sequence[Item],
        mode: ViewMode,
        page_size: int = PAGE_SIZE,
        view: View | None = None,
    ):
        self.items = {
            ItemType.REPOSITORY: tuple(repositories),
            ItemType.ISSUE: tuple(issues),
        }
        self.mode = mode
        self.view = view
        self.policies: dict[ItemType, VisibilityPolicy] = {
            collection: policy_for(mode, collection, page_size) for collection in ItemType
        }
        self._state = FilterState()

    def __repr__(self):
        return f"FilterPaginationEngine(mode={self.mode}, state={self._state}, policies={self.policies})"

    @property
    def state(self) -> FilterState:
        return self._state

    def reset_cursors(self) -> None:
        """Reset the cursor of every collection to its initial value."""
        for policy in self.policies.values():
            policy.reset()

    def apply_filters(self, scroll_to_origin: bool = False) -> Rendering:
        """Evaluate filters and policies against both collections, and render the result."""
        collections = {
            collection: window_collection(self.items[collection], self._state, policy)
            for collection, policy in self.policies.items()
        }
        pagination = ()
        if numbered := self._numbered():
            collection, policy = numbered
            pagination = policy.controls(collections[collection].count)
        rendering = Rendering(
            repositories=collections[ItemType.REPOSITORY],
            issues=collections[ItemType.ISSUE],
            pagination=pagination,
            scroll_to_origin=scroll_to_origin,
        )
        _logger.debug(
            "%s: %d repositories, %d issues match",
            self._state,
            rendering.repositories.count,
            rendering.issues.count,
        )
        if self.view is not None:
            self.view.render(rendering)
        return rendering

    def set_filters(self, state: FilterState) -> Rendering:
        """Replace the filter state, reset cursors and render."""
        self._state = state
        self.reset_cursors()
        return self.apply_filters()

    def set_search(self, search: str) -> Rendering:
        """Replace the search text."""
        return self.set_filters(self._state.replace(search=search))

    def set_language(self, language: str) -> Rendering:
        """Select a language facet value."""
        return self.set_filters(self._state.replace(language=language))

    def set_difficulty(self, difficulty: str) -> Rendering:
        """Select a difficulty facet value."""
        return self.set_filters(self._state.replace(difficulty=difficulty))

    def reveal_more(self, collection: ItemType) -> Rendering:
        """
        Reveal one more page of a collection and render. Has no effect on the cursor of a
        collection that is not progressively revealed.
        """
        policy = self.policies[collection]
        if isinstance(policy, ProgressiveReveal):
            policy.reveal_more()
        else:
            _logger.debug("%s collection is not progressively revealed", collection.value)
        return self.apply_filters()

    async def reveal_more_with_feedback(
        self,
        collection: ItemType,
        control: Control | None = None,
        delay: float = DELAY,
    ) -> Rendering:
        """Reveal more of a collection after displaying a busy state on the triggering control."""
        await busy(control, delay)
        return self.reveal_more(collection)

    def select_page(self, page: int) -> Rendering:
        """Select a page of the numbered collection, render and scroll to origin."""
        if not (numbered := self._numbered()):
            _logger.debug("no collection is paginated in %s view", self.mode.value)
            return self.apply_filters()
        collection, policy = numbered
        policy.select(page, len(match_indices(self.items[collection], self._state)))
        return self.apply_filters(scroll_to_origin=True)

    def _numbered(self) -> tuple[ItemType, NumberedPage] | None:
        for collection, policy in self.policies.items():
            if isinstance(policy, NumberedPage):
                return collection, policy
        return None
