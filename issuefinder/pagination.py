"""
Module to support numbered pagination of matching items.

Matching items are divided into pages of a fixed size. Pages are numbered from 1; page n
holds the items in the half-open slice [(n-1) * page_size, n * page_size) of the matches.

A pagination control lets the user move between pages. It is a sequence of controls:

  • a "previous" control, disabled on the first page
  • the first page, followed by an ellipsis if the window leaves a gap to it
  • a window of up to five page numbers around the current page
  • the last page, preceded by an ellipsis if the window leaves a gap to it
  • a "next" control, disabled on the last page

No control is generated when all matches fit on a single page.
"""

import enum
import math

from dataclasses import dataclass
from issuefinder.validation import MinValue, validate_arguments
from typing import Annotated


WINDOW = 2  # page numbers shown on each side of the current page


class ControlKind(enum.Enum):
    PREVIOUS = "previous"
    PAGE = "page"
    ELLIPSIS = "ellipsis"
    NEXT = "next"


@dataclass(frozen=True)
class PageControl:
    """
    An element of a pagination control.

    Attributes:
    • kind: type of control
    • label: text to display
    • page: page number selected by the control; None for an ellipsis
    • active: control represents the current page
    • disabled: control cannot be selected
    """

    kind: ControlKind
    label: str
    page: int | None = None
    active: bool = False
    disabled: bool = False


@validate_arguments
def total_pages(total: Annotated[int, MinValue(0)], page_size: Annotated[int, MinValue(1)]) -> int:
    """Return the number of pages needed to hold a number of items."""
    return math.ceil(total / page_size)


def page_slice(page: int, page_size: int) -> slice:
    """Return the slice of matches displayed on a 1-based page."""
    return slice((page - 1) * page_size, page * page_size)


def clamp_page(page: int, pages: int) -> int:
    """Return a page number constrained to the range of existing pages."""
    return max(1, min(page, pages))


def page_window(page: int, pages: int) -> range:
    """
    Return the page numbers displayed around the current page.

    The window spans two pages on each side of the current page, clipped to existing pages.
    Near either edge the window widens to keep five page numbers visible when that many pages
    exist.
    """
    start = max(1, page - WINDOW)
    end = min(pages, page + WINDOW)
    if page <= WINDOW + 1:
        end = min(pages, 2 * WINDOW + 1)
    if page >= pages - WINDOW:
        start = max(1, pages - 2 * WINDOW)
    return range(start, end + 1)


def page_controls(total: int, page: int, page_size: int) -> tuple[PageControl, ...]:
    """
    Generate pagination controls.

    Parameters:
    • total: number of matching items
    • page: current page number
    • page_size: number of items per page

    Returns an empty tuple if the matches fit on a single page.
    """

    pages = total_pages(total, page_size)
    if pages <= 1:
        return ()
    page = clamp_page(page, pages)
    window = page_window(page, pages)
    controls = [
        PageControl(ControlKind.PREVIOUS, "« Prev", page - 1, disabled=page == 1),
    ]
    if window.start > 1:
        controls.append(PageControl(ControlKind.PAGE, "1", 1))
        if window.start > 2:
            controls.append(PageControl(ControlKind.ELLIPSIS, "..."))
    for number in window:
        controls.append(PageControl(ControlKind.PAGE, str(number), number, active=number == page))
    if window.stop - 1 < pages:
        if window.stop - 1 < pages - 1:
            controls.append(PageControl(ControlKind.ELLIPSIS, "..."))
        controls.append(PageControl(ControlKind.PAGE, str(pages), pages))
    controls.append(PageControl(ControlKind.NEXT, "Next »", page + 1, disabled=page == pages))
    return tuple(controls)
