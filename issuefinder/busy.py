"""
Minimum-duration busy indicator for a triggering control.

While busy, a control is disabled and its label replaced with a spinner. The indicator has no
data dependency: awaiting it only delays the work that follows, giving the user feedback that
their activation was received.
"""

import asyncio
import logging

from typing import Protocol


_logger = logging.getLogger(__name__)


SPINNER = "⟳"
DELAY = 0.4  # seconds


class Control(Protocol):
    """A user interface control that can display a busy state."""

    label: str
    disabled: bool


async def busy(control: Control | None, delay: float = DELAY) -> None:
    """
    Display a busy state on a control for a minimum duration.

    Parameters:
    • control: control that triggered the work; None to display no busy state
    • delay: seconds to display the busy state

    The control's label and enabled state are restored once the delay has elapsed, or if it is
    cancelled.
    """
    if control is None:
        return
    label = control.label
    disabled = control.disabled
    control.disabled = True
    control.label = SPINNER
    _logger.debug("control busy for %.3fs", delay)
    try:
        await asyncio.sleep(delay)
    finally:
        control.label = label
        control.disabled = disabled
