from __future__ import annotations

import enum
from datetime import date

from .viewport import ScrollDirection, Viewport


class NavigationCommand(enum.Enum):
    """Discrete timeline commands; the key mapping lives in the app."""

    SCROLL_LEFT = "scroll_left"
    SCROLL_RIGHT = "scroll_right"
    SCROLL_LEFT_FAST = "scroll_left_fast"
    SCROLL_RIGHT_FAST = "scroll_right_fast"
    ZOOM_IN = "zoom_in"
    ZOOM_OUT = "zoom_out"
    SELECT_NEXT = "select_next"
    SELECT_PREVIOUS = "select_previous"
    CENTER_ON_TODAY = "center_on_today"
    JUMP_TO_START = "jump_to_start"


def apply_command(
    viewport: Viewport,
    command: NavigationCommand,
    total: int,
    today: date,
    width: int | None = None,
) -> Viewport:
    """Apply one command in place; `width` defaults to the viewport's last known width."""

    if width is not None:
        viewport.resize(width)

    fast = viewport.config.fast_scroll_multiplier
    if command is NavigationCommand.SCROLL_LEFT:
        return viewport.scroll(1, ScrollDirection.LEFT)
    if command is NavigationCommand.SCROLL_RIGHT:
        return viewport.scroll(1, ScrollDirection.RIGHT)
    if command is NavigationCommand.SCROLL_LEFT_FAST:
        return viewport.scroll(fast, ScrollDirection.LEFT)
    if command is NavigationCommand.SCROLL_RIGHT_FAST:
        return viewport.scroll(fast, ScrollDirection.RIGHT)
    if command is NavigationCommand.ZOOM_IN:
        return viewport.zoom_in()
    if command is NavigationCommand.ZOOM_OUT:
        return viewport.zoom_out()
    if command is NavigationCommand.SELECT_NEXT:
        return viewport.select_next(total)
    if command is NavigationCommand.SELECT_PREVIOUS:
        return viewport.select_previous(total)
    if command is NavigationCommand.CENTER_ON_TODAY:
        return viewport.center_on_today(today)
    if command is NavigationCommand.JUMP_TO_START:
        return viewport.jump_to_start()

    # Unreachable with current NavigationCommand members.
    raise TypeError(f"Unsupported navigation command: {command!r}")
