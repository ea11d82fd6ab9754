"""View protocols: the pluggable behaviour hosted inside a buffer.

A view paints itself through its buffer (``self.buffer.write(...)``), reacts
to keys, and is told about focus changes, resizes, and its own destruction.
Modal views additionally report when they are finished and what they
produced.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from mux.screen.buffer import Buffer


# ---------------------------------------------------------------------------
# Protocols
# ---------------------------------------------------------------------------


@runtime_checkable
class View(Protocol):
    """A drawable, focusable, input-consuming unit hosted by a buffer."""

    name: str
    buffer: Buffer | None

    @property
    def status(self) -> str: ...

    def draw(self) -> None: ...

    def resize(self, rows: int, cols: int) -> None: ...

    def focus(self) -> None: ...

    def blur(self) -> None: ...

    def handle_input(self, key: str) -> bool | None: ...

    def cleanup(self) -> None: ...

    def killable(self) -> bool: ...


@runtime_checkable
class ModalView(View, Protocol):
    """A view driven by :meth:`ScreenManager.spawn_modal` until it is done."""

    def done(self) -> bool: ...

    def value(self) -> Any: ...


def is_modal(view: object) -> bool:
    """Return ``True`` if *view* implements ``done`` and ``value``."""
    return callable(getattr(view, "done", None)) and callable(
        getattr(view, "value", None)
    )


# ---------------------------------------------------------------------------
# BaseView
# ---------------------------------------------------------------------------


class BaseView:
    """No-op implementation of every :class:`View` hook.

    Subclasses set ``name`` and override what they need; ``draw`` paints
    nothing, ``handle_input`` ignores keys and every view is killable.
    """

    name = "view"

    def __init__(self) -> None:
        self.buffer: Buffer | None = None

    @property
    def status(self) -> str:
        return ""

    def draw(self) -> None:
        pass

    def resize(self, rows: int, cols: int) -> None:
        pass

    def focus(self) -> None:
        pass

    def blur(self) -> None:
        pass

    def handle_input(self, key: str) -> bool | None:
        return None

    def cleanup(self) -> None:
        pass

    def killable(self) -> bool:
        return True
