"""Bridge between the editor and the external chart rendering library.

The rendering library is only ever used through three operations:
`library.create(target, config)` plus `handle.update()` and `handle.dispose()`.
The default library (`ChartJsLibrary`) produces the Chart.js payload the
editor template hands to Chart.js in the browser.

The library itself is loaded lazily, once per process, from the dotted path in
`settings.CHART_BUILDER_RENDERER`. Loading is single-flight: the first caller
imports it and every later caller reuses the result, including a failure.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Collection
from dataclasses import dataclass, field
from typing import Any, Protocol

from django.conf import settings
from django.utils.module_loading import import_string

from charting.chartjs import ChartJsConfig, build_chartjs_config
from charting.model import ChartModel

logger = logging.getLogger(__name__)

DEFAULT_RENDERER = "editor.rendering.ChartJsLibrary"


class LibraryLoadError(RuntimeError):
    """Raised when the rendering library cannot be loaded."""


class ChartHandle(Protocol):
    """A live chart created by the rendering library."""

    def update(self) -> None: ...

    def dispose(self) -> None: ...


class RenderingLibrary(Protocol):
    """Factory for live charts."""

    def create(self, target: str, config: ChartModel) -> ChartHandle: ...


@dataclass(slots=True)
class ChartJsHandle:
    """A Chart.js chart bound to one canvas id.

    Like a browser Chart.js instance, the handle keeps a reference to the live
    configuration and only picks up edits to it when `update()` is called.
    `payload` is what the page passes to `new Chart(canvas, payload)`.
    """

    target: str
    config: ChartModel
    payload: ChartJsConfig = field(init=False)
    version: int = 0
    disposed: bool = False

    def __post_init__(self) -> None:
        self.payload = build_chartjs_config(self.config)

    def update(self) -> None:
        if self.disposed:
            raise RuntimeError(f"Chart on {self.target!r} was already disposed.")
        self.payload = build_chartjs_config(self.config)
        self.version += 1

    def dispose(self) -> None:
        self.disposed = True


class ChartJsLibrary:
    """Rendering library producing Chart.js payloads for the editor template."""

    def create(self, target: str, config: ChartModel) -> ChartJsHandle:
        return ChartJsHandle(target=target, config=config)


@dataclass(slots=True)
class _LibraryState:
    lock: threading.Lock = field(default_factory=threading.Lock)
    library: Any = None
    error: LibraryLoadError | None = None


_STATE = _LibraryState()


def load_library() -> RenderingLibrary:
    """Return the process-wide rendering library, loading it on first use.

    Raises:
        LibraryLoadError: When the configured library cannot be imported or
            instantiated. The failure is remembered and re-raised on later calls.
    """

    if _STATE.library is not None:
        return _STATE.library
    with _STATE.lock:
        if _STATE.library is not None:
            return _STATE.library
        if _STATE.error is not None:
            raise _STATE.error
        dotted_path = getattr(settings, "CHART_BUILDER_RENDERER", DEFAULT_RENDERER)
        try:
            library = import_string(dotted_path)()
        except Exception as exc:
            logger.error("Failed to load chart rendering library %s: %s", dotted_path, exc)
            _STATE.error = LibraryLoadError(f"Failed to load chart rendering library {dotted_path!r}.")
            raise _STATE.error from exc
        _STATE.library = library
        logger.info("Loaded chart rendering library %s", dotted_path)
        return library


def reset_library() -> None:
    """Forget the loaded library (used when settings change, e.g. in tests)."""

    with _STATE.lock:
        _STATE.library = None
        _STATE.error = None


class RenderBridge:
    """Owns the single live chart of one editor instance."""

    def __init__(self, library: RenderingLibrary) -> None:
        self.library = library
        self.handle: ChartHandle | None = None

    def render(self, target: str, model: ChartModel, *, available_targets: Collection[str]) -> ChartHandle | None:
        """Draw `model` on `target`, replacing any previous chart.

        Args:
            target: Surface id to draw on.
            model: Model to draw.
            available_targets: Surfaces that currently exist.

        Returns:
            The new chart handle, or None when `target` does not exist yet.
        """

        if target not in available_targets:
            logger.debug("Render target %s is not available; skipping render.", target)
            return None
        self.dispose()
        self.handle = self.library.create(target, model)
        return self.handle

    def update(self) -> bool:
        """Push a live update to the current chart, if there is one."""

        if self.handle is None:
            return False
        self.handle.update()
        return True

    def dispose(self) -> None:
        """Release the current chart, if any."""

        if self.handle is not None:
            self.handle.dispose()
            self.handle = None
