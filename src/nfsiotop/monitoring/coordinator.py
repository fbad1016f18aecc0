"""
Monitoring control loop.

This module provides the MonitorCoordinator that drives the window state
machine: tracer lines are decoded by the parser, samples go to the
aggregator, and each window-end marker hands an immutable WindowTotals
snapshot to the frame presenter for ranking and rendering.

Rendering either happens inline on the reading thread (default) or on a
RenderThread fed through a bounded FIFO queue, which keeps a slow terminal
from back-pressuring the tracer pipe while preserving window order.
"""

import logging
import queue
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from ..collectors.base import AbstractEventSource
from ..models.events import InfoMessage, Sample, StreamEvent, WindowEnd, WindowReset
from ..models.window import WindowTotals
from ..system.terminal import TerminalGeometry, get_terminal_geometry
from ..validation import ErrorSeverity, handle_error
from .aggregator import CredentialAggregator
from .names import NameResolver
from .parser import EventStreamParser
from .ranking import rank_window
from .renderer import Renderer

logger = logging.getLogger(__name__)


class MonitorState(Enum):
    """Window lifecycle states."""
    AWAITING_DATA = "awaiting_data"
    ACCUMULATING = "accumulating"
    RENDERING = "rendering"


class RenderKind(Enum):
    HEADER = "header"
    INFO = "info"
    WINDOW = "window"


@dataclass(frozen=True)
class RenderCommand:
    """Immutable unit of work passed from the reading loop to the presenter."""

    kind: RenderKind
    totals: Optional[WindowTotals] = None
    text: str = ""


class FramePresenter:
    """
    Ranks window snapshots and draws them, sampling terminal geometry per frame.
    """

    def __init__(
        self,
        renderer: Renderer,
        resolver: NameResolver,
        interval_seconds: float,
        group_view: bool = False,
        geometry_provider: Callable[[], TerminalGeometry] = get_terminal_geometry,
    ):
        self.renderer = renderer
        self.resolver = resolver
        self.interval_seconds = interval_seconds
        self.group_view = group_view
        self.geometry_provider = geometry_provider

    def label_for(self, credential: int) -> str:
        return self.resolver.resolve(credential, self.group_view)

    def present(self, command: RenderCommand) -> None:
        if command.kind is RenderKind.HEADER:
            self.renderer.draw_header(self.geometry_provider().columns)
        elif command.kind is RenderKind.INFO:
            self.renderer.draw_info(command.text)
        elif command.kind is RenderKind.WINDOW:
            geometry = self.geometry_provider()
            ranked = rank_window(
                command.totals,
                self.interval_seconds,
                geometry.rows,
                label_for=self.label_for,
            )
            self.renderer.draw_window(ranked, geometry.columns)

    def close(self) -> None:
        self.renderer.finish()


class RenderThread:
    """
    Background presenter fed by a bounded queue.

    submit() blocks while the queue is full, so windows are never dropped or
    reordered. A failure on the render thread is re-raised to the producer
    on its next submit() or on close().
    """

    _STOP = object()

    def __init__(self, presenter: FramePresenter, queue_size: int = 4):
        self.presenter = presenter
        self._queue: "queue.Queue[object]" = queue.Queue(maxsize=queue_size)
        self._error: Optional[BaseException] = None
        self._thread = threading.Thread(target=self._run, name="RenderWorker", daemon=True)

    def start(self) -> None:
        self._thread.start()
        logger.debug(f"Render thread started (queue size {self._queue.maxsize})")

    def submit(self, command: RenderCommand) -> None:
        self._raise_pending_error()
        self._queue.put(command)

    def close(self) -> None:
        """Drain pending frames, stop the thread and close the presenter."""
        if self._thread.is_alive():
            self._queue.put(self._STOP)
            self._thread.join()
        self._raise_pending_error()

    def _run(self) -> None:
        try:
            while True:
                command = self._queue.get()
                if command is self._STOP:
                    break
                self.presenter.present(command)
        except Exception as e:
            self._error = e
            logger.error(f"Render thread failed: {type(e).__name__}: {e}", exc_info=True)
            # Keep consuming so the producer never blocks on a dead consumer.
            while self._queue.get() is not self._STOP:
                pass
        finally:
            self.presenter.close()

    def _raise_pending_error(self) -> None:
        if self._error is not None:
            error, self._error = self._error, None
            raise error


class MonitorCoordinator:
    """
    Drives one monitor run from the first tracer line to end of stream.

    Attributes:
        state: Current MonitorState.
        windows_rendered: Number of completed windows handed to the presenter.
    """

    def __init__(
        self,
        source: AbstractEventSource,
        presenter: FramePresenter,
        aggregator: Optional[CredentialAggregator] = None,
        parser: Optional[EventStreamParser] = None,
        render_thread: bool = False,
        render_queue_size: int = 4,
    ):
        self.source = source
        self.presenter = presenter
        self.aggregator = aggregator or CredentialAggregator(group_view=presenter.group_view)
        self.parser = parser or EventStreamParser()
        self.state = MonitorState.AWAITING_DATA
        self.windows_rendered = 0
        self._render_thread = (
            RenderThread(presenter, render_queue_size) if render_thread else None
        )

    def _submit(self, command: RenderCommand) -> None:
        if self._render_thread is not None:
            self._render_thread.submit(command)
        else:
            self.presenter.present(command)

    def handle_event(self, event: StreamEvent) -> None:
        """Apply one decoded event to the window state machine."""
        if isinstance(event, Sample):
            self.aggregator.observe_sample(event)
            self.state = MonitorState.ACCUMULATING
        elif isinstance(event, WindowReset):
            # Redraw only; samples already observed stay in the current window.
            self._submit(RenderCommand(RenderKind.HEADER))
        elif isinstance(event, InfoMessage):
            logger.info(f"Tracer: {event.text}")
            self._submit(RenderCommand(RenderKind.INFO, text=event.text))
        elif isinstance(event, WindowEnd):
            self.state = MonitorState.RENDERING
            self._submit(RenderCommand(RenderKind.WINDOW, totals=self.aggregator.flush()))
            self.windows_rendered += 1
            self.state = MonitorState.ACCUMULATING

    def run(self) -> int:
        """
        Consume the event source until it ends.

        Returns:
            Number of windows rendered.

        Raises:
            TracerError: If the tracer fails.
            KeyboardInterrupt: On interrupt; resources are released first.
        """
        if self._render_thread is not None:
            self._render_thread.start()

        try:
            for event in self.parser.parse(self.source.read_lines()):
                self.handle_event(event)
        except Exception as e:
            handle_error(
                error=e,
                context="reading tracer events",
                severity=ErrorSeverity.ERROR,
                reraise=True,
                logger=logger,
            )
        finally:
            self._shutdown()

        logger.info(
            f"Event stream ended after {self.windows_rendered} windows "
            f"({self.parser.lines_skipped} of {self.parser.lines_seen} lines skipped)"
        )
        return self.windows_rendered

    def _shutdown(self) -> None:
        if self._render_thread is not None:
            self._render_thread.close()
        else:
            self.presenter.close()
