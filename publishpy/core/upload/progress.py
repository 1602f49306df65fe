"""
Upload progress monitoring.

ProgressMonitor samples a set of chunk tasks and produces ProgressEvents;
renderers turn those events into output. The monitor never awaits task
results, never cancels tasks and never sees their exceptions.
"""
import asyncio
import sys
from typing import AsyncIterator, Callable, Optional, Sequence, TextIO

from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn, MofNCompleteColumn

from .models import ProgressEvent
from .protocols import ProgressRenderer
from ..logging import get_logger

SPINNER_FRAMES = ('|', '/', '-', '\\', '|', '/', '-', '\\')

logger = get_logger('publishpy.upload.progress')


class ProgressMonitor:
    """
    Observes chunk upload tasks until all of them are done.

    Example:
        >>> monitor = ProgressMonitor(tasks, interval=0.2)
        >>> async for event in monitor.events():
        ...     print(f"{event.completed}/{event.total}")
    """

    DEFAULT_INTERVAL = 0.2

    def __init__(self, tasks: Sequence[asyncio.Future], interval: float = DEFAULT_INTERVAL):
        """
        Initialize progress monitor.

        Args:
            tasks: Futures to observe
            interval: Sampling interval in seconds
        """
        if interval <= 0:
            raise ValueError("Interval must be positive")
        self._tasks = list(tasks)
        self._interval = interval

    @property
    def total(self) -> int:
        return len(self._tasks)

    def completed(self) -> int:
        """Returns how many observed tasks are done (failed ones included)."""
        return sum(1 for task in self._tasks if task.done())

    async def events(self) -> AsyncIterator[ProgressEvent]:
        """
        Yield a progress sample every interval until every task is done.

        The last event always has completed == total. With no tasks a single
        (0, 0) event is produced.
        """
        total = self.total
        tick = 0
        while True:
            completed = self.completed()
            yield ProgressEvent(completed=completed, total=total, tick=tick)
            if completed >= total:
                return
            tick += 1
            pending = [task for task in self._tasks if not task.done()]
            # Returns early once the last pending task finishes
            await asyncio.wait(pending, timeout=self._interval)

    async def run(self, renderer: Optional[ProgressRenderer] = None) -> ProgressEvent:
        """
        Feed events to a renderer until all tasks are done.

        Args:
            renderer: Progress renderer (events are discarded if None)

        Returns:
            The final event
        """
        renderer = renderer or NullProgressRenderer()
        renderer.start(self.total)
        last = ProgressEvent(completed=0, total=self.total)
        try:
            async for event in self.events():
                renderer.update(event)
                last = event
        finally:
            renderer.finish(last)
        logger.debug(f"Progress complete: {last.completed}/{last.total}")
        return last


class NullProgressRenderer:
    """Discards progress events."""

    def start(self, total: int) -> None:
        pass

    def update(self, event: ProgressEvent) -> None:
        pass

    def finish(self, event: ProgressEvent) -> None:
        pass


class CallbackProgressRenderer:
    """Forwards every progress event to a callable."""

    def __init__(self, callback: Callable[[ProgressEvent], None]):
        self._callback = callback

    def start(self, total: int) -> None:
        pass

    def update(self, event: ProgressEvent) -> None:
        self._callback(event)

    def finish(self, event: ProgressEvent) -> None:
        pass


class TextProgressRenderer:
    """
    Redraws a single "<completed>/<total> chunks uploaded...|" line.

    Uses a carriage return, so it is meant for interactive terminals.
    """

    def __init__(self, stream: Optional[TextIO] = None, label: str = 'chunks uploaded...'):
        self._stream = stream or sys.stdout
        self._label = label

    def format(self, event: ProgressEvent) -> str:
        frame = SPINNER_FRAMES[event.tick % len(SPINNER_FRAMES)]
        return f"{event.completed}/{event.total} {self._label}{frame}"

    def start(self, total: int) -> None:
        pass

    def update(self, event: ProgressEvent) -> None:
        self._stream.write('\r' + self.format(event))
        self._stream.flush()

    def finish(self, event: ProgressEvent) -> None:
        self._stream.write('\n')
        self._stream.flush()


class RichProgressRenderer:
    """Renders chunk progress with a rich progress bar."""

    def __init__(self, console: Optional[Console] = None, description: str = 'Uploading chunks'):
        self._console = console or Console()
        self._description = description
        self._progress: Optional[Progress] = None
        self._task_id = None

    def start(self, total: int) -> None:
        self._progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            console=self._console
        )
        self._progress.start()
        self._task_id = self._progress.add_task(self._description, total=total)

    def update(self, event: ProgressEvent) -> None:
        if self._progress is not None:
            self._progress.update(self._task_id, completed=event.completed)

    def finish(self, event: ProgressEvent) -> None:
        if self._progress is not None:
            self._progress.update(self._task_id, completed=event.completed)
            self._progress.stop()
            self._progress = None
