"""Progress of a conversion

The conversion worker reports its progress with ProgressSnapshot instances.
DualStageProgress receives them from the worker thread and displays them in
the foreground as two progress bars, one per phase of the conversion.
"""
import threading
from collections import namedtuple
from enum import Enum

from rich.progress import (BarColumn, MofNCompleteColumn, Progress, TextColumn,
                           TimeElapsedColumn, TimeRemainingColumn)

# Seconds between two redraws of the progress bars
REFRESH_TICK = 0.1

RASTERIZING = 'Rasterizing'
SEQUENCING = 'Sequencing'


class ProgressContractError(RuntimeError):
    """Raised when a snapshot contradicts the snapshots received before it"""


_ProgressSnapshot = namedtuple('ProgressSnapshot', ['rasterized', 'sequenced', 'total'])


class ProgressSnapshot(_ProgressSnapshot):
    """Number of frames rasterized and sequenced out of `total`

    A total of 0 means the number of frames isn't known yet."""


def check_snapshot(snapshot, previous=None):
    """Raise ProgressContractError unless snapshot may follow previous"""
    for name, value in zip(snapshot._fields, snapshot):
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise ProgressContractError('Invalid {} count: {!r}'.format(name, value))

    if snapshot.rasterized > snapshot.total or snapshot.sequenced > snapshot.total:
        raise ProgressContractError('Progress beyond total: {}'.format(snapshot))

    if previous is None:
        return
    if previous.total > 0 and snapshot.total != previous.total:
        raise ProgressContractError('Total changed from {} to {}'
                                    .format(previous.total, snapshot.total))
    if snapshot.rasterized < previous.rasterized or snapshot.sequenced < previous.sequenced:
        raise ProgressContractError('Progress went backwards: {} after {}'
                                    .format(snapshot, previous))


class PhaseState(Enum):
    WAITING = 'Waiting'
    ACTIVE = 'Active'
    DONE = 'Done'


class PhaseIndicator:
    """Display state of one phase of the conversion"""
    def __init__(self, label):
        self.label = label
        self.state = PhaseState.WAITING
        self.position = 0
        self.capacity = 0

    @property
    def description(self):
        if self.state is PhaseState.ACTIVE:
            return self.label
        return self.state.value

    def __repr__(self):
        return '<PhaseIndicator {} {} {}/{}>'.format(self.label, self.state.name,
                                                     self.position, self.capacity)


def update_phase(indicator, position, total):
    """Move indicator to position out of total

    Done is final: once position reached a positive total the indicator stays
    Done whatever the following snapshots say."""
    if indicator.capacity != total:
        indicator.capacity = total

    if indicator.state is PhaseState.DONE:
        pass
    elif position > 0:
        indicator.state = PhaseState.ACTIVE
    else:
        indicator.state = PhaseState.WAITING

    indicator.position = position
    if total > 0 and position == total:
        indicator.state = PhaseState.DONE
    return indicator.state


class DualStageProgress:
    """Progress bars of the rasterizing and sequencing phases

    `accept` and `close` are called by the conversion worker, `wait` runs in
    the foreground until both phases are done or the worker is closed.
    """
    def __init__(self, console=None, tick=REFRESH_TICK):
        self.tick = tick
        self.rasterizing = PhaseIndicator(RASTERIZING)
        self.sequencing = PhaseIndicator(SEQUENCING)
        self._condition = threading.Condition()
        self._latest = None
        self._closed = False
        # Refreshes are driven by `wait` so that rich doesn't start a thread
        self._progress = Progress(
            TextColumn('{task.description:12}'),
            TimeElapsedColumn(),
            BarColumn(),
            MofNCompleteColumn(),
            TimeRemainingColumn(),
            console=console,
            auto_refresh=False,
            transient=True,
        )
        self._tasks = {
            indicator: self._progress.add_task(indicator.description, total=None)
            for indicator in (self.rasterizing, self.sequencing)
        }

    def accept(self, snapshot):
        """Replace the latest snapshot (worker side, never blocks for long)"""
        with self._condition:
            check_snapshot(snapshot, self._latest)
            self._latest = snapshot
            self._condition.notify_all()

    def close(self):
        """Signal that no snapshot will follow"""
        with self._condition:
            self._closed = True
            self._condition.notify_all()

    @property
    def latest(self):
        with self._condition:
            return self._latest

    @property
    def done(self):
        return (self.rasterizing.state is PhaseState.DONE
                and self.sequencing.state is PhaseState.DONE)

    def update(self, snapshot):
        """Apply snapshot to both indicators"""
        update_phase(self.rasterizing, snapshot.rasterized, snapshot.total)
        update_phase(self.sequencing, snapshot.sequenced, snapshot.total)
        for indicator, task_id in self._tasks.items():
            # rich shows a pulsing bar for an unknown total
            self._progress.update(task_id,
                                  description=indicator.description,
                                  total=indicator.capacity or None,
                                  completed=indicator.position)

    def wait(self):
        """Display progress until both phases are done or `close` is called"""
        applied = None
        with self._progress:
            while True:
                with self._condition:
                    self._condition.wait_for(
                        lambda: self._closed or self._latest is not applied, self.tick)
                    snapshot, closed = self._latest, self._closed
                if snapshot is not applied:
                    self.update(snapshot)
                    applied = snapshot
                self._progress.refresh()
                if self.done or closed:
                    return self.done
