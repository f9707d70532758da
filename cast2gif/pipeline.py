"""Conversion of a recording on a background thread

The conversion runs on a worker thread while the foreground thread displays
its progress. The outcome of the worker is handed back to the foreground
through a one-shot queue and raised there.
"""
import logging
import queue
import threading
from collections import namedtuple

from cast2gif.convert import CONVERTERS
from cast2gif.exceptions import FormatNotImplementedError
from cast2gif.progress import ProgressContractError

logger = logging.getLogger(__name__)

WorkerOutcome = namedtuple('WorkerOutcome', ['error'])
WorkerOutcome.__doc__ = 'Result of the conversion worker: the exception it raised, or None'


def _work(converter, plan, display, outcomes):
    error = None
    try:
        converter(plan.input_handle, plan.output_handle, plan.frame_interval, display)
    except BaseException as exc:  # pylint: disable=broad-except
        # Raised again by the foreground thread
        error = exc
    finally:
        outcomes.put(WorkerOutcome(error))
        display.close()


def run_conversion(plan, display, converters=None):
    """Convert the recording described by plan while displaying progress

    :param plan: ExecutionPlan of the conversion
    :param display: DualStageProgress receiving the snapshots of the worker
    :param converters: Mapping between OutputFormat and converters
    (defaults to cast2gif.convert.CONVERTERS)

    Raise FormatNotImplementedError without starting the worker if no converter
    handles the format of the plan. Exceptions raised by the converter are
    raised again in the calling thread.
    """
    if converters is None:
        converters = CONVERTERS

    converter = converters.get(plan.format)
    if converter is None:
        raise FormatNotImplementedError('Output format not implemented yet: {}'
                                        .format(plan.format))

    outcomes = queue.Queue(maxsize=1)
    worker = threading.Thread(target=_work,
                              args=(converter, plan, display, outcomes),
                              name='cast2gif-converter')
    worker.start()
    display.wait()
    outcome = outcomes.get()
    worker.join()

    if outcome.error is not None:
        logger.debug('Conversion worker failed: {!r}'.format(outcome.error))
        raise outcome.error
    if not display.done:
        raise ProgressContractError('Conversion ended without reporting completion')
