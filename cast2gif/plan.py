"""Resolution of the command line into an execution plan

Everything that can be checked before the conversion starts is checked here:
once `resolve_plan` returns, the recording is open for reading, the output
file has been created and the output format is known.
"""
import logging
import math
import os
from collections import namedtuple
from enum import Enum

from cast2gif import config
from cast2gif.exceptions import ArgumentError, PathError

logger = logging.getLogger(__name__)

FORMAT_WARNING = ('Could not detect output format from file extension, assuming gif '
                  'format. Use --format to specify otherwise.')


class OutputFormat(Enum):
    GIF = 'gif'
    PNG = 'png'
    SVG = 'svg'

    def __str__(self):
        return self.value


_ExecutionPlan = namedtuple('ExecutionPlan', ['input_handle', 'output_handle', 'format',
                                              'frame_interval', 'overwrite_allowed',
                                              'cast_path', 'output_path'])


class ExecutionPlan(_ExecutionPlan):
    """Validated description of a conversion

    input_handle: Recording opened for reading (text mode)
    output_handle: Output file opened for writing (binary mode)
    format: OutputFormat of the output file
    frame_interval: Time between two frames of the animation in seconds
    overwrite_allowed: Whether an existing output file could be replaced

    The plan owns both handles: use it as a context manager to close them.
    """
    def close(self):
        self.input_handle.close()
        self.output_handle.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


def parse_frame_interval(value):
    """Return the frame interval in seconds described by value

    Raise ArgumentError unless value is a positive decimal number"""
    try:
        interval = float(value)
    except (TypeError, ValueError) as exc:
        raise ArgumentError('Could not parse frame interval: "{}"'.format(value)) from exc

    if not math.isfinite(interval) or interval <= 0:
        raise ArgumentError('Frame interval must be a positive number of seconds: "{}"'
                            .format(value))
    return interval


def resolve_format(output_path, requested=None):
    """Return the OutputFormat of the output file

    An explicitly requested format wins over the extension of the output path.
    Without either, the GIF format is used and a warning is logged."""
    if requested is not None:
        try:
            return OutputFormat(requested.lower())
        except ValueError:
            choices = ', '.join(f.value for f in OutputFormat)
            raise ArgumentError('Invalid output format: "{}" (expected one of {})'
                                .format(requested, choices)) from None

    _, extension = os.path.splitext(output_path)
    try:
        return OutputFormat(extension[1:].lower())
    except ValueError:
        logger.warning(FORMAT_WARNING)
        return OutputFormat.GIF


def open_input(cast_path):
    try:
        return open(cast_path, 'r', encoding='utf-8')
    except OSError as exc:
        raise PathError('Could not open cast file: {}'.format(cast_path)) from exc


def open_output(output_path, force=False):
    """Create or truncate the output file

    Raise PathError if the file already exists and force is False. Nothing
    prevents another process from creating the file between the check and the
    creation."""
    if os.path.exists(output_path) and not force:
        raise PathError('Output file already exists: {}'.format(output_path))

    try:
        return open(output_path, 'wb')
    except OSError as exc:
        raise PathError('Could not open output file: {}'.format(output_path)) from exc


def resolve_plan(cast_path, output_path, output_format=None, force=False,
                 frame_interval=config.DEFAULT_FRAME_INTERVAL):
    """Validate the command line values and open the files of the conversion

    :param cast_path: Path of the asciicast recording
    :param output_path: Path of the animation to create
    :param output_format: Name of the requested format, or None to infer it
    from the extension of output_path
    :param force: Overwrite output_path if it already exists
    :param frame_interval: Time between two frames in seconds (string)
    :return: ExecutionPlan
    """
    interval = parse_frame_interval(frame_interval)
    input_handle = open_input(cast_path)
    try:
        resolved_format = resolve_format(output_path, output_format)
        output_handle = open_output(output_path, force)
    except BaseException:
        input_handle.close()
        raise

    return ExecutionPlan(input_handle=input_handle,
                         output_handle=output_handle,
                         format=resolved_format,
                         frame_interval=interval,
                         overwrite_allowed=force,
                         cast_path=cast_path,
                         output_path=output_path)
