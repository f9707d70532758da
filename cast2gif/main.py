"""Command line interface of cast2gif"""

import argparse
import logging
import os
import sys

from rich.logging import RichHandler

from cast2gif import __version__, config
from cast2gif._console import console
from cast2gif.exceptions import Cast2GifError
from cast2gif.pipeline import run_conversion
from cast2gif.plan import resolve_plan
from cast2gif.progress import DualStageProgress

logger = logging.getLogger('cast2gif')

USAGE = """cast2gif cast_file out_file [-F FORMAT] [-f] [-i SECONDS] [-h] [-V]"""
DESCRIPTION = 'Render asciinema .cast files as gif, svg, or animated png.'

BUG_REPORT_MESSAGE = (
    'The program has encountered a critical internal error and will now exit. '
    'This is a bug. Please report it on our issue tracker:\n\n'
    '    https://github.com/katharostech/cast2gif/issues'
)

_logging_configured = False


class _ConsoleHandler(RichHandler):
    """RichHandler which lets errors of the bug report reach its caller

    logging swallows errors raised while emitting a record. Those raised while
    reporting a defect are raised again so that `_report_defect` can abort."""
    def handleError(self, record):
        if getattr(record, 'defect_report', False):
            error = sys.exc_info()[1]
            if error is None:
                # rich doesn't even try to print without an output file
                error = OSError('No console to report the error to')
            raise error
        super().handleError(record)


def configure_logging(environ=None):
    """Send the log messages of cast2gif to the shared console

    Must run before anything else logs. Only the first call has an effect: the
    logging configuration is never changed afterwards. The level is read from
    the CAST2GIF_LOG environment variable (default: info).
    """
    global _logging_configured
    if _logging_configured:
        return
    _logging_configured = True

    if environ is None:
        environ = os.environ
    level_name = environ.get(config.LOG_LEVEL_ENV, config.DEFAULT_LOG_LEVEL)
    level = logging.getLevelName(level_name.strip().upper())

    handler = _ConsoleHandler(console=console, show_path=False, markup=False)
    handler.setFormatter(logging.Formatter('%(message)s'))
    logger.handlers = [handler]
    logger.propagate = False
    if isinstance(level, int):
        logger.setLevel(level)
    else:
        logger.setLevel(logging.INFO)
        logger.warning('Invalid value for {}: "{}", using "{}" instead'
                       .format(config.LOG_LEVEL_ENV, level_name, config.DEFAULT_LOG_LEVEL))


def parse(args):
    """Parse command line arguments

    :param args: Arguments to parse (without the program name)
    :return: argparse.Namespace
    """
    parser = argparse.ArgumentParser(
        prog='cast2gif',
        usage=USAGE,
        description=DESCRIPTION,
    )
    parser.add_argument(
        'cast_file',
        help='the asciinema .cast file to render'
    )
    parser.add_argument(
        'out_file',
        help='the file to render to'
    )
    parser.add_argument(
        '-F', '--format',
        help='the file format to render to (gif, svg or png). This will be '
             'automatically determined from the file extension if not specified.',
        metavar='FORMAT'
    )
    parser.add_argument(
        '-f', '--force',
        help='overwrite existing output file',
        action='store_true'
    )
    parser.add_argument(
        '-i', '--frame-interval',
        help=('the interval in seconds at which frames from the recording are '
              'rendered (default: {})'.format(config.DEFAULT_FRAME_INTERVAL)),
        default=config.DEFAULT_FRAME_INTERVAL,
        metavar='SECONDS'
    )
    parser.add_argument(
        '-V', '--version',
        action='version',
        version='%(prog)s {}'.format(__version__)
    )
    return parser.parse_args(args)


def execute_cli(args):
    """Render the recording named on the command line"""
    parsed_args = parse(args)
    plan = resolve_plan(cast_path=parsed_args.cast_file,
                        output_path=parsed_args.out_file,
                        output_format=parsed_args.format,
                        force=parsed_args.force,
                        frame_interval=parsed_args.frame_interval)

    logger.info('Rendering started')
    with plan:
        run_conversion(plan, DualStageProgress(console=console))
    logger.info('Rendering ended, {} file is {}'
                .format(plan.format.value.upper(), plan.output_path))


def _cause(exc):
    # __suppress_context__ is set by "raise ... from ..."
    if exc.__suppress_context__:
        return exc.__cause__
    return exc.__context__


def format_error_chain(exc):
    """Return the message of exc followed by the messages of its causes"""
    lines = [str(exc) or type(exc).__name__]
    causes = []
    cause = _cause(exc)
    while cause is not None and cause not in causes:
        causes.append(cause)
        cause = _cause(cause)

    if causes:
        lines.extend(['', 'Caused by:'])
        for index, cause in enumerate(causes):
            lines.append('    {}: {}'.format(index, str(cause) or type(cause).__name__))
    return '\n'.join(lines)


def _report_defect():
    try:
        logger.debug('Unexpected error', exc_info=True)
        logger.error(BUG_REPORT_MESSAGE, extra={'defect_report': True})
    except BaseException:  # pylint: disable=broad-except
        # Reporting failed: don't try to report that too
        os.abort()


def main(args=None):
    """Run cast2gif and exit with status 1 on failure

    Errors from the Cast2GifError family are reported with their causes.
    Anything else is a bug: a generic message asks the user to report it.
    """
    configure_logging()
    if args is None:
        args = sys.argv

    try:
        try:
            execute_cli(args[1:])
        except Cast2GifError as exc:
            logger.error(format_error_chain(exc))
            sys.exit(1)
    except Exception:  # pylint: disable=broad-except
        _report_defect()
        sys.exit(1)
