"""asciicast reader

Terminal session recordings are read from an open text stream. Both the v1
format (a single JSON document) and the v2 format (newline-delimited JSON) are
supported; v1 recordings are converted to v2 records on the fly:
    [1] https://github.com/asciinema/asciinema/blob/develop/doc/asciicast-v1.md
    [2] https://github.com/asciinema/asciinema/blob/develop/doc/asciicast-v2.md
"""
import json
import math
from collections import namedtuple
from collections.abc import Iterable


class AsciiCastError(Exception):
    pass


def _check_types(record, types):
    for name in record._fields:
        value = getattr(record, name)
        # bool is a subclass of int but never a valid number in a recording
        if isinstance(value, bool) or not isinstance(value, types[name]):
            raise AsciiCastError('Invalid type for attribute {}: {} (expected one of {})'
                                 .format(name, type(value), types[name]))


def _is_color(color):
    if not isinstance(color, str) or len(color) != 7 or not color.startswith('#'):
        return False
    try:
        int(color[1:], 16)
    except ValueError:
        return False
    return True


_AsciiCastTheme = namedtuple('AsciiCastTheme', ['fg', 'bg', 'palette'])


class AsciiCastTheme(_AsciiCastTheme):
    """Color theme of the recorded terminal

    fg: default text color ('#rrggbb')
    bg: default background color ('#rrggbb')
    palette: colon separated list of 8 or 16 colors ('#rrggbb'). Colors past
    the first 16 (or the first 8 if the others are invalid) are dropped.
    """
    def __new__(cls, fg, bg, palette):
        if not _is_color(fg):
            raise AsciiCastError('Invalid foreground color: {}'.format(fg))
        if not _is_color(bg):
            raise AsciiCastError('Invalid background color: {}'.format(bg))
        if not isinstance(palette, str):
            raise AsciiCastError('Invalid palette: {}'.format(palette))

        colors = palette.split(':')
        for size in (16, 8):
            if len(colors) >= size and all(_is_color(c) for c in colors[:size]):
                return super().__new__(cls, fg, bg, ':'.join(colors[:size]))
        raise AsciiCastError('Invalid palette: the first 8 or 16 colors must be valid')

    @property
    def colors(self):
        return self.palette.split(':')


_AsciiCastHeader = namedtuple('AsciiCastHeader', ['version', 'width', 'height', 'theme',
                                                  'idle_time_limit'])


class AsciiCastHeader(_AsciiCastHeader):
    """First record of a recording

    version: Version of the asciicast format (always 2 once decoded)
    width: Number of columns of the terminal
    height: Number of lines of the terminal
    theme: Color theme of the terminal, or None
    idle_time_limit: Maximum duration of a pause between two events in
    seconds (a finite number greater than 0), or None
    """
    types = {
        'version': int,
        'width': int,
        'height': int,
        'theme': (type(None), AsciiCastTheme),
        'idle_time_limit': (type(None), int, float),
    }

    def __new__(cls, version, width, height, theme=None, idle_time_limit=None):
        self = super().__new__(cls, version, width, height, theme, idle_time_limit)
        _check_types(self, cls.types)
        if version != 2:
            raise AsciiCastError('Only asciicast v2 headers are supported')
        if width <= 0 or height <= 0:
            raise AsciiCastError('Invalid terminal geometry: {}x{}'.format(width, height))
        if idle_time_limit is not None and not (math.isfinite(idle_time_limit)
                                                and idle_time_limit > 0):
            raise AsciiCastError('Invalid idle time limit: {}'.format(idle_time_limit))
        return self

    @classmethod
    def from_json(cls, json_dict):
        attributes = {name: json_dict.get(name) for name in cls._fields}
        if isinstance(attributes['theme'], dict):
            try:
                attributes['theme'] = AsciiCastTheme(**attributes['theme'])
            except TypeError as exc:
                raise AsciiCastError('Invalid theme: {}'.format(attributes['theme'])) from exc
        return cls(**attributes)


_AsciiCastEvent = namedtuple('AsciiCastEvent', ['time', 'event_type', 'event_data'])


class AsciiCastEvent(_AsciiCastEvent):
    """Event record

    time: Time elapsed since the beginning of the recording in seconds
    event_type: 'o' for data written to the standard output of the terminal,
    'i' for data read from its standard input
    event_data: Data captured during the recording
    """
    types = {
        'time': (int, float),
        'event_type': str,
        'event_data': str,
    }

    def __new__(cls, time, event_type, event_data):
        self = super().__new__(cls, time, event_type, event_data)
        _check_types(self, cls.types)
        # json accepts Infinity and NaN
        if not math.isfinite(time):
            raise AsciiCastError('Invalid event time: {}'.format(time))
        return self

    @classmethod
    def from_json(cls, json_list):
        try:
            time, event_type, event_data = json_list
        except ValueError as exc:
            raise AsciiCastError('Invalid event: {}'.format(json_list)) from exc
        return cls(time, event_type, event_data)


def parse_record(line):
    """Return the asciicast v2 record encoded by line

    Raise AsciiCastError if line is not a valid asciicast v2 record"""
    try:
        data = json.loads(line)
    except json.JSONDecodeError as exc:
        raise AsciiCastError('Invalid JSON record') from exc

    if isinstance(data, dict):
        return AsciiCastHeader.from_json(data)
    if isinstance(data, list):
        return AsciiCastEvent.from_json(data)

    truncated_line = line if len(line) < 20 else '{}...'.format(line[:20])
    raise AsciiCastError('Unknown record type: "{}"'.format(truncated_line))


def _v1_records(data):
    try:
        json_dict = json.loads(data)
    except json.JSONDecodeError as exc:
        raise AsciiCastError('Invalid asciicast v1 document') from exc
    if not isinstance(json_dict, dict):
        raise AsciiCastError('Invalid asciicast v1 document')

    missing_attributes = {'version', 'width', 'height', 'stdout'} - set(json_dict)
    if missing_attributes:
        raise AsciiCastError('Missing attributes in asciicast v1 file: {}'
                             .format(', '.join(sorted(missing_attributes))))
    if json_dict['version'] != 1:
        raise AsciiCastError('Invalid asciicast v1 version: {}'.format(json_dict['version']))

    yield AsciiCastHeader(2, json_dict['width'], json_dict['height'])

    stdout = json_dict['stdout']
    if isinstance(stdout, (str, dict)) or not isinstance(stdout, Iterable):
        raise AsciiCastError('Invalid type for stdout attribute (expected a list): {}'
                             .format(stdout))

    # v1 events are timed relatively to the previous one
    time = 0
    for event in stdout:
        try:
            time_elapsed, event_data = event
        except (TypeError, ValueError) as exc:
            raise AsciiCastError('Invalid event: {}'.format(event)) from exc
        if isinstance(time_elapsed, bool) or not isinstance(time_elapsed, (int, float)):
            raise AsciiCastError('Invalid event time: {}'.format(event))
        time += time_elapsed
        yield AsciiCastEvent(time, 'o', event_data)


def read_records(stream):
    """Yield asciicast v2 records read from a text stream

    The first record is always an AsciiCastHeader. Recordings in asciicast v1
    format are detected when the first line isn't a valid v2 header.
    Raise AsciiCastError if the recording is invalid"""
    first_line = stream.readline()
    if not first_line.strip():
        raise AsciiCastError('Empty recording')

    try:
        header = parse_record(first_line)
    except AsciiCastError:
        header = None

    if not isinstance(header, AsciiCastHeader):
        yield from _v1_records(first_line + stream.read())
        return

    yield header
    for line in stream:
        if not line.strip():
            continue
        record = parse_record(line)
        if isinstance(record, AsciiCastHeader):
            raise AsciiCastError('Unexpected header in the middle of the recording')
        yield record
