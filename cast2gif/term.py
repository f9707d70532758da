"""Terminal emulation

This module replays the output of a recording through a pyte screen and
samples the state of the screen at a fixed interval (`sampled_frames`). Each
frame is a 2D mapping of CharacterCell which the raster and SVG renderers turn
into images.
"""
import math
import re
from collections import defaultdict, namedtuple

import pyte
import pyte.graphics
import pyte.screens

from cast2gif.asciicast import AsciiCastError, AsciiCastEvent, AsciiCastHeader

# Replace the first 16 colors rgb values by their names so that themes apply
# to FG_BG_256[0] to FG_BG_256[15] but not to FG_BG_256[16] and above which
# are displayed as is (FG_BG_256[0] and FG_BG_256[16] are both #000000).
_COLORS = ['black', 'red', 'green', 'brown', 'blue', 'magenta', 'cyan', 'white']
_BRIGHTCOLORS = ['bright{}'.format(color) for color in _COLORS]
NAMED_COLORS = _COLORS + _BRIGHTCOLORS
pyte.graphics.FG_BG_256 = NAMED_COLORS + pyte.graphics.FG_BG_256[16:]

_HEX_COLOR = re.compile('[0-9a-fA-F]{6}')

TimedFrame = namedtuple('TimedFrame', ['time', 'duration', 'buffer'])
TimedFrame.__doc__ = 'Screen buffer displayed from `time` during `duration` milliseconds'

_CELL_ATTRIBUTES = ['text', 'color', 'background_color', 'bold', 'italics',
                    'underscore', 'strikethrough']
_CharacterCell = namedtuple('_CharacterCell', _CELL_ATTRIBUTES)
_CharacterCell.__new__.__defaults__ = ('foreground', 'background', False, False,
                                       False, False)


class CharacterCell(_CharacterCell):
    """Character cell of the screen

    Colors are either a name ('foreground', 'background', 'color0' to
    'color15') resolved with the theme of the recording, or '#rrggbb'."""
    @staticmethod
    def _color(pyte_color, default):
        if pyte_color == 'default':
            return default
        if pyte_color in NAMED_COLORS:
            return 'color{}'.format(NAMED_COLORS.index(pyte_color))
        if _HEX_COLOR.fullmatch(pyte_color):
            return '#{}'.format(pyte_color)
        # pyte passes out of range true colors through (38;2;300;0;0 gives
        # '12c0000')
        return default

    @classmethod
    def from_pyte(cls, char):
        """Create a CharacterCell from a pyte character"""
        fg = char.fg
        # Bold text uses the bright variant of named colors
        if char.bold and fg in _COLORS:
            fg = 'bright{}'.format(fg)
        text_color = cls._color(fg, 'foreground')
        background_color = cls._color(char.bg, 'background')

        if char.reverse:
            text_color, background_color = background_color, text_color

        return cls(char.data, text_color, background_color, char.bold,
                   char.italics, char.underscore, char.strikethrough)


def _screen_buffer(screen):
    """Return the content of the screen with the cursor in reverse video"""
    buffer = defaultdict(dict)
    for row in range(screen.lines):
        line = screen.buffer[row]
        buffer[row] = {column: CharacterCell.from_pyte(line[column]) for column in line}

    if not screen.cursor.hidden:
        row, column = screen.cursor.y, screen.cursor.x
        try:
            data = screen.buffer[row][column].data
        except KeyError:
            data = ' '

        cursor_char = pyte.screens.Char(data=data or ' ',
                                        fg=screen.cursor.attrs.fg,
                                        bg=screen.cursor.attrs.bg,
                                        reverse=True)
        buffer[row][column] = CharacterCell.from_pyte(cursor_char)
    return buffer


def _compress_idle_time(events, idle_time_limit):
    """Shorten every pause between two events to at most idle_time_limit seconds"""
    dropped_time = 0
    last_time = 0
    for event in events:
        pause = event.time - last_time
        last_time = event.time
        if idle_time_limit and pause > idle_time_limit:
            dropped_time += pause - idle_time_limit
        if dropped_time:
            event = event._replace(time=event.time - dropped_time)
        yield event


def frame_count(duration, frame_interval):
    """Number of frames needed to display a recording lasting `duration` seconds

    The last frame is sampled at or after `duration` so that the final state of
    the screen is always part of the animation."""
    if frame_interval <= 0:
        raise ValueError('Frame interval must be greater than 0')
    return math.ceil(duration / frame_interval) + 1


def sampled_frames(records, frame_interval):
    """Sample the screen of a recording every `frame_interval` seconds

    :param records: asciicast v2 records, starting with the header
    :param frame_interval: Time between two frames in seconds
    :return: Tuple made of the header of the recording, the number of frames
    and a generator of TimedFrame
    """
    records = iter(records)
    header = next(records, None)
    if not isinstance(header, AsciiCastHeader):
        raise AsciiCastError('Missing header at the beginning of the recording')

    events = [record for record in records
              if isinstance(record, AsciiCastEvent) and record.event_type == 'o']
    events = list(_compress_idle_time(events, header.idle_time_limit))
    duration = max(0, events[-1].time) if events else 0
    count = frame_count(duration, frame_interval)
    interval_ms = max(1, int(round(1000 * frame_interval)))

    def generator():
        screen = pyte.Screen(header.width, header.height)
        stream = pyte.Stream(screen)
        pending = iter(events)
        event = next(pending, None)
        for index in range(count):
            time = index * frame_interval
            last_frame = index == count - 1
            while event is not None and (event.time <= time or last_frame):
                # Feeding characters one by one keeps pyte from dropping the
                # rest of the data after a zero width character
                for char in event.event_data:
                    stream.feed(char)
                event = next(pending, None)
            yield TimedFrame(index * interval_ms, interval_ms, _screen_buffer(screen))

    return header, count, generator()
