"""SVG animation of terminal frames

All frames are stacked vertically inside a group which is scrolled by a CSS
animation so that only one frame is visible through the viewport of the
screen at any time. Lines of text which appear in several frames are only
defined once and reused with 'use' elements.
"""
import os
import re
from itertools import groupby

from lxml import etree
from wcwidth import wcswidth

from cast2gif import config

# Size in pixels of a character cell
CELL_WIDTH = 8
CELL_HEIGHT = 17

# Number of empty lines between two consecutive frames so that content does
# not bleed into adjacent frames
FRAME_CELL_SPACING = 1

SVG_NS = 'http://www.w3.org/2000/svg'
XLINK_NS = 'http://www.w3.org/1999/xlink'
NAMESPACES = {
    None: SVG_NS,
    'xlink': XLINK_NS,
}

FONT_FAMILY = "'DejaVu Sans Mono', monospace"

# Characters which can't appear in an XML document (lone surrogates,
# noncharacters U+FFFE and U+FFFF, C0 controls other than tab and newlines)
_INVALID_XML_CHARS = re.compile('[^\t\n\r\u0020-\ud7ff\ue000-\ufffd\U00010000-\U0010ffff]')
REPLACEMENT_CHARACTER = '\ufffd'


def _tag(name):
    return '{{{}}}{}'.format(SVG_NS, name)


class ConsecutiveWithSameAttributes:
    """Callable to be used as a key for itertools.groupby to group together
    consecutive elements of a list with the same attributes"""
    def __init__(self, attributes):
        self.group_index = None
        self.last_index = None
        self.attributes = attributes
        self.last_key_attributes = None

    def __call__(self, arg):
        index, obj = arg
        key_attributes = {name: getattr(obj, name) for name in self.attributes}
        if self.last_index != index - 1 or self.last_key_attributes != key_attributes:
            self.group_index = index
        self.last_index = index
        self.last_key_attributes = key_attributes
        return self.group_index, key_attributes


def _text_width(text):
    # wcswidth returns -1 for strings containing non printable characters
    width = wcswidth(text)
    return width if width >= 0 else len(text)


def _paint(attributes, color):
    if color.startswith('#'):
        attributes['fill'] = color
    else:
        attributes['class'] = color


class SVGAnimation:
    """Build an SVG animation frame by frame

    :param geometry: Number of columns and rows of the screen
    :param theme: Color theme used for named colors
    """
    def __init__(self, geometry, theme, cell_width=CELL_WIDTH, cell_height=CELL_HEIGHT):
        self.columns, self.rows = geometry
        self.theme = theme
        self.cell_width = cell_width
        self.cell_height = cell_height
        # Serialized text group -> group element with an 'id' attribute
        self.definitions = {}
        # Frame time (ms) -> vertical translation of the screen view (px)
        self.timings = {}
        self.duration = 0
        self.screen_view = etree.Element(_tag('g'), id='screen_view')

    @property
    def frame_height(self):
        # An even number of pixels between two frames prevents lines from
        # jumping up and down by one pixel in some browsers
        rows = self.rows + FRAME_CELL_SPACING
        return (rows + rows % 2) * self.cell_height

    def render_frame(self, index, buffer):
        """Return a group element drawing the screen buffer of frame #index"""
        offset = index * self.frame_height
        group = etree.Element(_tag('g'))
        for row in sorted(buffer):
            line = buffer[row]
            if not line or row >= self.rows:
                continue
            y = offset + row * self.cell_height
            for rect in self._background_rects(line, y):
                group.append(rect)
            group.append(self._text_line(line, y))
        return group

    def append(self, index, frame, group):
        """Add a rendered frame to the animation"""
        self.screen_view.append(group)
        self.timings[frame.time] = -index * self.frame_height
        self.duration = max(self.duration, frame.time + frame.duration)

    def _background_rects(self, line, y):
        cells = [(column, cell) for column, cell in sorted(line.items())
                 if cell.background_color != 'background']
        key = ConsecutiveWithSameAttributes(['background_color'])
        rects = []
        for (column, attributes), group in groupby(cells, key):
            length = _text_width(''.join(cell.text for _, cell in group))
            rect_attributes = {
                'x': str(column * self.cell_width),
                'y': str(y),
                'width': str(max(1, length) * self.cell_width),
                'height': str(self.cell_height),
            }
            _paint(rect_attributes, attributes['background_color'])
            rects.append(etree.Element(_tag('rect'), rect_attributes))
        return rects

    def _text_line(self, line, y):
        """Return a 'use' element referencing the definition of the text of the line"""
        text_group = etree.Element(_tag('g'))
        key = ConsecutiveWithSameAttributes(['color', 'bold', 'italics', 'underscore',
                                             'strikethrough'])
        for (column, attributes), group in groupby(sorted(line.items()), key):
            text = ''.join(cell.text for _, cell in group)
            if text.strip():
                text_group.append(self._text(column, attributes, text))

        serialized = etree.tostring(text_group)
        definition = self.definitions.get(serialized)
        if definition is None:
            text_group.attrib['id'] = 'g{}'.format(len(self.definitions) + 1)
            self.definitions[serialized] = definition = text_group

        return etree.Element(_tag('use'), {
            '{{{}}}href'.format(XLINK_NS): '#{}'.format(definition.attrib['id']),
            'y': str(y),
        })

    def _text(self, column, attributes, text):
        text = _INVALID_XML_CHARS.sub(REPLACEMENT_CHARACTER, text)
        text_attributes = {
            'x': str(column * self.cell_width),
            'textLength': str(_text_width(text) * self.cell_width),
        }
        if attributes['bold']:
            text_attributes['font-weight'] = 'bold'
        if attributes['italics']:
            text_attributes['font-style'] = 'italic'

        decorations = []
        if attributes['underscore']:
            decorations.append('underline')
        if attributes['strikethrough']:
            decorations.append('line-through')
        if decorations:
            text_attributes['text-decoration'] = ' '.join(decorations)

        _paint(text_attributes, attributes['color'])
        element = etree.Element(_tag('text'), text_attributes)
        element.text = text
        return element

    def stylesheet(self):
        rules = [
            '#screen {{font-family: {}; font-style: normal; font-size: 14px;}}'
            .format(FONT_FAMILY),
            'text {dominant-baseline: text-before-edge; white-space: pre;}',
        ]
        for name, color in sorted(config.color_table(self.theme).items()):
            rules.append('.{} {{fill: {};}}'.format(name, color))

        if self.duration > 0:
            keyframes = ['{:.3f}%{{transform:translateY({}px)}}'
                         .format(100.0 * time / self.duration, offset)
                         for time, offset in sorted(self.timings.items())]
            if self.timings:
                last_offset = self.timings[max(self.timings)]
                keyframes.append('100%{{transform:translateY({}px)}}'.format(last_offset))
            rules.append('@keyframes roll {{{}}}'.format(os.linesep.join(keyframes)))
            rules.append('#screen_view {{animation-duration: {}ms; '
                         'animation-iteration-count: infinite; animation-name: roll; '
                         'animation-timing-function: steps(1, end); '
                         'animation-fill-mode: forwards;}}'.format(self.duration))

        return os.linesep.join(rules)

    def to_element(self):
        width = self.columns * self.cell_width
        height = self.rows * self.cell_height
        size = {
            'width': str(width),
            'height': str(height),
            'viewBox': '0 0 {} {}'.format(width, height),
        }
        root = etree.Element(_tag('svg'), size, nsmap=NAMESPACES)
        defs = etree.SubElement(root, _tag('defs'))
        style = etree.SubElement(defs, _tag('style'), type='text/css')
        style.text = etree.CDATA(self.stylesheet())

        screen = etree.SubElement(root, _tag('svg'), size, id='screen')
        etree.SubElement(screen, _tag('rect'), {
            'class': 'background',
            'x': '0',
            'y': '0',
            'width': '100%',
            'height': '100%',
        })
        screen_defs = etree.SubElement(screen, _tag('defs'))
        for definition in self.definitions.values():
            screen_defs.append(definition)
        screen.append(self.screen_view)
        return root

    def write(self, output_file):
        output_file.write(etree.tostring(self.to_element(), xml_declaration=True,
                                         encoding='utf-8'))
