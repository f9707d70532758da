"""Raster rendering of terminal frames with Pillow

`FrameRasterizer` draws a screen buffer into an RGB image. `GifSequence` and
`PngSequence` collect those images and write them as an animated GIF or an
animated PNG.
"""
import logging
import math

from PIL import Image, ImageDraw, ImageFont

from cast2gif import config

logger = logging.getLogger(__name__)

# Extra pixels between two lines of text
LINE_SPACING = 2


def load_font(size=config.FONT_SIZE, font_files=None):
    """Return the first monospace font available, or Pillow's default font"""
    if font_files is None:
        font_files = config.FONT_FILES

    for font_file in font_files:
        try:
            return ImageFont.truetype(font_file, size)
        except OSError:
            logger.debug('Font not available: {}'.format(font_file))

    logger.debug('No monospace font found, using the default font of Pillow')
    return ImageFont.load_default()


def cell_size(font):
    """Return the width and height in pixels of a character cell"""
    width = max(1, int(math.ceil(font.getlength('M'))))
    _, _, _, bottom = font.getbbox('Mgjy|')
    return width, max(1, int(bottom)) + LINE_SPACING


class FrameRasterizer:
    """Draw screen buffers of a given geometry using a color theme"""
    def __init__(self, geometry, theme, font=None):
        self.columns, self.rows = geometry
        self.font = load_font() if font is None else font
        self.cell_width, self.cell_height = cell_size(self.font)
        self.colors = {name: config.hex_to_rgb(color)
                       for name, color in config.color_table(theme).items()}

    @property
    def image_size(self):
        return self.columns * self.cell_width, self.rows * self.cell_height

    def rgb(self, color):
        if color.startswith('#'):
            return config.hex_to_rgb(color)
        return self.colors[color]

    def rasterize(self, buffer):
        """Return an RGB image of the screen buffer

        :param buffer: Mapping between row numbers and mappings between column
        numbers and CharacterCells
        """
        image = Image.new('RGB', self.image_size, self.colors['background'])
        draw = ImageDraw.Draw(image)
        for row, line in buffer.items():
            if row >= self.rows:
                continue
            top = row * self.cell_height
            for column, cell in sorted(line.items()):
                if column >= self.columns:
                    continue
                self._draw_cell(draw, column * self.cell_width, top, cell)
        return image

    def _draw_cell(self, draw, left, top, cell):
        if cell.background_color != 'background':
            draw.rectangle([left, top, left + self.cell_width - 1, top + self.cell_height - 1],
                           fill=self.rgb(cell.background_color))

        if not cell.text.strip():
            return

        fill = self.rgb(cell.color)
        draw.text((left, top), cell.text, font=self.font, fill=fill)
        # No bold variant of the font is loaded, draw the text twice instead
        if cell.bold:
            draw.text((left + 1, top), cell.text, font=self.font, fill=fill)

        bottom = top + self.cell_height - 1
        right = left + self.cell_width - 1
        if cell.underscore:
            draw.line([left, bottom - 1, right, bottom - 1], fill=fill)
        if cell.strikethrough:
            middle = top + self.cell_height // 2
            draw.line([left, middle, right, middle], fill=fill)


class _ImageSequence:
    """Animated image made of frames displayed `frame_duration` milliseconds each"""
    format = None

    def __init__(self, frame_duration):
        self.frame_duration = frame_duration
        self.frames = []

    def __len__(self):
        return len(self.frames)

    def _convert(self, image):
        raise NotImplementedError

    def append(self, image):
        self.frames.append(self._convert(image))

    def _save_options(self):
        return {}

    def write(self, output_file):
        if not self.frames:
            raise ValueError('Cannot write an animation without frames')
        first, *others = self.frames
        first.save(output_file,
                   format=self.format,
                   save_all=True,
                   append_images=others,
                   duration=self.frame_duration,
                   loop=0,
                   **self._save_options())


class GifSequence(_ImageSequence):
    format = 'GIF'

    def _convert(self, image):
        # Each frame gets its own palette
        return image.convert('P', palette=Image.Palette.ADAPTIVE, colors=256)


class PngSequence(_ImageSequence):
    format = 'PNG'

    def _convert(self, image):
        return image.convert('RGB')

    def _save_options(self):
        return {'default_image': False}
