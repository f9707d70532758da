import io
import unittest
from unittest import mock

from PIL import Image, ImageFont

from cast2gif import raster
from cast2gif.config import DEFAULT_THEME
from cast2gif.term import CharacterCell


class TestRaster(unittest.TestCase):
    def setUp(self):
        self.rasterizer = raster.FrameRasterizer((10, 4), DEFAULT_THEME,
                                                 font=ImageFont.load_default())

    def test_load_font(self):
        with self.subTest(case='missing fonts'):
            with mock.patch('cast2gif.raster.ImageFont.load_default') as load_default:
                font = raster.load_font(font_files=['does-not-exist.ttf'])
            self.assertIs(font, load_default.return_value)

        with self.subTest(case='first available font'):
            with mock.patch('cast2gif.raster.ImageFont.truetype') as truetype:
                truetype.side_effect = [OSError('missing'), mock.sentinel.font]
                font = raster.load_font(size=12, font_files=['a.ttf', 'b.ttf'])
            self.assertIs(font, mock.sentinel.font)
            truetype.assert_called_with('b.ttf', 12)

    def test_image_size(self):
        width, height = self.rasterizer.image_size
        self.assertEqual(width, 10 * self.rasterizer.cell_width)
        self.assertEqual(height, 4 * self.rasterizer.cell_height)
        self.assertGreater(self.rasterizer.cell_height, raster.LINE_SPACING)

    def test_rasterize(self):
        cell_width = self.rasterizer.cell_width
        buffer = {
            0: {
                0: CharacterCell(' ', 'foreground', 'color1'),
                1: CharacterCell(' ', 'foreground', '#123456'),
                2: CharacterCell('x', 'color2', 'background', bold=True, underscore=True,
                                 strikethrough=True),
                42: CharacterCell('x'),
            },
            # Rows outside of the screen are ignored
            10: {0: CharacterCell('y')},
        }
        image = self.rasterizer.rasterize(buffer)

        self.assertEqual(image.mode, 'RGB')
        self.assertEqual(image.size, self.rasterizer.image_size)
        self.assertEqual(image.getpixel((0, 0)), (0xcd, 0x00, 0x00))
        self.assertEqual(image.getpixel((cell_width, 0)), (0x12, 0x34, 0x56))
        self.assertEqual(image.getpixel((5 * cell_width, 0)), (0, 0, 0))
        self.assertEqual(image.getpixel((0, 3 * self.rasterizer.cell_height)), (0, 0, 0))

        # Underline of the third cell
        underline_y = self.rasterizer.cell_height - 2
        self.assertEqual(image.getpixel((2 * cell_width, underline_y)), (0x00, 0xcd, 0x00))

    def test_rgb(self):
        self.assertEqual(self.rasterizer.rgb('#0a0b0c'), (10, 11, 12))
        self.assertEqual(self.rasterizer.rgb('foreground'), (0xe5, 0xe5, 0xe5))
        with self.assertRaises(KeyError):
            self.rasterizer.rgb('color16')

    def _images(self):
        return [Image.new('RGB', (16, 8), color) for color in ((255, 0, 0), (0, 0, 255))]

    def test_GifSequence(self):
        sequence = raster.GifSequence(250)
        for image in self._images():
            sequence.append(image)
        self.assertEqual(len(sequence), 2)

        output = io.BytesIO()
        sequence.write(output)
        output.seek(0)
        with Image.open(output) as gif:
            self.assertEqual(gif.format, 'GIF')
            self.assertEqual(gif.n_frames, 2)
            self.assertEqual(gif.info['duration'], 250)
            self.assertEqual(gif.info['loop'], 0)

    def test_PngSequence(self):
        sequence = raster.PngSequence(100)
        for image in self._images():
            sequence.append(image)

        output = io.BytesIO()
        sequence.write(output)
        output.seek(0)
        with Image.open(output) as png:
            self.assertEqual(png.format, 'PNG')
            self.assertEqual(png.n_frames, 2)
            self.assertEqual(png.convert('RGB').getpixel((0, 0)), (255, 0, 0))

    def test_write_without_frames(self):
        for sequence_class in (raster.GifSequence, raster.PngSequence):
            with self.subTest(case=sequence_class.__name__):
                with self.assertRaises(ValueError):
                    sequence_class(100).write(io.BytesIO())


if __name__ == '__main__':
    unittest.main()
