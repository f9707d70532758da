import unittest

from cast2gif import config
from cast2gif.asciicast import AsciiCastHeader, AsciiCastTheme


class TestConfig(unittest.TestCase):
    theme_8 = AsciiCastTheme('#010101', '#020202', ':'.join(
        '#0000{:02x}'.format(i) for i in range(8)))

    def test_resolve_theme(self):
        with self.subTest(case='header without theme'):
            header = AsciiCastHeader(2, 80, 24)
            self.assertEqual(config.resolve_theme(header), config.DEFAULT_THEME)

        with self.subTest(case='header with theme'):
            header = AsciiCastHeader(2, 80, 24, self.theme_8)
            self.assertEqual(config.resolve_theme(header), self.theme_8)

    def test_color_table(self):
        table = config.color_table(self.theme_8)
        self.assertEqual(len(table), 18)
        self.assertEqual(table['foreground'], '#010101')
        self.assertEqual(table['background'], '#020202')
        self.assertEqual(table['color3'], '#000003')
        self.assertEqual(table['color11'], '#000003')

        table = config.color_table(config.DEFAULT_THEME)
        self.assertEqual(table['color9'], '#ff0000')

    def test_hex_to_rgb(self):
        self.assertEqual(config.hex_to_rgb('#ff8000'), (255, 128, 0))
        for color in ('ff8000', '#fff', '#gg0000'):
            with self.subTest(case=color):
                with self.assertRaises(ValueError):
                    config.hex_to_rgb(color)


if __name__ == '__main__':
    unittest.main()
