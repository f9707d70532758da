"""Default settings of cast2gif

There is no configuration file: everything that isn't given on the command
line comes from here or from the header of the recording.
"""
from cast2gif.asciicast import AsciiCastTheme

DEFAULT_FRAME_INTERVAL = '0.1'

# Environment variable holding the log level (debug, info, warning, error)
LOG_LEVEL_ENV = 'CAST2GIF_LOG'
DEFAULT_LOG_LEVEL = 'info'

# Fonts tried in this order for raster output before falling back to the font
# bundled with Pillow. Pillow also looks these up in the system font directories.
FONT_SIZE = 14
FONT_FILES = [
    'DejaVuSansMono.ttf',
    'LiberationMono-Regular.ttf',
    'UbuntuMono-R.ttf',
    'Menlo.ttc',
    'consola.ttf',
]

# xterm colors
DEFAULT_THEME = AsciiCastTheme(
    fg='#e5e5e5',
    bg='#000000',
    palette=':'.join([
        '#000000', '#cd0000', '#00cd00', '#cdcd00',
        '#0000ee', '#cd00cd', '#00cdcd', '#e5e5e5',
        '#7f7f7f', '#ff0000', '#00ff00', '#ffff00',
        '#5c5cff', '#ff00ff', '#00ffff', '#ffffff',
    ])
)


def resolve_theme(header):
    """Return the theme of the recording, or the default theme if it has none"""
    if header.theme is not None:
        return header.theme
    return DEFAULT_THEME


def color_table(theme):
    """Return mapping between the color names used by character cells and
    '#rrggbb' colors

    Names are 'foreground', 'background' and 'color0' to 'color15'. With an 8
    color palette, bright colors reuse their normal counterpart."""
    colors = theme.colors
    table = {
        'foreground': theme.fg,
        'background': theme.bg,
    }
    for index in range(16):
        table['color{}'.format(index)] = colors[index % len(colors)]
    return table


def hex_to_rgb(color):
    """Convert '#rrggbb' to a (red, green, blue) tuple"""
    if len(color) != 7 or not color.startswith('#'):
        raise ValueError('Invalid color: {}'.format(color))
    return tuple(int(color[i:i + 2], 16) for i in (1, 3, 5))
