"""Conversion of asciicast recordings to animations

Every converter has the same signature:

    converter(input_stream, output_file, frame_interval, progress)

It reads the recording from the text stream `input_stream`, writes the
animation to the binary file `output_file` and reports its progress by calling
`progress.accept(snapshot)` with ProgressSnapshot instances. Converters raise
ConversionError when the recording can't be converted.

Conversion is made of two phases run frame by frame: rasterizing turns the
screen buffer of a frame into something drawable (an image, an SVG group) and
sequencing adds it to the animation. The animation is written to the output
file once all frames have been sequenced.
"""
import logging

from cast2gif import anim, config, raster, term
from cast2gif.asciicast import AsciiCastError, read_records
from cast2gif.exceptions import ConversionError
from cast2gif.plan import OutputFormat
from cast2gif.progress import ProgressSnapshot

logger = logging.getLogger(__name__)


class _RasterEncoder:
    def __init__(self, header, frame_interval, sequence_class):
        theme = config.resolve_theme(header)
        self.rasterizer = raster.FrameRasterizer((header.width, header.height), theme)
        self.sequence = sequence_class(max(1, int(round(1000 * frame_interval))))

    def rasterize(self, index, frame):
        return self.rasterizer.rasterize(frame.buffer)

    def append(self, index, frame, image):
        self.sequence.append(image)

    def write(self, output_file):
        self.sequence.write(output_file)


class _SVGEncoder:
    def __init__(self, header, frame_interval):
        theme = config.resolve_theme(header)
        self.animation = anim.SVGAnimation((header.width, header.height), theme)

    def rasterize(self, index, frame):
        return self.animation.render_frame(index, frame.buffer)

    def append(self, index, frame, group):
        self.animation.append(index, frame, group)

    def write(self, output_file):
        self.animation.write(output_file)


def _convert(input_stream, output_file, frame_interval, progress, make_encoder):
    progress.accept(ProgressSnapshot(0, 0, 0))

    try:
        records = list(read_records(input_stream))
        header, total, frames = term.sampled_frames(records, frame_interval)
    except AsciiCastError as exc:
        raise ConversionError('Could not read cast file') from exc
    except UnicodeDecodeError as exc:
        raise ConversionError('Cast file is not valid UTF-8') from exc

    logger.debug('Recording of {}x{} characters, {} frames to render'
                 .format(header.width, header.height, total))
    progress.accept(ProgressSnapshot(0, 0, total))

    encoder = make_encoder(header, frame_interval)
    for index, frame in enumerate(frames):
        drawable = encoder.rasterize(index, frame)
        progress.accept(ProgressSnapshot(index + 1, index, total))
        encoder.append(index, frame, drawable)
        progress.accept(ProgressSnapshot(index + 1, index + 1, total))

    try:
        encoder.write(output_file)
        output_file.flush()
    except OSError as exc:
        raise ConversionError('Could not write output file') from exc


def convert_to_gif(input_stream, output_file, frame_interval, progress):
    """Render the recording as an animated GIF"""
    def make_encoder(header, interval):
        return _RasterEncoder(header, interval, raster.GifSequence)
    _convert(input_stream, output_file, frame_interval, progress, make_encoder)


def convert_to_png(input_stream, output_file, frame_interval, progress):
    """Render the recording as an animated PNG"""
    def make_encoder(header, interval):
        return _RasterEncoder(header, interval, raster.PngSequence)
    _convert(input_stream, output_file, frame_interval, progress, make_encoder)


def convert_to_svg(input_stream, output_file, frame_interval, progress):
    """Render the recording as an SVG animation"""
    _convert(input_stream, output_file, frame_interval, progress, _SVGEncoder)


CONVERTERS = {
    OutputFormat.GIF: convert_to_gif,
    OutputFormat.PNG: convert_to_png,
    OutputFormat.SVG: convert_to_svg,
}
