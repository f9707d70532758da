class Cast2GifError(Exception):
    """Base class for errors reported to the user as-is"""


class ArgumentError(Cast2GifError):
    """Raised when a value supplied on the command line is invalid"""


class PathError(Cast2GifError):
    """Raised when the recording or the output file can't be used"""


class FormatNotImplementedError(Cast2GifError, NotImplementedError):
    """Raised when no converter exists for the requested output format"""


class ConversionError(Cast2GifError):
    """Raised by the conversion worker when a recording can't be converted"""
