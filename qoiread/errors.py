class QOIError(ValueError):
    """Base class for every error raised while reading a QOI image."""


class InvalidFormat(QOIError):
    """The header is not a QOI header (bad magic, short header, bad channels)."""


class DecodeError(QOIError):
    """The opcode stream ended early or could not be parsed."""


class OutOfRange(QOIError, IndexError):
    """A pixel coordinate lies outside the image."""
