from typing import Sequence, Union

from .errors import OutOfRange
from .pixel import Pixel


class QOIImage:
    """
    A decoded QOI image: header fields plus a flat, row-major, channel-interleaved
    pixel buffer. Instances are built by the decoder; the dimensions never change
    but individual pixels can be rewritten with :meth:`set`.
    """

    def __init__(
        self,
        width: int,
        height: int,
        channels: int,
        colorspace: int,
        pixels: bytearray,
    ):
        self._width = width
        self._height = height
        self._channels = channels
        self._colorspace = colorspace
        self._pixels = pixels

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def channels(self) -> int:
        return self._channels

    @property
    def colorspace(self) -> int:
        return self._colorspace

    @property
    def data(self) -> bytes:
        """Snapshot of the raw pixel buffer."""
        return bytes(self._pixels)

    def __len__(self) -> int:
        return self._width * self._height

    def __repr__(self) -> str:
        return (
            f"QOIImage(width={self._width}, height={self._height}, "
            f"channels={self._channels}, colorspace={self._colorspace})"
        )

    def _offset(self, x: int, y: int, caller: str) -> int:
        if not (0 <= x < self._width):
            raise OutOfRange(
                f"QOIImage.{caller}: x={x} is outside 0..{self._width - 1}"
            )

        if not (0 <= y < self._height):
            raise OutOfRange(
                f"QOIImage.{caller}: y={y} is outside 0..{self._height - 1}"
            )

        return (y * self._width + x) * self._channels

    def get(self, x: int, y: int) -> Pixel:
        """
        Read the pixel at (x, y).

        :param x: Column, 0 <= x < width.
        :param y: Row, 0 <= y < height.
        :return: The pixel. Images without an alpha channel report a = 255.
        """
        pos = self._offset(x, y, "get")
        pixels = self._pixels

        if self._channels == 4:
            return Pixel(pixels[pos], pixels[pos + 1], pixels[pos + 2], pixels[pos + 3])

        return Pixel(pixels[pos], pixels[pos + 1], pixels[pos + 2], 255)

    def set(self, x: int, y: int, pixel: Union[Pixel, Sequence[int]]) -> None:
        """
        Overwrite the pixel at (x, y).

        :param x: Column, 0 <= x < width.
        :param y: Row, 0 <= y < height.
        :param pixel: A Pixel or any (r, g, b, a) sequence. Alpha is dropped for
                      3-channel images.
        """
        pos = self._offset(x, y, "set")
        r, g, b, a = pixel

        values = (r, g, b, a) if self._channels == 4 else (r, g, b)
        # Raises on non-int or out-of-range channels before anything is written
        packed = bytes(values)

        self._pixels[pos : pos + len(packed)] = packed
