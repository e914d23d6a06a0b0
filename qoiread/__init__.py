from .converter import qoi_to_png
from .decoder import QOIDecoder, decode, decode_file
from .errors import DecodeError, InvalidFormat, OutOfRange, QOIError
from .image import QOIImage
from .pixel import Pixel
from .utils import to_array, to_pil

__all__ = [
    "QOIDecoder",
    "QOIImage",
    "Pixel",
    "decode",
    "decode_file",
    "qoi_to_png",
    "to_array",
    "to_pil",
    "QOIError",
    "InvalidFormat",
    "DecodeError",
    "OutOfRange",
]
