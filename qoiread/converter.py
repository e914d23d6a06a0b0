import logging

from .decoder import QOIDecoder
from .utils import to_pil

logger = logging.getLogger(__name__)


def qoi_to_png(qoi_path, png_path):
    decoded = QOIDecoder.decode_file(qoi_path)

    img = to_pil(decoded)
    img.save(png_path, format="PNG")
    logger.info("Converted %s to %s", qoi_path, png_path)
    return img
