import logging
import os
import struct

from .errors import DecodeError, InvalidFormat
from .image import QOIImage
from .pixel import Pixel

logger = logging.getLogger(__name__)


class QOIDecoder:
    """
    Decodes "qoif" byte streams into QOIImage objects.

    The stream uses seven opcodes told apart by their leading bits, a 64-slot
    cache of recently produced pixels addressed by an XOR hash, and run-length
    repeats. There is no end marker; decoding stops once every pixel is written.
    """

    QOI_MAGIC = b"qoif"
    QOI_HEADER_SIZE = 14
    QOI_INDEX_SIZE = 64

    QOI_MASK_2 = 0b11000000
    QOI_MASK_3 = 0b11100000
    QOI_MASK_4 = 0b11110000

    QOI_OP_INDEX = 0b00000000  # 00xxxxxx
    QOI_OP_RUN_8 = 0b01000000  # 010xxxxx
    QOI_OP_RUN_16 = 0b01100000  # 011xxxxx
    QOI_OP_DIFF_8 = 0b10000000  # 10xxxxxx
    QOI_OP_DIFF_16 = 0b11000000  # 110xxxxx
    QOI_OP_DIFF_24 = 0b11100000  # 1110xxxx
    QOI_OP_COLOR = 0b11110000  # 1111xxxx

    @classmethod
    def read_header(cls, data) -> tuple[int, int, int, int]:
        """
        Parse and validate the 14-byte header.

        :param data: Bytes-like object holding at least the header.
        :return: (width, height, channels, colorspace). Opcodes start at QOI_HEADER_SIZE.
        """
        if bytes(data[:4]) != cls.QOI_MAGIC:
            raise InvalidFormat("QOI.decode: The signature of the QOI file is invalid")

        if len(data) < cls.QOI_HEADER_SIZE:
            raise InvalidFormat("QOI.decode: File too short for header")

        # > : Big Endian, I : u32, B : u8
        width, height, channels, colorspace = struct.unpack(
            ">IIBB", data[4 : cls.QOI_HEADER_SIZE]
        )

        if channels not in (3, 4):
            raise InvalidFormat(
                f"QOI.decode: The number of channels declared in the file is invalid ({channels})"
            )

        return width, height, channels, colorspace

    @classmethod
    def decode(cls, file_data) -> QOIImage:
        """
        Decode a QOI file given as a bytes-like object.

        :param file_data: bytes, bytearray or memoryview containing the whole file.
        :return: The decoded QOIImage.
        """
        data = bytes(file_data)
        width, height, channels, colorspace = cls.read_header(data)
        logger.debug(
            "QOI header: %dx%d, %d channels, colorspace %d",
            width,
            height,
            channels,
            colorspace,
        )

        total_pixels = width * height
        # Two bytes (a maximal QOI_OP_RUN_16) cover at most 8224 pixels
        stream_len = len(data) - cls.QOI_HEADER_SIZE
        if stream_len * 4112 < total_pixels:
            raise DecodeError(
                f"QOI.decode: Truncated stream, {stream_len} byte(s) cannot hold "
                f"{total_pixels} pixels"
            )

        result = bytearray(total_pixels * channels)

        index = [Pixel(0, 0, 0, 0)] * cls.QOI_INDEX_SIZE
        r, g, b, a = 0, 0, 0, 255

        data_len = len(data)
        read_pos = cls.QOI_HEADER_SIZE
        write_pos = 0
        run = 0

        def truncated(name, needed):
            logger.debug(
                "QOI stream truncated in %s at offset %d (%d of %d bytes left)",
                name,
                read_pos,
                data_len - read_pos,
                needed,
            )
            return DecodeError(
                f"QOI.decode: Truncated stream, {name} at offset {read_pos} "
                f"needs {needed} byte(s) but {data_len - read_pos} remain"
            )

        for _ in range(total_pixels):
            if run > 0:
                run -= 1

            else:
                if read_pos >= data_len:
                    raise truncated("opcode", 1)

                b1 = data[read_pos]
                read_pos += 1

                if (b1 & cls.QOI_MASK_2) == cls.QOI_OP_INDEX:
                    r, g, b, a = index[b1 & 0x3F]

                elif (b1 & cls.QOI_MASK_3) == cls.QOI_OP_RUN_8:
                    run = b1 & 0x1F

                elif (b1 & cls.QOI_MASK_3) == cls.QOI_OP_RUN_16:
                    if read_pos >= data_len:
                        raise truncated("QOI_OP_RUN_16", 1)
                    run = (((b1 & 0x1F) << 8) | data[read_pos]) + 32
                    read_pos += 1

                else:
                    if (b1 & cls.QOI_MASK_2) == cls.QOI_OP_DIFF_8:
                        r = (r + ((b1 >> 4) & 0x03) - 2) % 256
                        g = (g + ((b1 >> 2) & 0x03) - 2) % 256
                        b = (b + (b1 & 0x03) - 2) % 256

                    elif (b1 & cls.QOI_MASK_3) == cls.QOI_OP_DIFF_16:
                        if read_pos >= data_len:
                            raise truncated("QOI_OP_DIFF_16", 1)
                        b2 = data[read_pos]
                        read_pos += 1

                        r = (r + (b1 & 0x1F) - 16) % 256
                        g = (g + (b2 >> 4) - 8) % 256
                        b = (b + (b2 & 0x0F) - 8) % 256

                    elif (b1 & cls.QOI_MASK_4) == cls.QOI_OP_DIFF_24:
                        if read_pos + 2 > data_len:
                            raise truncated("QOI_OP_DIFF_24", 2)
                        b2 = data[read_pos]
                        b3 = data[read_pos + 1]
                        read_pos += 2

                        # 20 payload bits: rrrrr ggggg bbbbb aaaaa, each biased by 16
                        r = ((((b1 & 0x0F) << 1) | (b2 >> 7)) - 16) % 256
                        g = (((b2 & 0x7C) >> 2) - 16) % 256
                        b = ((((b2 & 0x03) << 3) | (b3 >> 5)) - 16) % 256
                        a = ((b3 & 0x1F) - 16) % 256

                    # QOI_OP_COLOR (1111rgba), the only tag left
                    else:
                        needed = bin(b1 & 0x0F).count("1")
                        if read_pos + needed > data_len:
                            raise truncated("QOI_OP_COLOR", needed)

                        if b1 & 0x08:
                            r = data[read_pos]
                            read_pos += 1
                        if b1 & 0x04:
                            g = data[read_pos]
                            read_pos += 1
                        if b1 & 0x02:
                            b = data[read_pos]
                            read_pos += 1
                        if b1 & 0x01:
                            a = data[read_pos]
                            read_pos += 1

                    px = Pixel(r, g, b, a)
                    index[px.color_hash() % cls.QOI_INDEX_SIZE] = px

            result[write_pos] = r
            result[write_pos + 1] = g
            result[write_pos + 2] = b
            if channels == 4:
                result[write_pos + 3] = a
            write_pos += channels

        logger.debug(
            "Decoded %d pixels from %d of %d stream bytes",
            total_pixels,
            read_pos - cls.QOI_HEADER_SIZE,
            data_len - cls.QOI_HEADER_SIZE,
        )

        return QOIImage(width, height, channels, colorspace, result)

    @classmethod
    def decode_file(cls, path) -> QOIImage:
        """Read a .qoi file fully into memory and decode it."""
        with open(os.fspath(path), "rb") as f:
            content = f.read()

        logger.debug("Read %d bytes from %s", len(content), path)
        return cls.decode(content)


def decode(file_data) -> QOIImage:
    return QOIDecoder.decode(file_data)


def decode_file(path) -> QOIImage:
    return QOIDecoder.decode_file(path)
