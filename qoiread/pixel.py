from typing import NamedTuple


class Pixel(NamedTuple):
    """
    A single RGBA colour. Channels are unsigned bytes, alpha defaults to opaque.
    """

    r: int
    g: int
    b: int
    a: int = 255

    @property
    def value(self) -> int:
        """Combined 32-bit view, R in the lowest byte and A in the highest."""
        return self.r | (self.g << 8) | (self.b << 16) | (self.a << 24)

    @classmethod
    def from_value(cls, value: int) -> "Pixel":
        return cls(
            value & 0xFF,
            (value >> 8) & 0xFF,
            (value >> 16) & 0xFF,
            (value >> 24) & 0xFF,
        )

    def color_hash(self) -> int:
        # Callers reduce this modulo the cache size
        return self.r ^ self.g ^ self.b ^ self.a
