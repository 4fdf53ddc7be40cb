from __future__ import annotations

from ..domain.constants import BASE62_ALPHABET
from ..domain.ports import TextCodec

_BASE = len(BASE62_ALPHABET)
_INDEX = {char: index for index, char in enumerate(BASE62_ALPHABET)}
_ZERO = BASE62_ALPHABET[0]


def encode(data: bytes) -> str:
    # one leading zero symbol per leading zero byte keeps the mapping bijective
    zeros = len(data) - len(data.lstrip(b"\x00"))
    number = int.from_bytes(data, "big")

    chars: list[str] = []
    while number:
        number, rem = divmod(number, _BASE)
        chars.append(BASE62_ALPHABET[rem])

    return _ZERO * zeros + "".join(reversed(chars))


def decode(text: str) -> bytes:
    """
    Raises:
      - ValueError on a character outside the alphabet
    """
    zeros = len(text) - len(text.lstrip(_ZERO))

    number = 0
    for char in text:
        index = _INDEX.get(char)
        if index is None:
            raise ValueError(f"Invalid base62 character: {char!r}")
        number = number * _BASE + index

    body = number.to_bytes((number.bit_length() + 7) // 8, "big") if number else b""
    return b"\x00" * zeros + body


class Base62TextCodec(TextCodec):
    """TextCodec over the 0-9A-Za-z alphabet."""

    def encode(self, data: bytes) -> str:
        return encode(data)

    def decode(self, text: str) -> bytes:
        return decode(text)
