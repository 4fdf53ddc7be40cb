from __future__ import annotations

from typing import Any, Optional, Sequence

from ..domain.exceptions import TokenFormatError, ValidationError
from ..domain.ports import Cipher, TextCodec, TupleCodec
from ..domain.value_objects import CanonicalTuple, is_valid_ttl


class TokenCodec:
    """
    Canonical tuple <-> token string.

    encode: serialize -> encrypt -> text-encode
    decode: text-decode -> decrypt -> deserialize

    Decoding failures of any step surface as one TokenFormatError with
    no cause attached, so callers cannot tell which step rejected the
    input.
    """

    def __init__(
        self,
        *,
        key: bytes,
        cipher: Cipher,
        tuple_codec: TupleCodec,
        text_codec: TextCodec,
    ) -> None:
        self.key = key
        self.cipher = cipher
        self.tuple_codec = tuple_codec
        self.text_codec = text_codec

    def encode(self, id_bytes: bytes, ttl: Optional[float], payload: Sequence[Any]) -> str:
        try:
            raw = self.tuple_codec.serialize([id_bytes, ttl, list(payload)])
        except (TypeError, ValueError, OverflowError) as exc:
            raise ValidationError(f"Token data cannot be serialized: {exc}") from exc

        # cipher errors propagate: a token is never emitted without encryption
        encrypted = self.cipher.encrypt(raw, self.key)
        return self.text_codec.encode(encrypted)

    def canonical_payload(self, payload: Sequence[Any]) -> list[Any]:
        """
        Payload exactly as `decode` will return it.

        Runs the tuple codec both ways, so tuples come back as lists and
        no value is shared with the caller. Only call it on a payload that
        `encode` has already accepted.
        """
        return self.tuple_codec.deserialize(self.tuple_codec.serialize(list(payload)))

    def decode(self, token: str) -> CanonicalTuple:
        try:
            encrypted = self.text_codec.decode(token)
            raw = self.cipher.decrypt(encrypted, self.key)
            value = self.tuple_codec.deserialize(raw)
        except Exception:
            raise TokenFormatError("Malformed token.") from None

        if not isinstance(value, list) or len(value) != 3:
            raise TokenFormatError("Malformed token.")

        id_bytes, ttl, payload = value
        if (
            not isinstance(id_bytes, bytes)
            or not is_valid_ttl(ttl)
            or not isinstance(payload, list)
        ):
            raise TokenFormatError("Malformed token.")

        return CanonicalTuple(id_bytes=id_bytes, ttl=ttl, payload=tuple(payload))
