from __future__ import annotations

from typing import Any, Sequence

import msgpack

from ...domain.ports import TupleCodec


class MsgpackTupleCodec(TupleCodec):
    """TupleCodec backed by MessagePack; sequences always decode as lists."""

    def serialize(self, value: Sequence[Any]) -> bytes:
        return msgpack.packb(list(value), use_bin_type=True)

    def deserialize(self, data: bytes) -> Any:
        # unpackb raises ExtraData on trailing bytes
        return msgpack.unpackb(data, raw=False, strict_map_key=False)
