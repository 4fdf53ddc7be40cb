"""
ecwt

Encrypted compact web tokens: stateless, authenticated-encrypted tokens
with an optional TTL, schema-driven payload, and optional server-side
revocation and decode cache.
"""

__version__ = "0.1.0"

from .domain.token import Ecwt
from .domain.exceptions import (
    EcwtError,
    ConfigurationError,
    ValidationError,
    TokenFormatError,
    InvalidTokenError,
    TokenExpiredError,
    TokenRevokedError,
)
from .domain.value_objects import Schema, CanonicalTuple, CacheEntry
from .domain.ports import (
    Identifier,
    IdentitySource,
    Cipher,
    TupleCodec,
    TextCodec,
    RevocationStore,
    DecodeCache,
)

from .application.token_codec import TokenCodec
from .application.factory import EcwtFactory

# Default adapters
from .adapters.snowflake.snowflake import Snowflake, SnowflakeFactory
from .adapters.crypto.aes_gcm import AesGcmCipher
from .adapters.msgpack.tuple_codec import MsgpackTupleCodec
from .adapters.base62 import Base62TextCodec
from .adapters.memory.decode_cache import InMemoryDecodeCache
from .adapters.memory.revocation_store import InMemoryRevocationStore
from .adapters.redis.revocation_store import RedisRevocationStore

__all__ = [
    "__version__",
    # domain core
    "Ecwt",
    "Schema",
    "CanonicalTuple",
    "CacheEntry",
    # ports
    "Identifier",
    "IdentitySource",
    "Cipher",
    "TupleCodec",
    "TextCodec",
    "RevocationStore",
    "DecodeCache",
    # exceptions
    "EcwtError",
    "ConfigurationError",
    "ValidationError",
    "TokenFormatError",
    "InvalidTokenError",
    "TokenExpiredError",
    "TokenRevokedError",
    # application
    "TokenCodec",
    "EcwtFactory",
    # adapters
    "Snowflake",
    "SnowflakeFactory",
    "AesGcmCipher",
    "MsgpackTupleCodec",
    "Base62TextCodec",
    "InMemoryDecodeCache",
    "InMemoryRevocationStore",
    "RedisRevocationStore",
]
