REDIS_PREFIX = "@ecwt:"

BASE62_ALPHABET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz"

# TTL used to score revocations of tokens that never expire.
NEVER_EXPIRES_TTL = 2**53 - 1
