from __future__ import annotations

import os

from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from ...domain.ports import Cipher

VERSION = 0x01
NONCE_SIZE = 12
KEY_SIZE = 32
_HEADER_SIZE = 1 + NONCE_SIZE


class AesGcmCipher(Cipher):
    """
    Cipher port implemented with AES-256-GCM from `cryptography`.

    Output layout: version (1 byte) | nonce (12 bytes) | ciphertext + tag.
    The version byte is bound to the ciphertext as associated data.
    """

    key_size = KEY_SIZE

    def encrypt(self, plaintext: bytes, key: bytes) -> bytes:
        header = bytes([VERSION])
        nonce = os.urandom(NONCE_SIZE)
        return header + nonce + AESGCM(key).encrypt(nonce, plaintext, header)

    def decrypt(self, ciphertext: bytes, key: bytes) -> bytes:
        """
        Raises:
          - ValueError on an unknown version or truncated input
          - cryptography.exceptions.InvalidTag if authentication fails
        """
        if len(ciphertext) < _HEADER_SIZE or ciphertext[0] != VERSION:
            raise ValueError("Unsupported ciphertext")

        header = ciphertext[:1]
        nonce = ciphertext[1:_HEADER_SIZE]
        return AESGCM(key).decrypt(nonce, ciphertext[_HEADER_SIZE:], header)
