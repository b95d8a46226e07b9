"""
Anonymous encryption of secret values with libsodium sealed boxes.

A sealed box generates a new ephemeral key pair for every message, derives the
nonce from the ephemeral and recipient public keys, and prepends the ephemeral
public key to the ciphertext. Only the holder of the recipient's private key can
open it, and the sender keeps nothing that could.
"""

import logging

import attr
import nacl.bindings
import nacl.exceptions
import nacl.public

from .secrets import PublicKeyMaterial, SealedSecret, SecretRecord
from .utils import CryptoInitError, InvalidKeyLength

log = logging.getLogger(__name__)

KEY_SIZE: int = nacl.public.PublicKey.SIZE
SEAL_OVERHEAD: int = nacl.bindings.crypto_box_SEALBYTES


@attr.s(frozen=True)
class CryptoContext:
    """Proof that libsodium has been initialised in this process."""


def init() -> CryptoContext:
    """Initialise libsodium, which must happen before anything is sealed."""
    try:
        nacl.bindings.sodium_init()
    except nacl.exceptions.CryptoError as error:
        raise CryptoInitError(f"Could not initialise libsodium: {error}") from error
    log.debug("Initialised libsodium")
    return CryptoContext()


def check_key(key: bytes) -> bytes:
    if len(key) != KEY_SIZE:
        raise InvalidKeyLength(expected=KEY_SIZE, actual=len(key))
    return key


@attr.s(frozen=True)
class SealingEngine:
    context: CryptoContext = attr.ib(validator=attr.validators.instance_of(CryptoContext))

    def seal(self, record: SecretRecord, key: PublicKeyMaterial) -> SealedSecret:
        recipient = nacl.public.PublicKey(check_key(key.key))
        ciphertext = nacl.public.SealedBox(recipient).encrypt(record.plaintext)
        log.debug(f"Sealed {record.name} for key {key.key_id}")
        return SealedSecret(
            name=record.name,
            ciphertext=bytes(ciphertext),
            key_id=key.key_id)
