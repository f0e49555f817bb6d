"""
Sealed argument codec.

Bound arguments are sealed with XChaCha20-Poly1305 (libsodium AEAD via
PyNaCl). The action id is the associated data, so a payload sealed for one
action never authenticates under another id. Every seal draws a fresh random
nonce.

Usage:
    from actionseal.codec import seal, unseal

    payload = seal(action_id, (record_id,), key)
    values = unseal(payload, key)
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Sequence, Tuple

import nacl.utils
from nacl.bindings import (
    crypto_aead_xchacha20poly1305_ietf_NPUBBYTES,
    crypto_aead_xchacha20poly1305_ietf_decrypt,
    crypto_aead_xchacha20poly1305_ietf_encrypt,
)
from nacl.exceptions import CryptoError

from .config import check_key
from .errors import IntegrityError, MalformedPayloadError

logger = logging.getLogger(__name__)

NONCE_BYTES = crypto_aead_xchacha20poly1305_ietf_NPUBBYTES

BoundArgumentSnapshot = Tuple[Any, ...]


@dataclass(frozen=True)
class SealedPayload:
    """Sealed bound arguments. The Poly1305 tag trails the ciphertext."""
    action_id: str
    nonce: bytes
    ciphertext: bytes


def _associated_data(action_id: str) -> bytes:
    return action_id.encode("utf-8")


def _check_round_trip(value: Any, path: str) -> None:
    """Reject values JSON would hand back changed (tuples, non-str keys)."""
    if isinstance(value, tuple):
        raise MalformedPayloadError(f"Bound argument {path} is a tuple; use a list")
    if isinstance(value, list):
        for index, item in enumerate(value):
            _check_round_trip(item, f"{path}[{index}]")
    elif isinstance(value, dict):
        for k, item in value.items():
            if not isinstance(k, str):
                raise MalformedPayloadError(
                    f"Bound argument {path} has a {type(k).__name__} key; keys must be str"
                )
            _check_round_trip(item, f"{path}[{k!r}]")


def encode_snapshot(values: Sequence[Any]) -> bytes:
    """Canonical JSON encoding of a snapshot.

    Only values that decode back equal are accepted.
    """
    for index, value in enumerate(values):
        _check_round_trip(value, f"#{index}")
    try:
        return json.dumps(
            list(values), sort_keys=True, separators=(",", ":"), allow_nan=False
        ).encode("utf-8")
    except (TypeError, ValueError) as exc:
        raise MalformedPayloadError(f"Bound arguments are not serializable: {exc}") from exc


def decode_snapshot(plaintext: bytes) -> BoundArgumentSnapshot:
    try:
        values = json.loads(plaintext.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as exc:
        raise MalformedPayloadError("Bound arguments could not be decoded") from exc
    if not isinstance(values, list):
        raise MalformedPayloadError(
            f"Bound arguments must decode to a list, got {type(values).__name__}"
        )
    return tuple(values)


def seal(action_id: str, snapshot: Sequence[Any], key: bytes) -> SealedPayload:
    """Encrypt and authenticate a snapshot for one action id."""
    key = check_key(key)
    plaintext = encode_snapshot(snapshot)
    nonce = nacl.utils.random(NONCE_BYTES)
    ciphertext = crypto_aead_xchacha20poly1305_ietf_encrypt(
        plaintext, _associated_data(action_id), nonce, key
    )
    return SealedPayload(action_id=action_id, nonce=nonce, ciphertext=ciphertext)


def unseal(payload: SealedPayload, key: bytes) -> BoundArgumentSnapshot:
    """Verify and decrypt a payload, then decode the value sequence.

    Verification happens before any decoding of the plaintext.
    """
    key = check_key(key)
    if len(payload.nonce) != NONCE_BYTES:
        logger.warning("Rejected sealed payload for %s: bad nonce length", payload.action_id)
        raise IntegrityError()
    try:
        plaintext = crypto_aead_xchacha20poly1305_ietf_decrypt(
            payload.ciphertext, _associated_data(payload.action_id), payload.nonce, key
        )
    except CryptoError:
        logger.warning("Rejected sealed payload for %s: integrity check failed", payload.action_id)
        raise IntegrityError() from None
    return decode_snapshot(plaintext)
