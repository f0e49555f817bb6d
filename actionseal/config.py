"""
actionseal configuration — all environment-driven settings in one place.
"""
from __future__ import annotations

import base64
import binascii
import os
import secrets
from pathlib import Path
from typing import Optional

from nacl.bindings import crypto_aead_xchacha20poly1305_ietf_KEYBYTES

from .errors import KeyMaterialError

KEY_BYTES = crypto_aead_xchacha20poly1305_ietf_KEYBYTES

# --- Key material ---
DEFAULT_KEY_FILE = Path(__file__).parent.parent / "data" / ".actionseal_key"


def get_key_file() -> Path:
    raw = os.environ.get("ACTIONSEAL_KEY_FILE")
    return Path(raw) if raw else DEFAULT_KEY_FILE


def decode_key(raw: str) -> bytes:
    """Decode a base64 (standard or url-safe) key and check its size."""
    text = raw.strip()
    padded = text + "=" * (-len(text) % 4)
    try:
        if "-" in text or "_" in text:
            key = base64.b64decode(padded, altchars=b"-_", validate=True)
        else:
            key = base64.b64decode(padded, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise KeyMaterialError("Sealing key is not valid base64") from exc
    return check_key(key)


def check_key(key: bytes) -> bytes:
    if not isinstance(key, (bytes, bytearray)) or len(key) != KEY_BYTES:
        raise KeyMaterialError(f"Sealing key must be exactly {KEY_BYTES} bytes")
    return bytes(key)


def generate_key() -> bytes:
    return secrets.token_bytes(KEY_BYTES)


def encode_key(key: bytes) -> str:
    return base64.b64encode(check_key(key)).decode("ascii")


def _key_from_env() -> Optional[bytes]:
    raw = os.environ.get("ACTIONSEAL_KEY")
    if raw is None or not raw.strip():
        return None
    return decode_key(raw)


def load_key() -> bytes:
    """Return the deployment key from ACTIONSEAL_KEY or the key file."""
    key = _key_from_env()
    if key is not None:
        return key
    key_file = get_key_file()
    if key_file.exists():
        return check_key(key_file.read_bytes())
    raise KeyMaterialError(
        "No sealing key configured; set ACTIONSEAL_KEY or ACTIONSEAL_KEY_FILE"
    )


def load_or_create_key() -> bytes:
    """Like load_key, but writes a fresh key file when none exists yet."""
    key = _key_from_env()
    if key is not None:
        return key
    key_file = get_key_file()
    if key_file.exists():
        return check_key(key_file.read_bytes())

    key_file.parent.mkdir(parents=True, exist_ok=True)
    key = generate_key()
    key_file.write_bytes(key)
    key_file.chmod(0o600)
    return key


# --- Action ids ---
def get_id_salt() -> str:
    return os.environ.get("ACTIONSEAL_ID_SALT", "")


# --- Logging ---
def get_log_level() -> str:
    return os.environ.get("ACTIONSEAL_LOG_LEVEL", "INFO").upper()
