#!/usr/bin/env python3
"""
actionseal Sealed Argument Codec Tests

- Round-trip of bound arguments
- Non-deterministic sealing
- Tamper, id-swap and wrong-key rejection
- Malformed plaintext handling
"""

from dataclasses import replace

import pytest
from nacl.bindings import crypto_aead_xchacha20poly1305_ietf_encrypt

from actionseal.codec import NONCE_BYTES, SealedPayload, seal, unseal
from actionseal.config import generate_key
from actionseal.errors import IntegrityError, KeyMaterialError, MalformedPayloadError

ACTION_ID = "6a88810ecce4a4e8b59d53b8327d7e98bbf251d7"


def _flip_byte(data: bytes, index: int) -> bytes:
    mutable = bytearray(data)
    mutable[index] ^= 0x01
    return bytes(mutable)


# =============================================================================
# ROUND TRIP
# =============================================================================

class TestRoundTrip:
    @pytest.mark.parametrize("snapshot", [
        (),
        (7, 12),
        ("record-1", None, True, 2.5),
        ({"id": 3, "tags": ["a", "b"]}, [1, [2, 3]]),
    ])
    def test_unseal_restores_snapshot(self, key, snapshot):
        payload = seal(ACTION_ID, snapshot, key)
        assert unseal(payload, key) == snapshot

    def test_unseal_returns_tuple(self, key):
        assert isinstance(unseal(seal(ACTION_ID, [1, 2], key), key), tuple)

    def test_payload_carries_action_id(self, key):
        payload = seal(ACTION_ID, (1,), key)
        assert payload.action_id == ACTION_ID
        assert len(payload.nonce) == NONCE_BYTES

    def test_plaintext_not_visible_in_ciphertext(self, key):
        payload = seal(ACTION_ID, ("very-secret-record",), key)
        assert b"very-secret-record" not in payload.ciphertext


class TestNonDeterminism:
    def test_same_snapshot_seals_differently(self, key):
        first = seal(ACTION_ID, (5, 6), key)
        second = seal(ACTION_ID, (5, 6), key)
        assert first.nonce != second.nonce
        assert first.ciphertext != second.ciphertext

    def test_many_seals_unique(self, key):
        ciphertexts = {seal(ACTION_ID, (1,), key).ciphertext for _ in range(20)}
        assert len(ciphertexts) == 20


# =============================================================================
# INTEGRITY
# =============================================================================

class TestIntegrity:
    def test_altered_ciphertext_rejected(self, key):
        payload = seal(ACTION_ID, (7, 12), key)
        tampered = replace(payload, ciphertext=_flip_byte(payload.ciphertext, 0))
        with pytest.raises(IntegrityError):
            unseal(tampered, key)

    def test_altered_tag_rejected(self, key):
        payload = seal(ACTION_ID, (7, 12), key)
        tampered = replace(payload, ciphertext=_flip_byte(payload.ciphertext, -1))
        with pytest.raises(IntegrityError):
            unseal(tampered, key)

    def test_altered_nonce_rejected(self, key):
        payload = seal(ACTION_ID, (7, 12), key)
        tampered = replace(payload, nonce=_flip_byte(payload.nonce, 3))
        with pytest.raises(IntegrityError):
            unseal(tampered, key)

    def test_truncated_nonce_rejected(self, key):
        payload = seal(ACTION_ID, (7, 12), key)
        with pytest.raises(IntegrityError):
            unseal(replace(payload, nonce=payload.nonce[:8]), key)

    def test_payload_replayed_under_other_id_rejected(self, key):
        payload = seal(ACTION_ID, (7, 12), key)
        replayed = replace(payload, action_id="90b5db271335765a4b0eab01f044b381b5ebd5cd")
        with pytest.raises(IntegrityError):
            unseal(replayed, key)

    def test_wrong_key_rejected(self, key):
        payload = seal(ACTION_ID, (7, 12), key)
        with pytest.raises(IntegrityError):
            unseal(payload, generate_key())

    def test_failure_message_does_not_reveal_cause(self, key):
        payload = seal(ACTION_ID, (7, 12), key)
        with pytest.raises(IntegrityError) as wrong_key:
            unseal(payload, generate_key())
        with pytest.raises(IntegrityError) as bad_tag:
            unseal(replace(payload, ciphertext=_flip_byte(payload.ciphertext, -1)), key)
        assert str(wrong_key.value) == str(bad_tag.value)

    def test_short_key_rejected(self):
        with pytest.raises(KeyMaterialError):
            seal(ACTION_ID, (1,), b"short")


# =============================================================================
# MALFORMED PLAINTEXT
# =============================================================================

def _seal_raw(plaintext: bytes, key: bytes) -> SealedPayload:
    nonce = b"\x00" * NONCE_BYTES
    ciphertext = crypto_aead_xchacha20poly1305_ietf_encrypt(
        plaintext, ACTION_ID.encode(), nonce, key
    )
    return SealedPayload(action_id=ACTION_ID, nonce=nonce, ciphertext=ciphertext)


class TestMalformed:
    def test_non_json_plaintext(self, key):
        with pytest.raises(MalformedPayloadError):
            unseal(_seal_raw(b"\xff\xfenot json", key), key)

    def test_non_list_plaintext(self, key):
        with pytest.raises(MalformedPayloadError):
            unseal(_seal_raw(b'{"id": 1}', key), key)

    def test_unserializable_snapshot_rejected_at_seal(self, key):
        with pytest.raises(MalformedPayloadError):
            seal(ACTION_ID, (object(),), key)

    def test_nan_rejected_at_seal(self, key):
        with pytest.raises(MalformedPayloadError):
            seal(ACTION_ID, (float("nan"),), key)


class TestLossyValues:
    """Values JSON would hand back changed are refused instead."""

    def test_int_dict_key_rejected(self, key):
        with pytest.raises(MalformedPayloadError):
            seal(ACTION_ID, ({1: "a"},), key)

    def test_nested_int_dict_key_rejected(self, key):
        with pytest.raises(MalformedPayloadError):
            seal(ACTION_ID, ([{"ok": {2: "b"}}],), key)

    def test_nested_tuple_rejected(self, key):
        with pytest.raises(MalformedPayloadError):
            seal(ACTION_ID, ((1, 2),), key)

    def test_tuple_inside_dict_rejected(self, key):
        with pytest.raises(MalformedPayloadError):
            seal(ACTION_ID, ({"pair": (1, 2)},), key)

    def test_str_keys_and_lists_round_trip(self, key):
        snapshot = ({"1": "a", "rows": [[1, 2], {"k": None}]},)
        assert unseal(seal(ACTION_ID, snapshot, key), key) == snapshot
