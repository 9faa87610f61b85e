import dataclasses
import logging
import sys
from pathlib import Path

import pytest

_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from spnlab.cipher import CBCMode, CTRMode, ECBMode, KeySchedule, SPNCipher, build_mode
from spnlab.cipher import rng
from spnlab.errors import ErrorKind, InvalidArgumentError, OutOfRangeError, RNGFailureError


# ---------------------------------------------------------------------------
# Key schedule
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("master_key,expected", [
    (0x1234, (0x2345, 0x68AC, 0xE6F5, 0xB837, 0x948C)),
    (0x0000, (0x1111, 0x4444, 0x5555, 0x3333, 0x4444)),
    (0xFFFF, (0x0000, 0x2222, 0xCCCC, 0xEEEE, 0xFFFF)),
])
def test_round_keys(master_key, expected):
    assert KeySchedule(master_key).round_keys == expected


def test_inverse_round_keys():
    ks = KeySchedule(0x1234)
    assert ks.inverse_round_keys == (0xB837, 0xE6F5, 0x68AC, 0x2345, 0x1234)
    assert ks.inverse_round_key(5) == 0x1234
    assert ks.to_dict()["round_keys"][0] == "0x2345"


@pytest.mark.parametrize("round_number", [0, 6, -1])
def test_round_key_out_of_range(round_number):
    with pytest.raises(OutOfRangeError) as excinfo:
        KeySchedule(0x1234).round_key(round_number)
    assert excinfo.value.kind is ErrorKind.RANGE


@pytest.mark.parametrize("master_key,rounds", [(0x10000, 5), (-1, 5), (0x1234, 0), (0x1234, 17)])
def test_key_schedule_rejects(master_key, rounds):
    with pytest.raises(InvalidArgumentError):
        KeySchedule(master_key, rounds)


def test_key_schedule_is_frozen():
    ks = KeySchedule(0x1234)
    with pytest.raises(dataclasses.FrozenInstanceError):
        ks.master_key = 0


# ---------------------------------------------------------------------------
# Block transform
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("key,pt,ct", [
    (0x1234, 0xABCD, 0xD90D),
    (0x1234, 0x0000, 0xC744),
    (0x1234, 0x4849, 0x4922),
    (0x0000, 0x0000, 0x5F4B),
])
def test_known_vectors(key, pt, ct):
    cipher = SPNCipher.from_key(key)
    assert cipher.encrypt_block(pt) == ct
    assert cipher.decrypt_block(ct) == pt


@pytest.mark.parametrize("rounds", [1, 3, 5, 8, 16])
def test_block_roundtrip_any_rounds(rounds):
    cipher = SPNCipher.from_key(0xBEEF, rounds)
    for pt in (0x0000, 0x0001, 0x1234, 0xFFFF, 0x8000):
        assert cipher.decrypt_block(cipher.encrypt_block(pt)) == pt


def test_cipher_base64_key():
    cipher = SPNCipher.from_base64("EjQ=")
    assert cipher.master_key == 0x1234
    assert cipher.rounds == 5
    assert cipher.master_key_base64() == "EjQ="
    with pytest.raises(InvalidArgumentError):
        SPNCipher.from_base64("AA==")


def test_generated_cipher_roundtrip():
    cipher = SPNCipher.generate()
    assert 0 <= cipher.master_key <= 0xFFFF
    assert cipher.decrypt_message(cipher.encrypt_message([1, 2, 3])) == [1, 2, 3]


def test_encrypt_rejects_wide_block():
    with pytest.raises(InvalidArgumentError):
        SPNCipher.from_key(0x1234).encrypt_block(0x10000)


# ---------------------------------------------------------------------------
# Modes
# ---------------------------------------------------------------------------

def test_ecb_known_vector():
    runner = ECBMode(SPNCipher.from_key(0x1234))
    result = runner.encrypt([0x4849, 0x4849])
    assert result.iv is None
    assert result.blocks == [0x4922, 0x4922]
    assert runner.decrypt(result.blocks) == [0x4849, 0x4849]


def test_cbc_known_vector():
    runner = CBCMode(SPNCipher.from_key(0x1234), iv_source=lambda bits: 0x0F0F)
    result = runner.encrypt([0x4849, 0x4849])
    assert result.iv == 0x0F0F
    assert result.blocks == [0xE5D5, 0x8F70]
    assert runner.decrypt(result.blocks, 0x0F0F) == [0x4849, 0x4849]


def test_cbc_distinct_blocks():
    runner = CBCMode(SPNCipher.from_key(0x1234), iv_source=lambda bits: 0x0F0F)
    result = runner.encrypt([0x4849, 0x4A4B])
    assert result.blocks == [0xE5D5, 0xD0E7]
    assert result.blocks[0] != result.blocks[1]
    assert runner.decrypt(result.blocks, result.iv) == [0x4849, 0x4A4B]


def test_ecb_fresh_key_hi():
    runner = ECBMode(SPNCipher.generate())
    block = int.from_bytes(b"HI", "big")
    result = runner.encrypt([block])
    assert len(result.blocks) == 1
    assert runner.decrypt(result.blocks) == [block]


def test_ctr_known_vector():
    runner = CTRMode(SPNCipher.from_key(0x1234), iv_source=lambda bits: 0xA5)
    result = runner.encrypt([0x4849, 0x4849, 0x0000])
    assert result.iv == 0xA5
    assert result.blocks == [0x0E35, 0x7906, 0x9C2B]
    assert runner.decrypt(result.blocks, 0xA5) == [0x4849, 0x4849, 0x0000]


def test_ctr_counter_block():
    assert CTRMode.counter_block(0xA5, 0) == 0xA500
    assert CTRMode.counter_block(0xA5, 0x1FF) == 0xA5FF


@pytest.mark.parametrize("mode", ["ECB", "CBC", "CTR"])
@pytest.mark.parametrize("length", [1, 2, 7, 64, 255])
def test_mode_roundtrip_lengths(mode, length):
    runner = build_mode(mode, SPNCipher.from_key(0x3C5A))
    message = [(i * 0x0101 + 7) & 0xFFFF for i in range(length)]
    result = runner.encrypt(message)
    assert len(result.blocks) == length
    assert runner.decrypt(result.blocks, result.iv) == message


@pytest.mark.parametrize("mode", ["ECB", "CBC", "CTR"])
def test_empty_message(mode):
    runner = build_mode(mode, SPNCipher.from_key(0x1234))
    result = runner.encrypt([])
    assert result.blocks == []
    if mode != "ECB":
        assert result.iv == 0
    assert runner.decrypt([], None) == []


@pytest.mark.parametrize("mode", ["CBC", "CTR"])
def test_missing_iv(mode):
    runner = build_mode(mode, SPNCipher.from_key(0x1234))
    with pytest.raises(InvalidArgumentError):
        runner.decrypt([0x1234], None)


def test_iv_too_wide():
    runner = CTRMode(SPNCipher.from_key(0x1234))
    with pytest.raises(InvalidArgumentError):
        runner.decrypt([0x1234], 0x100)


def test_ctr_counter_wraps(caplog):
    runner = CTRMode(SPNCipher.from_key(0x1234), iv_source=lambda bits: 0x42)
    with caplog.at_level(logging.WARNING, logger="spnlab.cipher.modes"):
        result = runner.encrypt([0] * 257)
    assert result.blocks[256] == result.blocks[0]
    assert "counter span" in caplog.text


def test_unknown_mode():
    with pytest.raises(InvalidArgumentError):
        build_mode("OFB", SPNCipher.from_key(0x1234))


# ---------------------------------------------------------------------------
# Random sources
# ---------------------------------------------------------------------------

def _broken_randbits(bits):
    raise OSError("no entropy")


def test_iv_fallback(monkeypatch, caplog):
    monkeypatch.setattr(rng.secrets, "randbits", _broken_randbits)
    with caplog.at_level(logging.WARNING, logger="spnlab.cipher.rng"):
        iv = rng.random_iv(8)
    assert 0 <= iv < 256
    assert "fallback" in caplog.text


def test_iv_fallback_disabled(monkeypatch):
    monkeypatch.setattr(rng.secrets, "randbits", _broken_randbits)
    with pytest.raises(RNGFailureError) as excinfo:
        rng.random_iv(16, allow_fallback=False)
    assert excinfo.value.kind is ErrorKind.RNG_FAILURE


def test_master_key_has_no_fallback(monkeypatch):
    monkeypatch.setattr(rng.secrets, "randbits", _broken_randbits)
    with pytest.raises(RNGFailureError):
        rng.random_master_key()
