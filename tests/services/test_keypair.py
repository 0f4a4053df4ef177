from __future__ import annotations

import os
import stat

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ed25519

from iotconfig.services.crypto.keypair import KEY_TYPE_ED25519, Keypair, Network, PublicKey
from iotconfig.services.errors import KeyMaterialError


@pytest.fixture()
def keypair():
    return Keypair.generate()


def test_binary_layout(keypair):
    raw = keypair.to_bytes()
    assert len(raw) == 65
    assert raw[0] == KEY_TYPE_ED25519
    assert raw[33:] == keypair.public_key.key


def test_binary_round_trip(keypair):
    restored = Keypair.from_bytes(keypair.to_bytes())
    assert restored.public_key == keypair.public_key
    assert restored.sign(b"payload") == keypair.sign(b"payload")


def test_testnet_tag_round_trips():
    keypair = Keypair.generate(Network.TESTNET)
    raw = keypair.to_bytes()
    assert raw[0] == 0x11
    assert Keypair.from_bytes(raw).network is Network.TESTNET


def test_public_key_b58_round_trip(keypair):
    text = keypair.public_key.to_b58()
    assert PublicKey.from_b58(text) == keypair.public_key
    assert str(keypair.public_key) == text


def test_sign_and_verify(keypair):
    signature = keypair.sign(b"hello")
    assert len(signature) == 64
    assert keypair.public_key.verify(signature, b"hello")
    assert not keypair.public_key.verify(signature, b"hellO")


@pytest.mark.parametrize("size", [0, 32, 64, 66])
def test_wrong_length_is_rejected(size):
    with pytest.raises(KeyMaterialError):
        Keypair.from_bytes(b"\x01" * size)


def test_mismatched_public_half_is_rejected(keypair):
    raw = bytearray(keypair.to_bytes())
    raw[-1] ^= 0xFF
    with pytest.raises(KeyMaterialError):
        Keypair.from_bytes(bytes(raw))


def test_unsupported_key_type_is_rejected(keypair):
    raw = bytearray(keypair.to_bytes())
    raw[0] = 0x00  # ecc_compact
    with pytest.raises(KeyMaterialError):
        Keypair.from_bytes(bytes(raw))


def test_invalid_b58_text_is_rejected():
    with pytest.raises(KeyMaterialError):
        PublicKey.from_b58("not-a-key")


def test_pem_private_key_is_accepted():
    key = ed25519.Ed25519PrivateKey.generate()
    pem = key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
    keypair = Keypair.from_bytes(pem)
    assert keypair.public_key.verify(keypair.sign(b"x"), b"x")


def test_write_and_read_file(tmp_path, keypair):
    path = tmp_path / "keys" / "keypair.bin"
    keypair.write(path)
    assert Keypair.from_file(path).public_key == keypair.public_key
    if os.name == "posix":
        assert stat.S_IMODE(path.stat().st_mode) == 0o600


@pytest.mark.skipif(os.name != "posix", reason="file modes are posix only")
def test_write_never_exposes_secret_with_loose_mode(tmp_path, keypair):
    fresh = tmp_path / "fresh.bin"
    old_umask = os.umask(0o022)
    try:
        keypair.write(fresh)
    finally:
        os.umask(old_umask)
    assert stat.S_IMODE(fresh.stat().st_mode) == 0o600

    existing = tmp_path / "existing.bin"
    existing.write_bytes(b"old contents that are longer than a keypair file" * 4)
    os.chmod(existing, 0o644)
    keypair.write(existing)
    assert stat.S_IMODE(existing.stat().st_mode) == 0o600
    assert existing.read_bytes() == keypair.to_bytes()


def test_missing_file_raises_key_material_error(tmp_path):
    with pytest.raises(KeyMaterialError):
        Keypair.from_file(tmp_path / "missing.bin")
