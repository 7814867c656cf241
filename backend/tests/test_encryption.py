import pytest

from lp_builder.utils.encryption import EncryptionKeyError, decrypt, encrypt

SECRET = "x" * 32


def test_encrypt_produces_three_hex_parts():
    token = encrypt("AIza-secret", secret=SECRET)

    iv, tag, ciphertext = token.split(":")
    assert len(bytes.fromhex(iv)) == 16
    assert len(bytes.fromhex(tag)) == 16
    assert bytes.fromhex(ciphertext)
    assert decrypt(token, secret=SECRET) == "AIza-secret"


def test_encrypt_uses_a_fresh_iv():
    assert encrypt("same", secret=SECRET) != encrypt("same", secret=SECRET)


def test_plaintext_is_returned_unchanged():
    assert decrypt("plain-api-key", secret=SECRET) == "plain-api-key"


def test_wrong_key_returns_input_unchanged():
    token = encrypt("value", secret=SECRET)

    assert decrypt(token, secret="y" * 32) == token


def test_short_key_is_rejected():
    with pytest.raises(EncryptionKeyError):
        encrypt("value", secret="short")


def test_key_comes_from_config(app):
    token = encrypt("from-config")

    assert decrypt(token) == "from-config"


def test_decrypt_without_a_configured_key_returns_input(app):
    token = encrypt("value", secret=SECRET)
    app.config["ENCRYPTION_KEY"] = None

    assert decrypt(token) == token
