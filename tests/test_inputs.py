import pytest

from protodeck.errors import UiError
from protodeck.inputs import (
    decode_base64_url,
    decode_user_input,
    encode_base64,
    encode_base64_url,
)


def test_decodes_plain_hex():
    assert decode_user_input("089601") == bytes.fromhex("089601")


def test_decodes_hex_with_prefix_and_whitespace():
    assert decode_user_input("  0x08 96\n01 ") == bytes.fromhex("089601")


@pytest.mark.parametrize("text", ["", "   ", "\n\t"])
def test_empty_input_is_rejected(text):
    with pytest.raises(UiError, match="Input is empty."):
        decode_user_input(text)


def test_standard_base64_round_trip():
    data = bytes(range(256))
    assert decode_user_input(encode_base64(data)) == data


def test_url_safe_base64_round_trip():
    data = bytes(range(255, -1, -1))
    encoded = encode_base64_url(data)
    assert "=" not in encoded
    assert "+" not in encoded and "/" not in encoded
    assert decode_user_input(encoded) == data
    assert decode_base64_url(encoded) == data


def test_unpadded_and_padded_forms_agree():
    assert decode_user_input("QQ") == decode_user_input("QQ==")
    assert decode_user_input("abc") == decode_user_input("abc=")


def test_url_safe_alphabet_matches_standard():
    assert decode_user_input("-_8") == decode_user_input("+/8=")


def test_uppercase_hex_prefix_is_not_hex():
    with pytest.raises(UiError, match="Failed to decode input as hex or base64."):
        decode_user_input("0X0896")


def test_garbage_is_rejected():
    with pytest.raises(UiError, match="Failed to decode input as hex or base64."):
        decode_user_input("!!!not data!!!")


def test_decode_base64_url_rejects_padding():
    with pytest.raises(UiError, match="Failed to decode URL-safe base64"):
        decode_base64_url("QQ==")


def test_decode_base64_url_rejects_standard_symbols():
    with pytest.raises(UiError, match="Failed to decode URL-safe base64"):
        decode_base64_url("+/8")


def test_encode_base64_is_padded():
    assert len(encode_base64(b"A")) % 4 == 0
    assert encode_base64(b"") == ""