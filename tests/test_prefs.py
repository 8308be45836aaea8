import pytest

from protodeck.errors import UiError
from protodeck.prefs import (
    DEFAULT_FRAME_NAME_TEMPLATE,
    KEY_CURRENT,
    KEY_FRAME_NAME_TEMPLATE,
    KEY_NEXT_ID,
    KEY_THEME_PREF,
    Preferences,
    download_filename,
    sanitize_filename,
)


@pytest.mark.parametrize("theme", ["light", "dark", "system"])
def test_store_theme_pref(theme):
    storage = {}
    Preferences(storage).store_theme_pref(f"  {theme} ")
    assert storage[KEY_THEME_PREF] == theme


def test_store_theme_pref_rejects_unknown():
    storage = {}
    with pytest.raises(UiError, match="Invalid theme pref"):
        Preferences(storage).store_theme_pref("sepia")
    assert KEY_THEME_PREF not in storage


def test_frame_name_template_defaults():
    assert Preferences().load_frame_name_template() == DEFAULT_FRAME_NAME_TEMPLATE


def test_frame_name_template_round_trip_and_reset():
    storage = {}
    prefs = Preferences(storage)
    prefs.store_frame_name_template("  {source}-{idx1}  ")
    assert prefs.load_frame_name_template() == "{source}-{idx1}"
    prefs.store_frame_name_template(DEFAULT_FRAME_NAME_TEMPLATE)
    assert KEY_FRAME_NAME_TEMPLATE not in storage
    prefs.store_frame_name_template("custom")
    prefs.store_frame_name_template("   ")
    assert KEY_FRAME_NAME_TEMPLATE not in storage


def test_current_message_round_trip():
    prefs = Preferences()
    assert prefs.current_message() is None
    prefs.set_current_message(42)
    assert prefs.current_message() == 42
    prefs.set_current_message(None)
    assert prefs.current_message() is None


def test_current_message_blank_is_none():
    assert Preferences({KEY_CURRENT: "   "}).current_message() is None


def test_current_message_invalid_raises():
    with pytest.raises(UiError, match="Invalid current message id."):
        Preferences({KEY_CURRENT: "abc"}).current_message()


def test_alloc_message_id_increments():
    storage = {}
    prefs = Preferences(storage)
    first = prefs.alloc_message_id()
    second = prefs.alloc_message_id()
    assert first == 1
    assert second == first + 1
    assert storage[KEY_NEXT_ID] == str(second + 1)


def test_alloc_message_id_recovers_from_garbage():
    prefs = Preferences({KEY_NEXT_ID: "nonsense"})
    assert prefs.alloc_message_id() == 1


def test_alloc_message_id_saturates():
    top = 2**64 - 1
    storage = {KEY_NEXT_ID: str(top)}
    assert Preferences(storage).alloc_message_id() == top
    assert storage[KEY_NEXT_ID] == str(top)


def test_sanitize_filename():
    assert sanitize_filename("My  file!") == "My-file"


@pytest.mark.parametrize("name", ["  a -- b  ", "--x--", "é ü ß name", "a/b\\c"])
def test_sanitize_filename_invariants(name):
    out = sanitize_filename(name)
    assert "--" not in out
    assert not out.startswith("-") and not out.endswith("-")
    assert all(ch.isascii() and (ch.isalnum() or ch in "-_") for ch in out)


def test_download_filename_falls_back_to_id():
    assert download_filename("!!!", 7) == "message-7.bin"


def test_download_filename_uses_sanitized_name():
    assert download_filename("a b", 3) == "a-b.bin"