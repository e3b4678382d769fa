import pytest

from lazyforms.shortcuts import normalize_shortcut, shortcut_token, validated_shortcut


@pytest.mark.parametrize("raw, expected", [
    ("Ctrl+Shift+1", "Ctrl+Shift+1"),
    ("shift+ctrl+a", "Ctrl+Shift+A"),
    ("Cmd+Option+k", "Alt+Meta+K"),
    (" Control + F5 ", "Ctrl+F5"),
    ("q", "Q"),
])
def test_normalize_shortcut(raw, expected):
    assert normalize_shortcut(raw) == expected


@pytest.mark.parametrize("raw", [None, "", "+", "Ctrl+Alt", "Hyper+A", 5])
def test_normalize_shortcut_rejects(raw):
    assert normalize_shortcut(raw) is None


def test_shortcut_token_is_case_insensitive():
    assert shortcut_token("Ctrl+Shift+A") == shortcut_token("shift+ctrl+a") == "ctrl+shift+a"
    assert shortcut_token(None) is None


@pytest.mark.parametrize("raw, expected", [
    ("Ctrl+Alt+L", "Ctrl+Alt+L"),
    ("Ctrl + M", "Ctrl+M"),
    ("L", "Ctrl+Alt+K"),
    ("Ctrl+Alt", "Ctrl+Alt+K"),
    (None, "Ctrl+Alt+K"),
])
def test_validated_shortcut(raw, expected):
    assert validated_shortcut(raw, "Ctrl+Alt+K") == expected
