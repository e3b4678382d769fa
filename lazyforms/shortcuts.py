from typing import Optional

from .constants import SHORTCUT_MODIFIERS

_MODIFIER_ALIASES = {
    "ctrl": "Ctrl",
    "control": "Ctrl",
    "shift": "Shift",
    "alt": "Alt",
    "option": "Alt",
    "meta": "Meta",
    "cmd": "Meta",
    "command": "Meta",
}


def normalize_shortcut(raw) -> Optional[str]:
    """Canonical ``Ctrl+Shift+Alt+Meta+Key`` form of a key combo.

    Returns None for empty input and for combos that end in a modifier
    (``Ctrl+Alt``), which cannot be pressed as a shortcut.
    """
    if not isinstance(raw, str):
        return None
    parts = [p.strip() for p in raw.split("+") if p.strip()]
    if not parts:
        return None
    *modifier_parts, key = parts
    if key.lower() in _MODIFIER_ALIASES:
        return None
    modifiers = set()
    for part in modifier_parts:
        modifier = _MODIFIER_ALIASES.get(part.lower())
        if modifier is None:
            return None
        modifiers.add(modifier)
    if len(key) == 1:
        key = key.upper()
    ordered = [m for m in SHORTCUT_MODIFIERS if m in modifiers]
    return "+".join(ordered + [key])


def shortcut_token(raw) -> Optional[str]:
    """Case-insensitive comparison form used to match pressed combos."""
    normalized = normalize_shortcut(raw)
    return normalized.lower() if normalized else None


def validated_shortcut(raw, default: str) -> str:
    """Shortcut setting with a non-modifier final key, else ``default``."""
    if not isinstance(raw, str):
        return default
    parts = [p.strip() for p in raw.split("+") if p.strip()]
    if len(parts) < 2 or parts[-1].lower() in _MODIFIER_ALIASES:
        return default
    return "+".join(parts)
