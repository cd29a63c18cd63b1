# vmlog/core/colors.py
"""Deterministic avatar colours for board members"""
from typing import Optional

USER_COLORS = (
    "indigo",
    "emerald",
    "rose",
    "amber",
    "violet",
    "cyan",
    "pink",
    "orange",
    "blue",
)


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value & 0x80000000 else value


def color_for_identifier(identifier: str = "default") -> str:
    """Hash an identifier onto the palette so a user keeps one colour everywhere"""
    hash_value = 0
    for char in identifier:
        hash_value = _to_int32(ord(char) + ((hash_value << 5) - hash_value))
    return USER_COLORS[abs(hash_value) % len(USER_COLORS)]


def resolve_user_color(identifier: str, preferred: Optional[str] = None) -> str:
    """Return the user's chosen colour, falling back to the hashed one"""
    if preferred in USER_COLORS:
        return preferred
    return color_for_identifier(identifier)
