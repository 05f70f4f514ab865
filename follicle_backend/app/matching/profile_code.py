# follicle_backend/app/matching/profile_code.py
from __future__ import annotations

"""
Profile codes: a hair profile packed as five "-"-joined tokens in the order
hair_type, porosity, density, thickness, damage. Example: "CU-H-M-F-N".

The code is the only profile data stored next to interaction events, so the
scorers decode it back to attribute values when they need ingredient lists.
"""

from typing import Any, Dict, Mapping, Optional, Union

from follicle_backend.app.matching.policy import ATTRIBUTES
from follicle_backend.app.models.matching import HairProfile
from follicle_backend.app.utils.logs import get_logger

log = get_logger("profile_code")

SEPARATOR = "-"
SEGMENTS = len(ATTRIBUTES)


class ProfileCodeError(ValueError):
    """Raised when a profile code cannot be decoded."""


# value -> token, per attribute
_ENCODE: Dict[str, Dict[str, str]] = {
    "hair_type": {"straight": "ST", "wavy": "WV", "curly": "CU", "coily": "CO", "protective": "PR"},
    "porosity":  {"low": "L", "medium": "M", "high": "H"},
    "density":   {"low": "L", "medium": "M", "high": "H"},
    "thickness": {"fine": "F", "medium": "M", "coarse": "C"},
    "damage":    {"none": "N", "some": "S", "severe": "V"},
}

# used when a value is missing or unknown at encode time
DEFAULT_TOKENS: Dict[str, str] = {
    "hair_type": "CU", "porosity": "M", "density": "M", "thickness": "M", "damage": "N",
}

_DECODE: Dict[str, Dict[str, str]] = {
    attr: {tok: val for val, tok in table.items()} for attr, table in _ENCODE.items()
}

_DISPLAY: Dict[str, Dict[str, str]] = {
    "hair_type": {"ST": "straight hair", "WV": "wavy hair", "CU": "curly hair",
                  "CO": "coily hair", "PR": "protective styles"},
    "porosity":  {"L": "low porosity", "M": "medium porosity", "H": "high porosity"},
    "density":   {"L": "low density", "M": "medium density", "H": "high density"},
    "thickness": {"F": "fine strands", "M": "medium strands", "C": "coarse strands"},
    "damage":    {"N": "healthy hair", "S": "some damage", "V": "severe damage"},
}


def _raw_value(profile: Union[HairProfile, Mapping[str, Any], None], attribute: str) -> str:
    if profile is None:
        return ""
    if isinstance(profile, Mapping):
        v = profile.get(attribute)
    else:
        v = getattr(profile, attribute, None)
    v = getattr(v, "value", v)       # enums
    return str(v).strip().lower() if v is not None else ""


def encode(profile: Union[HairProfile, Mapping[str, Any], None]) -> str:
    """
    Pack a profile into its code. Total: unknown or missing values take the
    default token for that attribute instead of failing.
    """
    tokens = [
        _ENCODE[attr].get(_raw_value(profile, attr), DEFAULT_TOKENS[attr])
        for attr in ATTRIBUTES
    ]
    return SEPARATOR.join(tokens)


def split_code(code: str) -> Optional[list]:
    """Segments of a code, or None when it does not have exactly five."""
    if not isinstance(code, str):
        return None
    parts = code.split(SEPARATOR)
    return parts if len(parts) == SEGMENTS else None


def decode_to_profile(code: str) -> HairProfile:
    parts = split_code(code)
    if parts is None:
        raise ProfileCodeError(f"profile code must have {SEGMENTS} segments: {code!r}")
    values: Dict[str, str] = {}
    for attr, token in zip(ATTRIBUTES, parts):
        value = _DECODE[attr].get(token)
        if value is None:
            raise ProfileCodeError(f"invalid {attr} token {token!r} in profile code {code!r}")
        values[attr] = value
    return HairProfile(**values)


def try_decode_to_profile(code: str) -> Optional[HairProfile]:
    try:
        return decode_to_profile(code)
    except ProfileCodeError as e:
        log.warning(f"[profile_code] {e}")
        return None


def is_valid_code(code: str) -> bool:
    parts = split_code(code)
    if parts is None:
        return False
    return all(tok in _DECODE[attr] for attr, tok in zip(ATTRIBUTES, parts))


def decode_for_display(code: str) -> Optional[Dict[str, str]]:
    """
    Human phrases per attribute ("high porosity", "fine strands"...) for reason
    text only. Unknown tokens fall back to the default phrase; a wrong segment
    count returns None.
    """
    parts = split_code(code)
    if parts is None:
        log.warning(f"[profile_code] cannot display malformed code {code!r}")
        return None
    return {
        attr: _DISPLAY[attr].get(tok, _DISPLAY[attr][DEFAULT_TOKENS[attr]])
        for attr, tok in zip(ATTRIBUTES, parts)
    }


__all__ = [
    "ProfileCodeError", "DEFAULT_TOKENS", "SEPARATOR", "SEGMENTS",
    "encode", "split_code", "decode_to_profile", "try_decode_to_profile",
    "is_valid_code", "decode_for_display",
]
