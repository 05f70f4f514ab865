import pytest

from follicle_backend.app.matching.profile_code import (
    ProfileCodeError,
    decode_for_display,
    decode_to_profile,
    encode,
    is_valid_code,
    try_decode_to_profile,
)
from follicle_backend.app.models.matching import HairProfile

def test_encode_known_profile():
    profile = HairProfile(hair_type="curly", porosity="high", density="medium",
                          thickness="fine", damage="none")
    assert encode(profile) == "CU-H-M-F-N"

def test_encode_accepts_plain_mappings_and_fills_defaults():
    assert encode({"hair_type": "Coily", "porosity": "low"}) == "CO-L-M-M-N"
    assert encode({"hair_type": "mohawk"}) == "CU-M-M-M-N"
    assert encode(None) == "CU-M-M-M-N"

@pytest.mark.parametrize("code", ["ST-L-L-F-N", "WV-M-H-C-S", "PR-H-M-M-V", "CO-L-L-C-S"])
def test_decode_inverts_encode(code):
    assert encode(decode_to_profile(code)) == code

@pytest.mark.parametrize("code", ["", "CU-H-M-F", "CU-H-M-F-N-X", "XX-H-M-F-N", "CU-Q-M-F-N"])
def test_malformed_codes_fail_cleanly(code):
    with pytest.raises(ProfileCodeError):
        decode_to_profile(code)
    assert try_decode_to_profile(code) is None
    assert is_valid_code(code) is False

def test_display_phrases():
    display = decode_for_display("CU-H-M-F-N")
    assert display == {
        "hair_type": "curly hair",
        "porosity": "high porosity",
        "density": "medium density",
        "thickness": "fine strands",
        "damage": "healthy hair",
    }

def test_display_falls_back_per_segment_but_not_on_shape():
    display = decode_for_display("ZZ-H-M-F-N")
    assert display["hair_type"] == "curly hair"
    assert display["porosity"] == "high porosity"
    assert decode_for_display("CU-H") is None
