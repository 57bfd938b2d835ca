import pytest

from saltrace.matcher import (
    MatchMode,
    MatchPattern,
    compile_regex,
    estimate_difficulty,
    normalize_hex_pattern,
)

ADDR = bytes.fromhex("4d1a2e2bb4f88f0250f26ffff098b0b30b26bf38")
# EIP-55 form: 0x4D1A2e2bB4F88F0250f26Ffff098B0b30B26BF38


@pytest.mark.parametrize(
    "mode,pattern,expected",
    [
        (MatchMode.PREFIX, "4d1a", True),
        (MatchMode.PREFIX, "bf38", False),
        (MatchMode.SUFFIX, "bf38", True),
        (MatchMode.SUFFIX, "d3ad", False),
        (MatchMode.CONTAINS, "ffff", True),
        (MatchMode.CONTAINS, "beef", False),
        (MatchMode.REGEX, "^4D1A.*38$", True),
        (MatchMode.REGEX, "^(dead|beef)", False),
    ],
)
def test_lowercase_matching(mode, pattern, expected):
    assert MatchPattern(mode, pattern).compile()(ADDR) is expected


@pytest.mark.parametrize(
    "mode,pattern,expected",
    [
        (MatchMode.PREFIX, "4D1A2e", True),
        (MatchMode.PREFIX, "4d1a2e", False),
        (MatchMode.SUFFIX, "BF38", True),
        (MatchMode.SUFFIX, "bf38", False),
        (MatchMode.CONTAINS, "6Ffff", True),
        (MatchMode.REGEX, "^4D1A", True),
        (MatchMode.REGEX, "^4d1a", False),
    ],
)
def test_case_sensitive_matching_uses_checksum_form(mode, pattern, expected):
    matcher = MatchPattern(mode, pattern, case_sensitive=True).compile()
    assert matcher.digits(ADDR) == "4D1A2e2bB4F88F0250f26Ffff098B0b30B26BF38"
    assert matcher(ADDR) is expected


def test_normalize_hex_pattern():
    assert normalize_hex_pattern(" D3AD ") == "d3ad"
    assert normalize_hex_pattern("0xBEEF") == "beef"
    assert normalize_hex_pattern("0XBeEf", case_sensitive=True) == "BeEf"
    for bad in ["", "0x", "xyz", "g00d", "0" * 41]:
        with pytest.raises(ValueError):
            normalize_hex_pattern(bad)


def test_invalid_regex_raises_value_error():
    with pytest.raises(ValueError, match="Invalid regex"):
        compile_regex("(")
    with pytest.raises(ValueError):
        MatchPattern(MatchMode.REGEX, "[a-").compile()


def test_estimate_difficulty():
    est = estimate_difficulty(MatchPattern(MatchMode.SUFFIX, "d3ad"), upper_bound=500_000)
    assert est["expected_attempts"] == 65536
    assert est["difficulty_description"] == "Seconds"
    assert 0.99 < est["match_probability"] < 1.0

    est = estimate_difficulty(MatchPattern(MatchMode.PREFIX, "d3ad"))
    assert est["match_probability"] is None

    est = estimate_difficulty(MatchPattern(MatchMode.REGEX, "^dead"))
    assert est["expected_attempts"] is None
    assert est["difficulty_description"] == "Cannot estimate for regex"


def test_estimate_difficulty_counts_checksum_letters():
    est = estimate_difficulty(MatchPattern(MatchMode.SUFFIX, "D3AD", case_sensitive=True))
    assert est["expected_attempts"] == 65536 * 8


def test_estimate_difficulty_zero_keyspace():
    est = estimate_difficulty(MatchPattern(MatchMode.PREFIX, "d3ad"), upper_bound=0)
    assert est["match_probability"] == 0.0
    est = estimate_difficulty(MatchPattern(MatchMode.CONTAINS, "a"), upper_bound=0)
    assert est["match_probability"] == 0.0
