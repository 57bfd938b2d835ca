"""Pattern matching strategies for CREATE2 addresses.

Patterns are tested against the 40 hex digits of an address, without 0x.
Plain patterns see the lowercase form. Case-sensitive patterns see the
EIP-55 checksum form, so ``--prefix C0FFEE`` only accepts addresses whose
checksum spells it in capitals.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from saltrace.core import ADDRESS_LENGTH, to_checksum_address

ADDRESS_HEX_LENGTH = ADDRESS_LENGTH * 2
HEX_DIGITS = frozenset("0123456789abcdefABCDEF")


class MatchMode(Enum):
    PREFIX = "prefix"
    SUFFIX = "suffix"
    CONTAINS = "contains"
    REGEX = "regex"


@dataclass(frozen=True)
class MatchPattern:
    """Immutable, picklable pattern; workers call compile() once received."""
    mode: MatchMode
    pattern: str
    case_sensitive: bool = False

    def compile(self) -> "AddressMatcher":
        if self.mode == MatchMode.REGEX:
            flags = 0 if self.case_sensitive else re.IGNORECASE
            regex = compile_regex(self.pattern, flags)
            test = lambda digits: regex.search(digits) is not None
        elif self.mode == MatchMode.PREFIX:
            test = lambda digits: digits.startswith(self.pattern)
        elif self.mode == MatchMode.SUFFIX:
            test = lambda digits: digits.endswith(self.pattern)
        else:
            test = lambda digits: self.pattern in digits
        return AddressMatcher(test, checksum=self.case_sensitive)


class AddressMatcher:
    """Worker-local matcher over raw 20-byte addresses."""

    __slots__ = ("_test", "checksum")

    def __init__(self, test: Callable[[str], bool], checksum: bool = False):
        self._test = test
        self.checksum = checksum

    def digits(self, address: bytes) -> str:
        """The 40 hex digits the pattern is tested against."""
        if self.checksum:
            return to_checksum_address(address)[2:]
        return address.hex()

    def __call__(self, address: bytes) -> bool:
        return self._test(self.digits(address))


def compile_regex(pattern: str, flags: int = 0) -> re.Pattern:
    """Compile a user regex, raising ValueError instead of re.error."""
    try:
        return re.compile(pattern, flags)
    except re.error as e:
        raise ValueError(f"Invalid regex '{pattern}': {e}") from None


def normalize_hex_pattern(pattern: str, case_sensitive: bool = False) -> str:
    """Check a hex address fragment and return it in matching form.

    Accepts an optional 0x prefix. Lowercases unless ``case_sensitive``, in
    which case the casing is kept for checksum matching.
    Raises ValueError for empty, non-hex or over-long fragments.
    """
    cleaned = pattern.strip()
    if cleaned[:2] in ("0x", "0X"):
        cleaned = cleaned[2:]
    if not cleaned:
        raise ValueError("Pattern cannot be empty.")
    if not HEX_DIGITS.issuperset(cleaned):
        raise ValueError(
            f"Pattern '{pattern}' contains non-hex characters. "
            "Only 0-9 and a-f are valid."
        )
    if len(cleaned) > ADDRESS_HEX_LENGTH:
        raise ValueError(
            f"Pattern length {len(cleaned)} exceeds the {ADDRESS_HEX_LENGTH} "
            "hex digits of an address."
        )
    return cleaned if case_sensitive else cleaned.lower()


def estimate_difficulty(pattern: MatchPattern, upper_bound: Optional[int] = None) -> dict:
    """Estimate expected attempts and the chance that a keyspace holds a match.

    Each letter of a case-sensitive pattern halves the odds, since its
    checksum casing is an extra coin flip.

    Returns dict with: expected_attempts, estimated_seconds_per_core,
    match_probability (None without ``upper_bound``), difficulty_description
    """
    if pattern.mode == MatchMode.REGEX:
        return {
            "expected_attempts": None,
            "estimated_seconds_per_core": None,
            "match_probability": None,
            "difficulty_description": "Cannot estimate for regex",
        }

    n = len(pattern.pattern)
    expected = 16 ** n
    if pattern.mode == MatchMode.CONTAINS:
        expected /= max(1, ADDRESS_HEX_LENGTH - n + 1)
    if pattern.case_sensitive:
        expected *= 2 ** sum(c.isalpha() for c in pattern.pattern)

    salts_per_sec = 100_000  # conservative single-core estimate
    secs = expected / salts_per_sec

    probability = None
    if upper_bound is not None:
        per_salt = min(1.0, 1.0 / expected)
        probability = 1.0 - (1.0 - per_salt) ** upper_bound

    if expected < 100:
        desc = "Instant"
    elif expected < 1_000_000:
        desc = "Seconds"
    elif expected < 100_000_000:
        desc = "Minutes"
    elif expected < 10_000_000_000:
        desc = "Hours"
    elif expected < 1_000_000_000_000:
        desc = "Days"
    else:
        desc = "Weeks+ (consider a shorter pattern)"

    return {
        "expected_attempts": int(expected),
        "estimated_seconds_per_core": secs,
        "match_probability": probability,
        "difficulty_description": desc,
    }
