"""
Probe that derives the CREATE2 address of a salt and tests it against a pattern.

AddressProbe is what gets pickled to each worker; the worker calls compile()
once and uses the returned CompiledAddressProbe in its scan loop.
"""

from dataclasses import dataclass
from typing import Optional

from saltrace.core import (
    ADDRESS_LENGTH,
    DEFAULT_DEPLOYER,
    DEFAULT_INIT_CODE_HASH,
    HASH_LENGTH,
    create2_address,
    parse_hex_bytes,
)
from saltrace.matcher import AddressMatcher, MatchMode, MatchPattern, normalize_hex_pattern

DEFAULT_SUFFIX = "d3ad"


@dataclass(frozen=True)
class AddressProbe:
    deployer: bytes
    init_code_hash: bytes
    pattern: MatchPattern

    @classmethod
    def from_hex(
        cls,
        pattern: str,
        mode: MatchMode = MatchMode.SUFFIX,
        deployer: str = DEFAULT_DEPLOYER,
        init_code_hash: str = DEFAULT_INIT_CODE_HASH,
        case_sensitive: bool = False,
    ) -> "AddressProbe":
        """Build a probe from user-facing hex strings.

        Raises ValueError for a malformed deployer, hash, hex pattern or
        regex, so bad input is rejected before any worker starts.
        """
        if pattern is None:
            raise ValueError("Pattern cannot be empty.")
        if mode != MatchMode.REGEX:
            pattern = normalize_hex_pattern(pattern, case_sensitive)
        match_pattern = MatchPattern(mode=mode, pattern=pattern, case_sensitive=case_sensitive)
        match_pattern.compile()
        return cls(
            deployer=parse_hex_bytes(deployer, ADDRESS_LENGTH, "deployer address"),
            init_code_hash=parse_hex_bytes(init_code_hash, HASH_LENGTH, "init code hash"),
            pattern=match_pattern,
        )

    def compile(self) -> "CompiledAddressProbe":
        return CompiledAddressProbe(self.deployer, self.init_code_hash, self.pattern.compile())

    def __call__(self, salt: int) -> Optional[str]:
        return self.compile()(salt)


class CompiledAddressProbe:
    """Worker-local probe; returns the 0x-prefixed address on a match."""

    __slots__ = ("deployer", "init_code_hash", "_matches")

    def __init__(self, deployer: bytes, init_code_hash: bytes, matcher: AddressMatcher):
        self.deployer = deployer
        self.init_code_hash = init_code_hash
        self._matches = matcher

    def __call__(self, salt: int) -> Optional[str]:
        address = create2_address(self.deployer, salt, self.init_code_hash)
        if self._matches(address):
            return "0x" + address.hex()
        return None


def default_probe() -> AddressProbe:
    """Suffix search for d3ad against the default factory."""
    return AddressProbe.from_hex(DEFAULT_SUFFIX, MatchMode.SUFFIX)
