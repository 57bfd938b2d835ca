"""
CREATE2 address derivation.

  address = keccak256(0xff ++ deployer ++ salt ++ keccak256(init_code))[12:]

Constants follow EIP-1014. The salt is the big-endian 32-byte encoding of the
candidate integer.
"""

from Crypto.Hash import keccak

CREATE2_PREFIX = b"\xff"
ADDRESS_LENGTH = 20     # bytes
SALT_LENGTH = 32        # bytes
HASH_LENGTH = 32        # bytes

# Factory and init code hash searched by default
DEFAULT_DEPLOYER = "0xD9885e86fc2ce715D6Bd63E34e73bae13c328EA3"
DEFAULT_INIT_CODE_HASH = "0xf758a73f4b555b68e0615db1367203ef789c977e4b40c411e8e55150beceb363"


def keccak256(data: bytes) -> bytes:
    """Ethereum keccak-256 (pre-standard SHA-3 padding)."""
    return keccak.new(digest_bits=256, data=data).digest()


def parse_hex_bytes(value: str, length: int, what: str = "value") -> bytes:
    """Decode a 0x-prefixed or bare hex string of exactly ``length`` bytes.

    Raises ValueError for bad characters or the wrong length.
    """
    cleaned = value.strip()
    if cleaned[:2].lower() == "0x":
        cleaned = cleaned[2:]
    try:
        raw = bytes.fromhex(cleaned)
    except ValueError:
        raise ValueError(f"Invalid {what} '{value}': not a hex string.") from None
    if len(raw) != length:
        raise ValueError(
            f"Invalid {what} '{value}': expected {length} bytes, got {len(raw)}."
        )
    return raw


def salt_bytes(salt: int) -> bytes:
    """Encode a non-negative salt as a 32-byte big-endian word."""
    if salt < 0:
        raise ValueError(f"Salt cannot be negative, got {salt}")
    return salt.to_bytes(SALT_LENGTH, "big")


def create2_address(deployer: bytes, salt: int, init_code_hash: bytes) -> bytes:
    """Compute the 20-byte CREATE2 address.

    This is the hot-path function called for every candidate.
    """
    digest = keccak256(CREATE2_PREFIX + deployer + salt_bytes(salt) + init_code_hash)
    return digest[-ADDRESS_LENGTH:]


def to_checksum_address(address: bytes) -> str:
    """Format a 20-byte address with EIP-55 mixed-case checksum."""
    hex_addr = address.hex()
    hashed = keccak256(hex_addr.encode("ascii")).hex()
    return "0x" + "".join(
        c.upper() if int(h, 16) >= 8 else c
        for c, h in zip(hex_addr, hashed)
    )
