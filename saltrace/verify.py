"""
Independent re-check of a found salt.

Recomputes the CREATE2 address from scratch and compares it with the address
reported by the worker and with the search pattern.
"""

from saltrace.core import create2_address, to_checksum_address
from saltrace.probe import AddressProbe


def verify_salt(salt: int, reported_address: str, probe: AddressProbe) -> dict:
    """Verify a worker's result against a fresh derivation.

    Returns dict with:
        address_match, pattern_match, address, checksum_address, error
    """
    result = {
        "address_match": None,
        "pattern_match": None,
        "address": None,
        "checksum_address": None,
        "error": None,
    }

    try:
        address = create2_address(probe.deployer, salt, probe.init_code_hash)
    except (ValueError, OverflowError) as e:
        result["error"] = str(e)
        return result

    hex_addr = address.hex()
    result["address"] = "0x" + hex_addr
    result["checksum_address"] = to_checksum_address(address)
    result["address_match"] = result["address"] == reported_address.lower()
    result["pattern_match"] = probe.pattern.compile()(address)
    return result
