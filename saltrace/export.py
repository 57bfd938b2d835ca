"""
Export a found salt in formats usable by deployment scripts.

Supported formats:
- JSON (salt as decimal and 32-byte hex, address, factory inputs)
- Annotated text file
"""

import json
import os
from dataclasses import asdict, dataclass

from saltrace.core import create2_address, salt_bytes, to_checksum_address
from saltrace.probe import AddressProbe


@dataclass
class ExportedSalt:
    """All information needed to reproduce a CREATE2 deployment."""
    salt: int
    salt_hex: str
    address: str
    checksum_address: str
    deployer: str
    init_code_hash: str
    pattern: str
    mode: str


def prepare_export(salt: int, probe: AddressProbe) -> ExportedSalt:
    address = create2_address(probe.deployer, salt, probe.init_code_hash)
    return ExportedSalt(
        salt=salt,
        salt_hex="0x" + salt_bytes(salt).hex(),
        address="0x" + address.hex(),
        checksum_address=to_checksum_address(address),
        deployer=to_checksum_address(probe.deployer),
        init_code_hash="0x" + probe.init_code_hash.hex(),
        pattern=probe.pattern.pattern,
        mode=probe.pattern.mode.value,
    )


def save_salt_json(export: ExportedSalt, path: str) -> str:
    """Save the export as JSON. Returns the absolute path of the saved file."""
    abs_path = os.path.abspath(path)
    os.makedirs(os.path.dirname(abs_path) or ".", exist_ok=True)
    with open(abs_path, "w") as f:
        json.dump(asdict(export), f, indent=2)
        f.write("\n")
    return abs_path


def save_salt_text(export: ExportedSalt, path: str) -> str:
    """Save the export as a human-readable text file.

    Returns the absolute path of the saved file.
    """
    abs_path = os.path.abspath(path)
    os.makedirs(os.path.dirname(abs_path) or ".", exist_ok=True)

    lines = [
        "# saltrace CREATE2 salt",
        f"# Address:        {export.checksum_address}",
        f"# Pattern:        {export.mode}='{export.pattern}'",
        "#",
        f"# Salt (decimal): {export.salt}",
        f"# Salt (bytes32): {export.salt_hex}",
        "#",
        "# Factory inputs:",
        f"#   Deployer:       {export.deployer}",
        f"#   Init code hash: {export.init_code_hash}",
        "#",
        "# Solidity:",
        f"#   new Contract{{salt: {export.salt_hex}}}(...)",
        "#",
    ]
    with open(abs_path, "w") as f:
        f.write("\n".join(lines) + "\n")
    return abs_path
