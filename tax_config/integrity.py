"""
Knowledge base integrity: checksum pinning for approved tables.

When the directory holding a knowledge base YAML file also contains an
APPROVED_FINGERPRINT file, the computed checksum must match the pinned
value.  This prevents unreviewed edits to approved tax tables.

The pin file is a single line: the SHA-256 hex string reported as
``checksum`` by ``tax_config.loader.parse_knowledge_base``.

If no APPROVED_FINGERPRINT file exists, the check is skipped
(draft/dev workflow).
"""

from __future__ import annotations

from pathlib import Path

from tax_kernel.exceptions import ConfigIntegrityError

PINFILE_NAME = "APPROVED_FINGERPRINT"


def read_pinned_fingerprint(config_dir: Path) -> str | None:
    """Read the APPROVED_FINGERPRINT file, or None if absent."""
    pin_path = config_dir / PINFILE_NAME
    if not pin_path.is_file():
        return None
    return pin_path.read_text().strip()


def verify_fingerprint_pin(
    config_id: str,
    checksum: str,
    config_dir: Path,
) -> None:
    """Verify that the computed checksum matches the pin file.

    No-op if no APPROVED_FINGERPRINT file exists.

    Raises:
        ConfigIntegrityError: If pin exists and checksum does not match.
    """
    pinned = read_pinned_fingerprint(config_dir)
    if pinned is None:
        return

    if checksum != pinned:
        raise ConfigIntegrityError(
            config_id=config_id,
            expected=pinned,
            actual=checksum,
            pin_path=config_dir / PINFILE_NAME,
        )
