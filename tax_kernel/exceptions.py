"""
Typed exception hierarchy for the tax kernel.

Every error has a typed exception class, a ``code`` class attribute
(machine-readable, API-safe) and carries its context as attributes rather
than only in the message string.

The classification engines never raise for incomplete or malformed
transaction input: missing data degrades to skipped rules.  Exceptions in
this module are reserved for the configuration that feeds the engines.

    TaxKernelError (base)
    |
    +-- KnowledgeBaseError
        +-- KnowledgeBaseNotFoundError
        +-- InvalidKnowledgeBaseError
        +-- ConfigIntegrityError

Code                         | When Raised
-----------------------------|---------------------------------------------
KNOWLEDGE_BASE_NOT_FOUND     | Knowledge base YAML file does not exist
INVALID_KNOWLEDGE_BASE       | YAML missing keys or failing validation
CONFIG_INTEGRITY_MISMATCH    | Checksum differs from APPROVED_FINGERPRINT pin
"""

from pathlib import Path


class TaxKernelError(Exception):
    """
    Base exception for all tax kernel errors.

    All subclasses must have a `code` class attribute.
    """

    code: str = "TAX_KERNEL_ERROR"


class KnowledgeBaseError(TaxKernelError):
    """Base exception for jurisdiction knowledge base errors."""

    code: str = "KNOWLEDGE_BASE_ERROR"


class KnowledgeBaseNotFoundError(KnowledgeBaseError):
    """The knowledge base configuration file does not exist."""

    code: str = "KNOWLEDGE_BASE_NOT_FOUND"

    def __init__(self, path: Path):
        self.path = str(path)
        super().__init__(f"Knowledge base file not found: {path}")


class InvalidKnowledgeBaseError(KnowledgeBaseError):
    """The knowledge base could not be parsed or failed validation."""

    code: str = "INVALID_KNOWLEDGE_BASE"

    def __init__(self, source: str, errors: list[str]):
        self.source = source
        self.errors = list(errors)
        super().__init__(
            f"Invalid knowledge base {source}:\n"
            + "\n".join(f"  - {e}" for e in self.errors)
        )


class ConfigIntegrityError(KnowledgeBaseError):
    """Knowledge base checksum does not match the approved pin.

    Attributes:
        config_id: The knowledge base identifier.
        expected: The pinned (approved) checksum.
        actual: The computed checksum.
        pin_path: Path to the APPROVED_FINGERPRINT file.
    """

    code: str = "CONFIG_INTEGRITY_MISMATCH"

    def __init__(
        self,
        config_id: str,
        expected: str,
        actual: str,
        pin_path: Path,
    ):
        self.config_id = config_id
        self.expected = expected
        self.actual = actual
        self.pin_path = str(pin_path)
        super().__init__(
            f"Config integrity check failed for '{config_id}': "
            f"pinned fingerprint {expected[:16]}... != "
            f"computed fingerprint {actual[:16]}... "
            f"(pin file: {pin_path})"
        )
