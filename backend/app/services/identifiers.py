from __future__ import annotations

import logging
import re
from collections.abc import Callable

from app.core.exceptions import ConflictError, UniqueViolationError, ValidationError
from app.db.storage import Storage
from app.models.staff import IssuedIdentifier

logger = logging.getLogger(__name__)

PREFIX_PATTERN = re.compile(r"^[a-z]$")
IDENTIFIER_PATTERN = re.compile(r"^[a-z]\d{8}$")
SEQUENCE_DIGITS = 4
MAX_SEQUENCE = 10**SEQUENCE_DIGITS - 1


class IdentifierTakenError(ConflictError):
    def __init__(self, code: str):
        super().__init__(f"Identifier {code} already exists", details={"identifier": code})


def validate_prefix_and_year(prefix: str, year: int) -> tuple[str, int]:
    if not isinstance(prefix, str) or not PREFIX_PATTERN.match(prefix):
        raise ValidationError("Prefix must be a single lowercase letter", details={"prefix": prefix})
    if isinstance(year, bool) or not isinstance(year, int) or not 1000 <= year <= 9999:
        raise ValidationError("Year must be a 4-digit number", details={"year": year})
    return prefix, year


def parse_sequence(code: str, prefix: str, year: int) -> int | None:
    if not IDENTIFIER_PATTERN.match(code) or not code.startswith(f"{prefix}{year}"):
        return None
    return int(code[-SEQUENCE_DIGITS:])


class IdentifierAllocator:
    """Issues `<prefix><year><seq4>` codes, densely numbered per (prefix, year).

    Each attempt holds the (prefix, year) advisory lock from the scan until
    commit. The unique constraints on `issued_identifiers` back that up; a
    violation fails the attempt and allocation restarts from a fresh scan.
    """

    def __init__(self, storage: Storage, *, max_attempts: int = 3) -> None:
        self.storage = storage
        self.max_attempts = max(1, max_attempts)

    def next_candidate(self, prefix: str, year: int) -> tuple[str, int]:
        highest = 0
        for code in self.storage.find_by_identifier_prefix(prefix, year):
            sequence = parse_sequence(code, prefix, year)
            if sequence is not None and sequence > highest:
                highest = sequence
        if highest >= MAX_SEQUENCE:
            raise ConflictError(
                f"Identifier sequence exhausted for {prefix}{year}",
                details={"prefix": prefix, "year": year},
            )
        sequence = highest + 1
        return f"{prefix}{year}{sequence:0{SEQUENCE_DIGITS}d}", sequence

    def allocate(self, prefix: str, year: int, *, register: Callable[[str], object] | None = None) -> str:
        """Issue the next identifier; `register` runs in the same transaction with the new code."""
        prefix, year = validate_prefix_and_year(prefix, year)

        last_error: ConflictError | None = None
        for attempt in range(1, self.max_attempts + 1):
            try:
                with self.storage.transaction():
                    self.storage.lock(("identifier", prefix, year))
                    code, sequence = self.next_candidate(prefix, year)
                    if self.storage.identifier_exists(code):
                        raise IdentifierTakenError(code)
                    self.storage.create(IssuedIdentifier(code=code, prefix=prefix, year=year, sequence=sequence))
                    if register is not None:
                        register(code)
            except (IdentifierTakenError, UniqueViolationError) as exc:
                last_error = exc
            else:
                logger.info("Issued identifier %s (attempt %d)", code, attempt)
                return code
            logger.warning(
                "Identifier allocation for %s%d failed on attempt %d/%d: %s",
                prefix,
                year,
                attempt,
                self.max_attempts,
                last_error.message,
            )

        raise ConflictError(
            f"Could not allocate a unique identifier for {prefix}{year} after {self.max_attempts} attempts",
            details={"prefix": prefix, "year": year, "attempts": self.max_attempts},
        )
