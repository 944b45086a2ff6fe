import math
import secrets
from datetime import datetime
from typing import Optional

SEQUENCE_WIDTH = 5
VERIFICATION_CODE_BYTES = 4  # 8 hex characters


def reference_prefix(prefix: str, year: int) -> str:
    return f"{prefix}-{year}"


def format_reference(prefix: str, year: int, sequence: int) -> str:
    """AMAN-2026-00045"""
    return f"{reference_prefix(prefix, year)}-{sequence:0{SEQUENCE_WIDTH}d}"


def parse_sequence(reference: str) -> Optional[int]:
    parts = reference.rsplit("-", 1)
    if len(parts) != 2 or not parts[1].isdigit():
        return None
    return int(parts[1])


def next_reference(prefix: str, year: int, last_reference: Optional[str]) -> str:
    """
    Next reference for the year, one past the highest existing sequence.
    Numbers freed by deletions are never reused.
    """
    sequence = 1
    if last_reference:
        last_sequence = parse_sequence(last_reference)
        if last_sequence is not None:
            sequence = last_sequence + 1
    return format_reference(prefix, year, sequence)


def generate_verification_code() -> str:
    return secrets.token_hex(VERIFICATION_CODE_BYTES).upper()


def count_nights(check_in: datetime, check_out: datetime) -> int:
    seconds = abs((check_out - check_in).total_seconds())
    return math.ceil(seconds / 86400)
