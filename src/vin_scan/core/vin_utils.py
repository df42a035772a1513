"""
VIN Utilities - Single Source of Truth
======================================

Check-digit validation and VIN extraction from free OCR text.
Every other module calls into here rather than re-implementing the
ISO 3779 rules.
"""

import re
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple, FrozenSet

logger = logging.getLogger(__name__)


# =============================================================================
# VIN CONSTANTS
# =============================================================================

class VINConstants:
    """Immutable VIN specification constants per ISO 3779 / NHTSA."""

    LENGTH: int = 17

    # Valid characters (I, O, Q excluded to avoid confusion with 1, 0)
    VALID_CHARS: FrozenSet[str] = frozenset("0123456789ABCDEFGHJKLMNPRSTUVWXYZ")
    INVALID_CHARS: FrozenSet[str] = frozenset("IOQ")

    # 0-based index of the check digit (position 9 in the printed VIN)
    CHECK_DIGIT_INDEX: int = 8

    # Checksum weights by position (NHTSA standard)
    CHECKSUM_WEIGHTS: Tuple[int, ...] = (8, 7, 6, 5, 4, 3, 2, 10, 0, 9, 8, 7, 6, 5, 4, 3, 2)

    # Character to value mapping for checksum (ISO 3779)
    CHAR_VALUES: Dict[str, int] = {
        'A': 1, 'B': 2, 'C': 3, 'D': 4, 'E': 5, 'F': 6, 'G': 7, 'H': 8,
        'J': 1, 'K': 2, 'L': 3, 'M': 4, 'N': 5, 'P': 7, 'R': 9,
        'S': 2, 'T': 3, 'U': 4, 'V': 5, 'W': 6, 'X': 7, 'Y': 8, 'Z': 9,
        '0': 0, '1': 1, '2': 2, '3': 3, '4': 4, '5': 5, '6': 6, '7': 7, '8': 8, '9': 9
    }


VIN_LENGTH = VINConstants.LENGTH
VIN_VALID_CHARS = VINConstants.VALID_CHARS
VIN_INVALID_CHARS = VINConstants.INVALID_CHARS

_VIN_PATTERN = re.compile(r'^[A-HJ-NPR-Z0-9]{17}$', re.IGNORECASE)
_CANDIDATE_PATTERN = re.compile(r'[A-HJ-NPR-Z0-9]{17}', re.IGNORECASE)


# =============================================================================
# CHECK DIGIT
# =============================================================================

def calculate_check_digit(vin: str) -> Optional[str]:
    """
    Calculate the expected check digit for a VIN.

    The check digit (position 9) is calculated by:
    1. Assigning numeric values to each character
    2. Multiplying by position weights
    3. Summing and taking mod 11
    4. Result 10 becomes 'X'

    Args:
        vin: 17-character VIN (check digit position is ignored)

    Returns:
        Expected check digit ('0'-'9' or 'X'), or None if the input
        has the wrong length or a character outside the VIN alphabet
    """
    if not isinstance(vin, str) or len(vin) != VIN_LENGTH:
        return None

    total = 0
    for i, char in enumerate(vin.upper()):
        if i == VINConstants.CHECK_DIGIT_INDEX:
            continue
        value = VINConstants.CHAR_VALUES.get(char)
        if value is None:
            return None
        total += value * VINConstants.CHECKSUM_WEIGHTS[i]

    remainder = total % 11
    return 'X' if remainder == 10 else str(remainder)


def is_valid_vin(candidate: str) -> bool:
    """
    Check a VIN against the ISO 3779 check-digit algorithm.

    Never raises: wrong type, wrong length and characters outside
    ``[A-HJ-NPR-Z0-9]`` all return False.

    Examples:
        >>> is_valid_vin("1HGBH41JXMN109186")
        True
        >>> is_valid_vin("1HGBH41J1MN109186")
        False
    """
    if not isinstance(candidate, str) or not _VIN_PATTERN.match(candidate):
        return False

    expected = calculate_check_digit(candidate)
    return expected is not None and candidate[VINConstants.CHECK_DIGIT_INDEX].upper() == expected


@dataclass
class VINValidationResult:
    """Detailed result of VIN validation."""
    vin: str
    is_valid_length: bool
    has_valid_chars: bool
    invalid_chars: List[str]
    checksum_valid: bool
    expected_check_digit: Optional[str]
    is_fully_valid: bool

    def to_dict(self) -> Dict:
        return {
            'vin': self.vin,
            'is_valid_length': self.is_valid_length,
            'has_valid_chars': self.has_valid_chars,
            'invalid_chars': self.invalid_chars,
            'checksum_valid': self.checksum_valid,
            'expected_check_digit': self.expected_check_digit,
            'is_fully_valid': self.is_fully_valid,
        }


def validate_vin(vin: str) -> VINValidationResult:
    """
    Validate a VIN and report why it fails, if it does.

    Surrounding whitespace is stripped and the VIN is upper-cased before
    checking. ``is_fully_valid`` always agrees with :func:`is_valid_vin`
    on the normalized string.
    """
    vin = vin.upper().strip()

    is_valid_length = len(vin) == VIN_LENGTH
    invalid_chars = [c for c in vin if c not in VIN_VALID_CHARS]
    has_valid_chars = not invalid_chars

    expected_check_digit = None
    checksum_valid = False
    if is_valid_length and has_valid_chars:
        expected_check_digit = calculate_check_digit(vin)
        checksum_valid = vin[VINConstants.CHECK_DIGIT_INDEX] == expected_check_digit

    return VINValidationResult(
        vin=vin,
        is_valid_length=is_valid_length,
        has_valid_chars=has_valid_chars,
        invalid_chars=invalid_chars,
        checksum_valid=checksum_valid,
        expected_check_digit=expected_check_digit,
        is_fully_valid=is_valid_length and has_valid_chars and checksum_valid,
    )


# =============================================================================
# TEXT EXTRACTION
# =============================================================================

def find_vin_candidates(text: str) -> List[str]:
    """
    Return every 17-character run of VIN characters, in scan order.

    Runs are matched greedily left to right without overlap, so I, O, Q or
    any separator breaks a run. Candidates keep their original case.
    """
    if not text:
        return []
    return _CANDIDATE_PATTERN.findall(text)


def extract_vin_from_text(text: str) -> Optional[str]:
    """
    Pull the first check-digit-valid VIN out of arbitrary OCR text.

    A syntactic candidate with a wrong check digit is skipped in favour
    of a later valid one.

    Args:
        text: Raw OCR output

    Returns:
        Upper-cased VIN, or None if no candidate validates

    Examples:
        >>> extract_vin_from_text("VIN: 1HGBH41JXMN109186 Model: Civic")
        '1HGBH41JXMN109186'
        >>> extract_vin_from_text("No VIN here, just random text") is None
        True
    """
    candidates = find_vin_candidates(text)
    for candidate in candidates:
        if is_valid_vin(candidate):
            return candidate.upper()

    if candidates:
        logger.debug(f"{len(candidates)} VIN-shaped candidate(s) failed the check digit: {candidates}")
    return None
