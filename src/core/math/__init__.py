"""
Core math modules

Целочисленные примитивы с гарантией отсутствия wraparound.
"""

from src.core.math.checked_arithmetic import (
    # Range
    UINT128_MAX,
    # Checked operations
    checked_add,
    checked_mul,
    checked_sub,
    # Type checks
    is_valid_int,
    # Validation
    validate_identity,
    validate_non_negative_amount,
    validate_positive_amount,
)

__all__ = [
    # Checked Arithmetic — Range
    "UINT128_MAX",
    # Checked Arithmetic — Operations
    "checked_add",
    "checked_sub",
    "checked_mul",
    # Checked Arithmetic — Type checks
    "is_valid_int",
    # Checked Arithmetic — Validation
    "validate_positive_amount",
    "validate_non_negative_amount",
    "validate_identity",
]
