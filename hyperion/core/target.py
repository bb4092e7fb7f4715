"""Conversion between compact difficulty values and 256-bit targets."""

from __future__ import annotations

from hyperion.core.crypto import HASH_SIZE

EXPONENT_BIAS = 3
MANTISSA_MASK = 0x007FFFFF
_U32_MASK = 0xFFFFFFFF


def compact_to_target(difficulty_compact: int) -> bytes:
    """Expand a compact difficulty into a 32-byte big-endian target."""
    if not 0 <= difficulty_compact <= _U32_MASK:
        raise ValueError(f"compact difficulty {difficulty_compact} is not a 32-bit value")
    exponent = difficulty_compact >> 24
    mantissa = difficulty_compact & MANTISSA_MASK

    target = mantissa
    if exponent > EXPONENT_BIAS:
        target <<= 8 * (exponent - EXPONENT_BIAS)
    elif exponent < EXPONENT_BIAS:
        target >>= 8 * (EXPONENT_BIAS - exponent)

    if target.bit_length() > HASH_SIZE * 8:
        raise ValueError(
            f"compact difficulty {difficulty_compact:#010x} encodes a target wider than 256 bits"
        )
    return target.to_bytes(HASH_SIZE, "big")


def target_to_compact(target: int) -> int:
    """Compress a target number into compact difficulty form."""
    if target < 0:
        raise ValueError("target must be non-negative")
    raw = target.to_bytes(max(1, (target.bit_length() + 7) // 8), "big")
    size = len(raw)

    if size <= 3:
        mantissa = int.from_bytes(raw, "big") << (8 * (3 - size))
    else:
        mantissa = int.from_bytes(raw[:3], "big")

    if mantissa & 0x00800000:
        mantissa >>= 8
        size += 1

    return ((size << 24) | (mantissa & MANTISSA_MASK)) & _U32_MASK


def hash_meets_target(block_hash: bytes, difficulty_compact: int) -> bool:
    """Return whether a hash, read big-endian, is at or below the target."""
    hash_value = int.from_bytes(block_hash, "big")
    target_value = int.from_bytes(compact_to_target(difficulty_compact), "big")
    return hash_value <= target_value