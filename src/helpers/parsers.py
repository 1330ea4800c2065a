"""Parsing utilities for hex-encoded JSON-RPC values."""


def parse_hex_int(hex_value: str | None, default: int = 0) -> int:
    """Parse hex string to integer.

    Args:
        hex_value: Hex-encoded string or None
        default: Default value if hex_value is None

    Returns:
        int: Parsed integer value

    Example:
        >>> parse_hex_int("0xff")
        255
        >>> parse_hex_int(None, 0)
        0
    """
    if hex_value is None:
        return default
    return int(hex_value, 16)


def parse_hex_bytes(hex_value: str, size: int | None = None) -> bytes:
    """Parse a 0x-prefixed hex string to bytes.

    Args:
        hex_value: Hex-encoded string, with or without 0x prefix
        size: Expected length in bytes, or None for any length

    Returns:
        bytes: Decoded bytes

    Raises:
        ValueError: If the string is not valid hex or has the wrong length

    Example:
        >>> parse_hex_bytes("0x0042", size=2)
        b'\\x00B'
    """
    digits = hex_value[2:] if hex_value[:2] in {"0x", "0X"} else hex_value
    value = bytes.fromhex(digits)
    if size is not None and len(value) != size:
        msg = f"Expected {size} bytes, got {len(value)} from {hex_value[:20]!r}"
        raise ValueError(msg)
    return value


def to_hex(value: bytes) -> str:
    """Render bytes as a 0x-prefixed lowercase hex string.

    Example:
        >>> to_hex(b"\\xab\\xcd")
        '0xabcd'
    """
    return "0x" + value.hex()


__all__ = ["parse_hex_bytes", "parse_hex_int", "to_hex"]
