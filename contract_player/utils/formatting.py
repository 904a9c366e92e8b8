def to_hex(felt: int) -> str:
    """Render a felt as a zero-padded, `0x`-prefixed 64 digit hex string."""
    return f"{felt:#066x}"


def parse_felt(value) -> int:
    """Accept ints and decimal or `0x`-prefixed hex strings."""
    if isinstance(value, bool):
        raise TypeError(f"Expected a felt, got {value!r}")
    if isinstance(value, int):
        return value
    value = str(value).strip()
    return int(value, 16) if value.lower().startswith("0x") else int(value)
