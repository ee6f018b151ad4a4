"""Binary content detection."""

import codecs

# Control bytes other than tab, LF, CR, FF
_CONTROL_BYTES = set(range(0, 32)) - {9, 10, 12, 13}


def is_binary_content(content: bytes, sample_size: int = 8192) -> bool:
    """Detect if content is binary rather than UTF-8 text.

    Multi-byte UTF-8 (Hebrew, Arabic) counts as text, so this checks
    decodability instead of the share of ASCII bytes.

    Args:
        content: Raw file content
        sample_size: Number of bytes to sample from the start

    Returns:
        True if content appears to be binary
    """
    if not content:
        return False

    sample = content[:sample_size]

    # Null bytes are a strong binary indicator
    if b"\x00" in sample:
        return True

    # final=False tolerates a character cut at the sample boundary
    try:
        codecs.getincrementaldecoder("utf-8")().decode(sample, final=False)
    except UnicodeDecodeError:
        return True

    control = sum(1 for byte in sample if byte in _CONTROL_BYTES)
    return (control / len(sample)) > 0.10
