from __future__ import annotations

from .errors import DocumentReadError, EncodingError


def _sniff_utf16_without_bom(data: bytes) -> str | None:
    # Plain ASCII UTF-16LE will have many 0x00 bytes at odd indices; UTF-16BE will
    # have many 0x00 bytes at even indices.
    sample = data[:4096]
    sample_len = len(sample)
    if sample_len < 2:
        return None
    even_zeros = sum(1 for i, b in enumerate(sample) if b == 0 and (i % 2) == 0)
    odd_zeros = sum(1 for i, b in enumerate(sample) if b == 0 and (i % 2) == 1)
    even_ratio = even_zeros / sample_len
    odd_ratio = odd_zeros / sample_len
    if (odd_zeros > (even_zeros * 4 + 10)) or (odd_ratio > 0.2 and even_ratio < 0.05):
        return "utf-16-le"
    if (even_zeros > (odd_zeros * 4 + 10)) or (even_ratio > 0.2 and odd_ratio < 0.05):
        return "utf-16-be"
    return None


def decode_inf_bytes(data: bytes, *, source: str = "<inf>") -> str:
    """
    Decode raw INF bytes into text.

    INFs in the wild are UTF-16LE (with or without BOM), UTF-8, or ANSI. UTF-16
    is decoded with `surrogatepass` so that a malformed document still loads;
    unpaired surrogates are rejected later by `to_external_text`.
    """

    if data.startswith(b"\xff\xfe") or data.startswith(b"\xfe\xff"):
        try:
            return data.decode("utf-16", errors="surrogatepass").lstrip("\ufeff")
        except UnicodeDecodeError as e:
            raise DocumentReadError(f"{source}: failed to decode file as UTF-16 (has BOM): {e}") from e

    if data.startswith(b"\xef\xbb\xbf"):
        try:
            return data.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise DocumentReadError(f"{source}: failed to decode file as UTF-8 (has BOM): {e}") from e

    utf8_text: str | None
    try:
        utf8_text = data.decode("utf-8")
    except UnicodeDecodeError:
        utf8_text = None
    else:
        # Fast-path: no NULs means we almost certainly decoded correctly.
        if "\x00" not in utf8_text:
            return utf8_text

    enc = _sniff_utf16_without_bom(data)
    if enc is not None:
        try:
            return data.decode(enc, errors="surrogatepass").lstrip("\ufeff")
        except UnicodeDecodeError as e:
            raise DocumentReadError(f"{source}: failed to decode file as {enc} (heuristic): {e}") from e

    if utf8_text is not None:
        raise DocumentReadError(f"{source}: decoded as UTF-8 but contained NUL bytes (likely UTF-16 without BOM)")

    # Legacy ANSI INFs.
    try:
        return data.decode("cp1252")
    except UnicodeDecodeError as e:
        raise DocumentReadError(f"{source}: failed to decode file (not UTF-16, UTF-8 or Windows-1252)") from e


def to_external_text(text: str) -> str:
    """Return `text` unchanged if it can be emitted as UTF-8, else raise EncodingError."""

    try:
        text.encode("utf-8")
    except UnicodeEncodeError as e:
        raise EncodingError(f"text cannot be represented as UTF-8: {text!r}") from e
    return text
