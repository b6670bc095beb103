"""
Line-oriented INF document reader.

This is the collaborator the report pipeline sits on: it enumerates sections,
iterates the lines of a section in file order and expands `%strkey%` tokens
from the `[Strings]` table. It mirrors the observable behavior of the Windows
SetupAPI INF parser closely enough for Manufacturer/models sections:

  - `;` starts a comment unless it is inside a double-quoted string.
  - A trailing `\\` continues the line onto the next physical line.
  - Repeated section headers merge into one section (file order preserved).
  - Section names compare case-insensitively.
  - `key = a, b, c` yields key `key` and fields `a`, `b`, `c`; quotes are
    removed and `""` inside a quoted string is a literal quote.
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterator, Mapping, Optional

from .errors import DocumentReadError, MissingSectionError, ResourceExhaustionError
from .text import decode_inf_bytes


STRINGS_SECTION = "Strings"

_SECTION_HEADER_RE = re.compile(r"^\[(?P<section>[^\]]+)\]\s*$")
_STRKEY_RE = re.compile(r"%([^%]*)%")
# INF lines end at CR, LF or CRLF only; other Unicode breaks are data.
_LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")


class Enumeration(enum.Enum):
    MOVE_NEXT = "move_next"
    STOP = "stop"


class CaseInsensitiveText(str):
    """A `str` whose equality and hash ignore letter case."""

    __slots__ = ()

    def __eq__(self, other: object) -> bool:
        if isinstance(other, str):
            return self.lower() == other.lower()
        return NotImplemented

    def __ne__(self, other: object) -> bool:
        if isinstance(other, str):
            return self.lower() != other.lower()
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.lower())

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str.__repr__(self)})"


class SectionName(CaseInsensitiveText):
    __slots__ = ()


@dataclass(frozen=True)
class InfLine:
    key: str
    fields: tuple[str, ...]
    line_number: int

    def field_at(self, index: int) -> str:
        return self.fields[index]

    @property
    def field_count(self) -> int:
        return len(self.fields)

    def __len__(self) -> int:
        return len(self.fields)


LineVisitor = Callable[[InfLine], Optional[Enumeration]]
SectionVisitor = Callable[[SectionName], Optional[Enumeration]]


def _strip_inf_inline_comment(line: str) -> str:
    """
    Strip an INF inline comment.

    INF comments start with `;` and run to end-of-line. Semicolons inside a quoted
    string literal are treated as data, not a comment delimiter.
    """

    in_quotes = False
    for i, ch in enumerate(line):
        if ch == '"':
            in_quotes = not in_quotes
            continue
        if ch == ";" and not in_quotes:
            return line[:i]
    return line


def _logical_lines(text: str) -> Iterator[tuple[int, str]]:
    """Yield (first physical line number, active text) with continuations joined."""

    pending: list[str] = []
    start: int | None = None
    physical = _LINE_BREAK_RE.split(text)
    if physical and physical[-1] == "":
        physical.pop()
    for line_no, raw in enumerate(physical, start=1):
        active = _strip_inf_inline_comment(raw).rstrip()
        if start is None:
            start = line_no
        if active.endswith("\\"):
            pending.append(active[:-1])
            continue
        pending.append(active)
        yield start, "".join(pending).strip()
        pending = []
        start = None
    if pending and start is not None:
        yield start, "".join(pending).strip()


def _split_key(line: str) -> tuple[str | None, str]:
    in_quotes = False
    for i, ch in enumerate(line):
        if ch == '"':
            in_quotes = not in_quotes
        elif ch == "=" and not in_quotes:
            return line[:i], line[i + 1 :]
    return None, line


def _join_field(chunks: list[tuple[str, bool]]) -> str:
    # Only unquoted whitespace is trimmed; quoted text is kept verbatim.
    start, end = 0, len(chunks)
    while start < end and not chunks[start][1] and chunks[start][0].isspace():
        start += 1
    while end > start and not chunks[end - 1][1] and chunks[end - 1][0].isspace():
        end -= 1
    return "".join(ch for ch, _quoted in chunks[start:end])


def _scan_inf_value(text: str, *, split_commas: bool) -> list[str]:
    fields: list[str] = []
    # Parallel to `fields`: whether the field contained a quoted string.
    quoted: list[bool] = []
    chunks: list[tuple[str, bool]] = []
    saw_quote = False
    in_quotes = False
    i = 0
    while i < len(text):
        ch = text[i]
        if ch == '"':
            saw_quote = True
            if in_quotes and text[i + 1 : i + 2] == '"':
                chunks.append(('"', True))
                i += 2
                continue
            in_quotes = not in_quotes
            i += 1
            continue
        if ch == "," and split_commas and not in_quotes:
            fields.append(_join_field(chunks))
            quoted.append(saw_quote)
            chunks = []
            saw_quote = False
            i += 1
            continue
        chunks.append((ch, in_quotes))
        i += 1
    fields.append(_join_field(chunks))
    quoted.append(saw_quote)
    if split_commas:
        # Drop trailing empty fields caused by a stray trailing comma. An
        # explicit `""` is a field.
        while fields and fields[-1] == "" and not quoted[-1]:
            fields.pop()
            quoted.pop()
    return fields


def split_inf_fields(text: str) -> list[str]:
    """Split the right-hand side of an INF line into unquoted fields."""

    return _scan_inf_value(text, split_commas=True)


def unquote_inf_value(text: str) -> str:
    return _scan_inf_value(text, split_commas=False)[0]


def expand_strkeys(text: str, strings: Mapping[str, str]) -> str:
    """
    Substitute `%strkey%` tokens from a lowercased [Strings] mapping.

    `%%` is a literal percent sign; unknown tokens are left as written.
    """

    def _sub(m: re.Match[str]) -> str:
        token = m.group(1)
        if not token:
            return "%"
        value = strings.get(token.lower())
        return m.group(0) if value is None else value

    return _STRKEY_RE.sub(_sub, text)


class InfFile:
    def __init__(self, sections: dict[SectionName, list[InfLine]], *, source: str = "<inf>") -> None:
        self._sections = sections
        self.source = source

    @classmethod
    def parse(cls, text: str, *, source: str = "<inf>", strings_locale: str | None = None) -> "InfFile":
        raw_sections: dict[SectionName, list[tuple[int, str]]] = {}
        current: list[tuple[int, str]] | None = None
        for line_no, line in _logical_lines(text):
            if not line:
                continue
            m = _SECTION_HEADER_RE.match(line)
            if m:
                name = SectionName(m.group("section").strip())
                # Repeated headers append to the section first seen.
                current = raw_sections.setdefault(name, [])
                continue
            if current is None:
                continue
            current.append((line_no, line))

        strings = cls._strings_table(raw_sections, strings_locale)

        sections: dict[SectionName, list[InfLine]] = {}
        for name, raw_lines in raw_sections.items():
            parsed: list[InfLine] = []
            for line_no, line in raw_lines:
                key_text, rhs = _split_key(line)
                if key_text is None:
                    key = expand_strkeys(unquote_inf_value(rhs), strings)
                    fields: tuple[str, ...] = ()
                else:
                    key = expand_strkeys(unquote_inf_value(key_text), strings)
                    fields = tuple(expand_strkeys(f, strings) for f in split_inf_fields(rhs))
                parsed.append(InfLine(key=key, fields=fields, line_number=line_no))
            sections[name] = parsed
        return cls(sections, source=source)

    @staticmethod
    def _strings_table(
        raw_sections: Mapping[SectionName, list[tuple[int, str]]], strings_locale: str | None
    ) -> dict[str, str]:
        names = [SectionName(STRINGS_SECTION)]
        if strings_locale:
            names.append(SectionName(f"{STRINGS_SECTION}.{strings_locale}"))

        out: dict[str, str] = {}
        for name in names:
            for _line_no, line in raw_sections.get(name, ()):
                key_text, rhs = _split_key(line)
                if key_text is None:
                    continue
                key = unquote_inf_value(key_text)
                if key:
                    out[key.lower()] = unquote_inf_value(rhs)
        return out

    @classmethod
    def from_bytes(cls, data: bytes, *, source: str = "<inf>", strings_locale: str | None = None) -> "InfFile":
        try:
            text = decode_inf_bytes(data, source=source)
            return cls.parse(text, source=source, strings_locale=strings_locale)
        except MemoryError as e:
            raise ResourceExhaustionError(f"{source}: out of memory while reading document") from e

    @classmethod
    def load(cls, path: Path, *, strings_locale: str | None = None) -> "InfFile":
        try:
            data = path.read_bytes()
        except FileNotFoundError as e:
            raise DocumentReadError(f"INF file not found: {path.as_posix()}") from e
        except OSError as e:
            raise DocumentReadError(f"failed to read {path.as_posix()}: {e}") from e
        return cls.from_bytes(data, source=path.as_posix(), strings_locale=strings_locale)

    def has_section(self, name: str) -> bool:
        return SectionName(name) in self._sections

    def enumerate_sections(self) -> set[SectionName]:
        return set(self._sections)

    def for_each_section(self, visitor: SectionVisitor) -> None:
        for name in self._sections:
            if visitor(name) is Enumeration.STOP:
                break

    def lines(self, section: str) -> Iterator[InfLine]:
        try:
            entries = self._sections[SectionName(section)]
        except KeyError:
            raise MissingSectionError(str(section)) from None
        return iter(entries)

    def for_each_line(self, section: str, visitor: LineVisitor) -> None:
        for line in self.lines(section):
            if visitor(line) is Enumeration.STOP:
                break
