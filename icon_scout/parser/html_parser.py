# === FILE: icon_scout/parser/html_parser.py ===
"""Tolerant tag scanner used by the icon extractor.

Pages handed to IconScout are arbitrary and frequently malformed, so instead of
pattern-matching raw markup we let BeautifulSoup (``html.parser`` backend) do
the tokenising and expose a flat stream of :class:`TagRecord` objects:

* tag and attribute names are lower-cased;
* multi-valued attributes (``rel``, ``class`` …) are joined back with spaces;
* a tag spread over several physical lines is still a single record.

Only the first ``max_lines`` lines of the document are looked at. Icon
declarations live in ``<head>``; the cap keeps huge pages cheap.
"""
from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Optional, Union

from bs4 import BeautifulSoup, UnicodeDammit

__all__: Sequence[str] = ("TagRecord", "decode_markup", "truncate_lines", "scan_tags")


@dataclass(frozen=True, slots=True)
class TagRecord:
    """One start tag: its name and its attributes."""

    name: str
    attrs: Mapping[str, str] = field(default_factory=dict)

    def get(self, key: str, default: str = "") -> str:
        return self.attrs.get(key.lower(), default)


def decode_markup(data: Union[str, bytes]) -> str:
    """Return *data* as text, sniffing the encoding of raw bytes."""
    if isinstance(data, str):
        return data
    return UnicodeDammit(data, is_html=True).unicode_markup or ""


def truncate_lines(text: str, max_lines: Optional[int]) -> str:
    if max_lines is None:
        return text
    return "\n".join(text.splitlines()[:max_lines])


def _flatten(value: object) -> str:
    if isinstance(value, (list, tuple)):
        return " ".join(str(v) for v in value)
    return "" if value is None else str(value)


def scan_tags(
    html: Union[str, bytes],
    names: Sequence[str] = ("link", "meta"),
    max_lines: Optional[int] = None,
) -> Iterator[TagRecord]:
    """Yield the tags called *names* in document order."""
    markup = truncate_lines(decode_markup(html), max_lines)
    soup = BeautifulSoup(markup, "html.parser")
    for tag in soup.find_all([n.lower() for n in names]):
        attrs = {str(k).lower(): _flatten(v) for k, v in tag.attrs.items()}
        yield TagRecord(name=tag.name.lower(), attrs=attrs)
