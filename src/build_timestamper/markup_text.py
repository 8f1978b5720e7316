"""Marked-up text module.

This module contains the MarkupText class, a line of plain console text with
HTML tags layered on top of it at plain-text offsets.
"""

from __future__ import annotations

import html
from dataclasses import dataclass


@dataclass(frozen=True)
class _Tag:
    pos: int
    markup: str


class MarkupText:
    """Plain text plus zero-width tags anchored at plain-text offsets.

    Tags never change the plain text, so offsets handed out by one annotator
    stay valid after another annotator has added its own markup.
    """

    def __init__(self, text: str) -> None:
        self._text = text
        self._tags: list[_Tag] = []

    @property
    def text(self) -> str:
        return self._text

    def __len__(self) -> int:
        return len(self._text)

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"MarkupText({self.to_string()!r})"

    def _range_check(self, pos: int) -> None:
        if pos < 0 or pos > len(self._text):
            error_msg = f"Offset {pos} outside text of length {len(self._text)}"
            raise IndexError(error_msg)

    def add_markup(self, start: int, end: int, start_tag: str, end_tag: str) -> None:
        """Wrap the plain-text range [start, end) in a pair of tags.

        Pairs added earlier to the same range stay outside later ones, so nested
        markup renders as <b><i>x</i></b> and adjacent ranges as <b>x</b><i>y</i>.

        Raises:
            IndexError: If either offset is outside the text or start > end.
        """
        self._range_check(start)
        self._range_check(end)
        if start > end:
            error_msg = f"Start offset {start} is after end offset {end}"
            raise IndexError(error_msg)
        self._tags.append(_Tag(start, start_tag))
        if start == end:
            self._tags.append(_Tag(end, end_tag))
        else:
            self._tags.insert(0, _Tag(end, end_tag))

    def add_markup_at(self, pos: int, tag: str) -> None:
        """Insert a single zero-width tag at a plain-text offset."""
        self._range_check(pos)
        self._tags.append(_Tag(pos, tag))

    def to_string(self, preserve_entity: bool = True) -> str:
        """Render the text with every tag spliced in at its offset.

        Args:
            preserve_entity: If False, '&', '<' and '>' in the plain text are escaped.
                             Tag markup itself is never escaped.

        Returns:
            The rendered line.
        """
        # sorted() is stable, which keeps the nesting order set up by add_markup
        tags = sorted(self._tags, key=lambda tag: tag.pos)
        parts: list[str] = []
        last = 0
        for tag in tags:
            parts.append(self._render(self._text[last : tag.pos], preserve_entity))
            parts.append(tag.markup)
            last = tag.pos
        parts.append(self._render(self._text[last:], preserve_entity))
        return "".join(parts)

    @staticmethod
    def _render(chunk: str, preserve_entity: bool) -> str:
        if preserve_entity:
            return chunk
        return html.escape(chunk, quote=False)
