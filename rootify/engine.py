"""Greedy longest-match segmentation over a dictionary snapshot.

The engine never talks to the store. It is built from a snapshot (copied on
construction) and is a pure function of (snapshot, text):

    engine = TranslationEngine({"火": "fire", "火山": "volcano"})
    engine.translate("火山火")  # -> "volcano_fire"
"""

from __future__ import annotations

from types import MappingProxyType
from typing import List, Mapping, Union

from .models import Segment, Span

# Longest key (in code points) the segmenter tries at each position.
MAX_ROOT_LENGTH = 10

SEPARATOR = "_"

Text = Union[str, bytes]


def _as_text(text: Text) -> str:
    """Decode bytes as UTF-8 up to the first malformed sequence."""
    if isinstance(text, str):
        return text
    try:
        return text.decode("utf-8")
    except UnicodeDecodeError as e:
        return text[: e.start].decode("utf-8")


class TranslationEngine:
    def __init__(self, snapshot: Mapping[str, str], max_root_length: int = MAX_ROOT_LENGTH):
        self._roots = MappingProxyType(dict(snapshot))
        self.max_root_length = max_root_length

    @property
    def roots(self) -> Mapping[str, str]:
        return self._roots

    def segment(self, text: Text) -> List[Segment]:
        """Split text into dictionary roots and single unknown characters, left to right.

        At every position the longest key (up to ``max_root_length`` code points)
        wins. A position with no match yields one unknown segment for the code
        point there. Joining the ``chinese`` fields gives back the input.
        """
        s = _as_text(text)
        out: List[Segment] = []
        i = 0
        n = len(s)

        while i < n:
            for length in range(min(self.max_root_length, n - i), 0, -1):
                candidate = s[i:i + length]
                english = self._roots.get(candidate)
                if english is not None:
                    out.append(Segment(chinese=candidate, english=english, is_unknown=False))
                    i += length
                    break
            else:
                out.append(Segment(chinese=s[i], english="", is_unknown=True))
                i += 1

        return out

    def translate(self, text: Text) -> str:
        # Untranslated characters pass through as-is.
        return SEPARATOR.join(seg.english or seg.chinese for seg in self.segment(text))

    def is_complete(self, text: Text) -> bool:
        s = _as_text(text)
        i = 0
        n = len(s)
        while i < n:
            for length in range(min(self.max_root_length, n - i), 0, -1):
                if s[i:i + length] in self._roots:
                    i += length
                    break
            else:
                return False
        return True

    def segment_at(self, text: Text, offset: int) -> tuple[Span, Segment]:
        """Find the segment covering code point ``offset``."""
        s = _as_text(text)
        if offset < 0 or offset >= len(s):
            raise ValueError("offset out of range")

        start = 0
        for seg in self.segment(s):
            end = start + len(seg.chinese)
            if start <= offset < end:
                return Span(text=seg.chinese, start=start, end=end), seg
            start = end

        # Unreachable: segments cover the whole text.
        raise ValueError("offset out of range")
