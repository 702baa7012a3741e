"""ChordSymbolParser: turns free-form chord symbol text into a ChordSpec."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Callable, Final

from harmonysnap.chord_models import Alteration, ChordSpec, NoteName
from harmonysnap.logger_config import logger

# ── Token vocabularies (order is match priority) ───────────────────────────
ROOT_LETTERS: Final[str] = "ABCDEFGabcdefg"
BASS_LETTERS: Final[str] = "ABCDEFG"
SHARP_TOKENS: Final[tuple[str, ...]] = ("#", "♯")
FLAT_TOKENS: Final[tuple[str, ...]] = ("b", "♭")

MAJOR_TOKENS: Final[tuple[str, ...]] = ("Major", "major", "Maj", "maj", "Ma", "ma", "M", "j")
MINOR_TOKENS: Final[tuple[str, ...]] = ("minor", "min", "mi", "m", "-", "−")
DIMINISHED_TOKENS: Final[tuple[str, ...]] = ("dim", "o", "°")
HALF_DIMINISHED_TOKENS: Final[tuple[str, ...]] = ("ø", "O", "0")
AUGMENTED_TOKENS: Final[tuple[str, ...]] = ("aug", "+")
TRIANGLE_TOKENS: Final[tuple[str, ...]] = ("t", "Δ", "∆", "^")
SIX_NINE_TOKENS: Final[tuple[str, ...]] = ("69", "6-9", "6+9", "6/9")
DROP_TOKENS: Final[tuple[str, ...]] = ("drop", "no")

DEFAULT_SUSPENSION = 4

_WHOLE_PARENS = re.compile(r"\((.*)\)")
_INNER_PARENS = re.compile(r"\((.*?)\)")


def is_no_chord(text: str | None) -> bool:
    """True for a missing symbol or an explicit "N.C." (no chord) marker."""
    if text is None:
        return True
    return text.strip().replace(".", "").upper() == "NC"


class _Scanner:
    """A cursor over the symbol text with the small matching primitives the grammar needs."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0

    @property
    def remaining(self) -> str:
        return self.text[self.pos:]

    def take(self, tokens: tuple[str, ...]) -> str | None:
        """Consume the first token in ``tokens`` found at the cursor."""
        for token in tokens:
            if self.text.startswith(token, self.pos):
                self.pos += len(token)
                return token
        return None

    def take_char(self, allowed: str) -> str | None:
        if self.pos < len(self.text) and self.text[self.pos] in allowed:
            self.pos += 1
            return self.text[self.pos - 1]
        return None

    def take_digits(self, max_digits: int | None = None) -> str | None:
        end = self.pos
        while end < len(self.text) and self.text[end] in "0123456789":
            if max_digits is not None and end - self.pos == max_digits:
                break
            end += 1
        if end == self.pos:
            return None
        digits = self.text[self.pos:end]
        self.pos = end
        return digits


@dataclass
class _SpecBuilder:
    """Mutable accumulator; frozen into a ChordSpec once parsing ends."""

    root: NoteName | None = None
    flags: dict[str, bool] = field(default_factory=dict)
    extension: int | None = None
    major_alt: int | None = None
    suspensions: list[int] = field(default_factory=list)
    additions: list[int] = field(default_factory=list)
    drops: list[int] = field(default_factory=list)
    alterations: list[Alteration] = field(default_factory=list)
    bass: NoteName | None = None

    def number(self, token: str, in_middle: bool) -> None:
        """A bare number means six-nine, an added tone (mid-symbol) or the extension (front)."""
        if token == "69":
            self.flags["six_nine"] = True
        elif in_middle:
            self.additions.append(int(token))
        else:
            self.extension = int(token)

    def freeze(self) -> ChordSpec:
        return ChordSpec(
            root=self.root,
            extension=self.extension,
            major_alt=self.major_alt,
            suspensions=tuple(self.suspensions),
            additions=tuple(self.additions),
            drops=tuple(self.drops),
            alterations=tuple(self.alterations),
            bass=self.bass,
            **self.flags,
        )


class ChordSymbolParser:
    """
    Best-effort parser for jazz-style chord symbols.

    Grammar overview
    ----------------
    A symbol reads left to right in three segments, never backtracking:

    1. **Front** (once): root letter, optional sharp, optional flat, at most
       one quality token, then an optional number. The number is the
       chord's extension, except "69" which marks a six-nine chord.

    2. **Middle** (repeated): six-nine, ``maj<N>``, ``alt``, ``sus[N]``,
       ``add<N>``, ``drop<N>``/``no<N>``, a bare number (an added tone) or
       an accidental plus number (an alteration). The first alternative
       that matches at the cursor wins.

    3. **Back** (once): ``/`` plus a bass letter and optional accidental.

    Parenthesised groups are cut out first and read with the middle grammar
    only. Text the grammar cannot consume is dropped with a warning, so a
    malformed symbol still yields a usable ChordSpec.
    """

    def __init__(self) -> None:
        # Ordered alternatives of the middle grammar.
        self._middle_alternatives: tuple[Callable[[_Scanner, _SpecBuilder], bool], ...] = (
            self._six_nine,
            self._major_number,
            self._altered,
            self._suspension,
            self._added,
            self._dropped,
            self._bare_number,
            self._alteration,
        )

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _split_extras(self, symbol: str) -> tuple[str, list[str]]:
        whole = _WHOLE_PARENS.fullmatch(symbol)
        if whole:
            symbol = whole.group(1)

        extras: list[str] = []
        while True:
            inner = _INNER_PARENS.search(symbol)
            if not inner:
                break
            extras.append(inner.group(1))
            symbol = symbol[:inner.start()] + symbol[inner.end():]
        return symbol, extras

    def _parse_front(self, scanner: _Scanner, builder: _SpecBuilder) -> None:
        letter = scanner.take_char(ROOT_LETTERS)
        if letter is None:
            return

        sharp = scanner.take(SHARP_TOKENS) is not None
        flat = scanner.take(FLAT_TOKENS) is not None
        builder.root = NoteName(letter=letter, sharp=sharp, flat=flat)

        for flag, tokens in (
            ("major", MAJOR_TOKENS),
            ("minor", MINOR_TOKENS),
            ("diminished", DIMINISHED_TOKENS),
            ("half_diminished", HALF_DIMINISHED_TOKENS),
            ("augmented", AUGMENTED_TOKENS),
            ("triangle", TRIANGLE_TOKENS),
        ):
            if scanner.take(tokens) is not None:
                builder.flags[flag] = True
                break

        digits = scanner.take_digits()
        if digits is not None:
            builder.number(digits, in_middle=False)

    def _parse_middle(self, scanner: _Scanner, builder: _SpecBuilder) -> None:
        while scanner.pos < len(scanner.text):
            start = scanner.pos
            if not any(alternative(scanner, builder) for alternative in self._middle_alternatives):
                return
            if scanner.pos == start:
                return

    def _parse_back(self, scanner: _Scanner, builder: _SpecBuilder) -> None:
        start = scanner.pos
        if scanner.take(("/",)) is None:
            return
        letter = scanner.take_char(BASS_LETTERS)
        if letter is None:
            scanner.pos = start
            return
        sharp = scanner.take(SHARP_TOKENS) is not None
        flat = scanner.take(FLAT_TOKENS) is not None
        builder.bass = NoteName(letter=letter, sharp=sharp, flat=flat)

    # Middle-grammar alternatives. Each consumes a token and returns True,
    # or leaves the cursor where it was and returns False.

    def _six_nine(self, scanner: _Scanner, builder: _SpecBuilder) -> bool:
        if scanner.take(SIX_NINE_TOKENS) is None:
            return False
        builder.flags["six_nine"] = True
        return True

    def _major_number(self, scanner: _Scanner, builder: _SpecBuilder) -> bool:
        start = scanner.pos
        for token in MAJOR_TOKENS:
            if scanner.text.startswith(token, start):
                scanner.pos = start + len(token)
                digits = scanner.take_digits()
                if digits is not None:
                    builder.major_alt = int(digits)
                    return True
        scanner.pos = start
        return False

    def _altered(self, scanner: _Scanner, builder: _SpecBuilder) -> bool:
        if scanner.take(("alt",)) is None:
            return False
        builder.flags["alt"] = True
        return True

    def _suspension(self, scanner: _Scanner, builder: _SpecBuilder) -> bool:
        if scanner.take(("sus",)) is None:
            return False
        digit = scanner.take_digits(max_digits=1)
        builder.suspensions.append(int(digit) if digit is not None else DEFAULT_SUSPENSION)
        return True

    def _added(self, scanner: _Scanner, builder: _SpecBuilder) -> bool:
        start = scanner.pos
        if scanner.take(("add",)) is None:
            return False
        digits = scanner.take_digits()
        if digits is None:
            scanner.pos = start
            return False
        builder.additions.append(int(digits))
        return True

    def _dropped(self, scanner: _Scanner, builder: _SpecBuilder) -> bool:
        start = scanner.pos
        if scanner.take(DROP_TOKENS) is None:
            return False
        digits = scanner.take_digits()
        if digits is None:
            scanner.pos = start
            return False
        builder.drops.append(int(digits))
        return True

    def _bare_number(self, scanner: _Scanner, builder: _SpecBuilder) -> bool:
        digits = scanner.take_digits()
        if digits is None:
            return False
        builder.number(digits, in_middle=True)
        return True

    def _alteration(self, scanner: _Scanner, builder: _SpecBuilder) -> bool:
        start = scanner.pos
        sharp = scanner.take(SHARP_TOKENS) is not None
        flat = scanner.take(FLAT_TOKENS) is not None
        digits = scanner.take_digits()
        if digits is None:
            scanner.pos = start
            return False
        builder.alterations.append(Alteration(degree=int(digits), sharp=sharp, flat=flat))
        return True

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def parse(self, symbol: str) -> ChordSpec:
        """
        Parse a chord symbol such as ``"Cm7b9"`` or ``"F#sus4/A"``.

        Never raises: unparsed trailing text is logged and ignored.
        """
        full_symbol = symbol
        body, extras = self._split_extras(symbol.strip())
        builder = _SpecBuilder()

        scanner = _Scanner(body)
        self._parse_front(scanner, builder)
        self._parse_middle(scanner, builder)
        self._parse_back(scanner, builder)
        if scanner.remaining:
            logger.warning("Could not fully parse chord symbol %r; ignored %r", full_symbol, scanner.remaining)

        for extra in extras:
            extra_scanner = _Scanner(extra)
            self._parse_middle(extra_scanner, builder)
            if extra_scanner.remaining:
                logger.warning(
                    "Could not fully parse chord symbol %r; ignored %r", full_symbol, extra_scanner.remaining
                )

        return builder.freeze()


_default_parser = ChordSymbolParser()


def parse_chord_symbol(symbol: str) -> ChordSpec:
    """Parse ``symbol`` with a shared ChordSymbolParser."""
    return _default_parser.parse(symbol)
