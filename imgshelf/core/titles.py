"""Bracket-aware title parsing.

Release titles usually carry bracketed annotations in front of the real
title, e.g. ``(C89) [Circle Name (Artist)] My Title [English]``. The
parser splits such a title into the bracketed prefix components and the
plain-text stem that follows them.
"""

from dataclasses import dataclass, field

# Opening and closing characters, pairwise.
BRACKET_PAIRS = "()[]{}“”‹›«»（）［］｛｝｟｠「」〈〉《》【】〔〕⦗⦘『』〖〗〘〙｢｣"


class TitleParseError(Exception):
    """Title text whose brackets cannot be segmented.

    The parser returns instances of this class instead of raising them,
    so callers can treat an unparsable title as a normal outcome.
    """

    def __init__(self, message: str, position: int | None = None):
        self.position = position
        if position is not None:
            message = f"{message} at position {position}"
        super().__init__(message)


@dataclass(frozen=True)
class Component:
    """One segment picked from the front of a title."""

    text: str
    in_bracket: bool
    rest: str


@dataclass
class TitleParts:
    """Prefix components and stem of a parsed title."""

    prefixes: list[str] = field(default_factory=list)
    stem: str = ""


class TitleParser:
    """Split titles into bracketed prefix components and a stem."""

    CLOSING_FOR = {BRACKET_PAIRS[i]: BRACKET_PAIRS[i + 1] for i in range(0, len(BRACKET_PAIRS), 2)}
    CLOSERS = frozenset(CLOSING_FOR.values())

    def is_bracket_balanced(self, text: str) -> bool:
        """Check that every bracket in ``text`` is closed by its own family.

        A single stack is used for all families, so crossed pairs such as
        ``(a[b)c]`` are rejected.
        """
        expected: list[str] = []
        for ch in text:
            if ch in self.CLOSING_FOR:
                expected.append(self.CLOSING_FOR[ch])
            elif ch in self.CLOSERS:
                if not expected or expected[-1] != ch:
                    return False
                expected.pop()
        return not expected

    def next_component(self, text: str) -> Component | TitleParseError | None:
        """Pick the next component from the front of ``text``.

        Returns:
            None when ``text`` is empty, a :class:`Component` holding either
            a plain run (up to the next opening bracket) or the content of
            the outermost bracket pair, or a :class:`TitleParseError`.
        """
        if not text:
            return None

        if text[0] not in self.CLOSING_FOR:
            for i, ch in enumerate(text):
                if ch in self.CLOSING_FOR:
                    return Component(text[:i], False, text[i:])
                if ch in self.CLOSERS:
                    return TitleParseError(f"unmatched closing bracket {ch!r}", i)
            return Component(text, False, "")

        expected = [self.CLOSING_FOR[text[0]]]
        for i in range(1, len(text)):
            ch = text[i]
            if ch in self.CLOSING_FOR:
                expected.append(self.CLOSING_FOR[ch])
            elif ch in self.CLOSERS:
                if ch != expected[-1]:
                    return TitleParseError(
                        f"closing bracket {ch!r} does not match {expected[-1]!r}", i
                    )
                expected.pop()
                if not expected:
                    return Component(text[1:i], True, text[i + 1 :])
        return TitleParseError(f"missing closing bracket {expected[-1]!r}", len(text))

    def flatten_components(self, components: list[str]) -> list[str] | TitleParseError:
        """Reduce components to their innermost plain-text runs.

        Each component is re-segmented; bracketed parts are flattened
        recursively. Runs are trimmed and empty runs dropped, order is kept.
        """
        flat: list[str] = []
        for component in components:
            rest = component
            while (picked := self.next_component(rest)) is not None:
                if isinstance(picked, TitleParseError):
                    return picked
                rest = picked.rest
                if picked.in_bracket:
                    inner = self.flatten_components([picked.text])
                    if isinstance(inner, TitleParseError):
                        return inner
                    flat.extend(inner)
                elif text := picked.text.strip():
                    flat.append(text)
        return flat

    def parse_prefix_stem(self, title: str) -> TitleParts | TitleParseError:
        """Parse a title into prefixes and stem.

        Rules:
        - The whole title must be bracket balanced
        - Leading bracketed components become prefixes
        - The first plain-text run is the stem; parsing stops there
        - Prefixes are flattened to their plain-text runs
        - The stem is empty when the title is only bracketed components
        """
        if not self.is_bracket_balanced(title):
            return TitleParseError("unbalanced brackets")

        raw_prefixes: list[str] = []
        stem = ""
        rest = title.strip()
        while (picked := self.next_component(rest)) is not None:
            if isinstance(picked, TitleParseError):
                return picked
            if not picked.in_bracket:
                stem = picked.text.strip()
                break
            raw_prefixes.append(picked.text.strip())
            rest = picked.rest.strip()

        prefixes = self.flatten_components(raw_prefixes)
        if isinstance(prefixes, TitleParseError):
            return prefixes
        return TitleParts(prefixes=prefixes, stem=stem)
