"""Vendor pattern matching.

Decides whether a name or path belongs to the target vendor by
case-insensitive literal substring containment. Tokens are never
interpreted as regular expressions.
"""

from collections.abc import Iterable


class PatternMatcher:
    """Case-insensitive literal substring matcher.

    The same instance is shared by every collector so vendor identity
    is decided identically everywhere.

    Example:
        >>> matcher = PatternMatcher(["Beckhoff", "TwinCAT"])
        >>> matcher.matches(r"C:\\Program Files\\Beckhoff\\Foo")
        True
    """

    def __init__(self, patterns: Iterable[str]) -> None:
        tokens = tuple(p for p in patterns if p and p.strip())
        if not tokens:
            msg = "Pattern set cannot be empty"
            raise ValueError(msg)
        self._patterns = tokens
        self._folded = tuple(p.casefold() for p in tokens)

    @property
    def patterns(self) -> tuple[str, ...]:
        """Return the pattern tokens in their original order."""
        return self._patterns

    def matches(self, text: str | None) -> bool:
        """Check if ``text`` contains any pattern token."""
        return self.matching_token(text) is not None

    def matching_token(self, text: str | None) -> str | None:
        """Return the first token contained in ``text``, or None."""
        if not text:
            return None
        folded = text.casefold()
        for token, folded_token in zip(self._patterns, self._folded, strict=True):
            if folded_token in folded:
                return token
        return None

    def __repr__(self) -> str:
        return f"PatternMatcher({list(self._patterns)!r})"
