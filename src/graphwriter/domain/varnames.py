"""Short variable names for upsert queries.

Bijective base-4 numbering over ``abcd``: ``0..3 -> a..d``, then
``aa..dd`` (4..19), ``aaa..ddd`` (20..83), and so on. Unlike plain base-4
there is no zero digit, so no two ordinals share a name.
"""

from __future__ import annotations

ALPHABET = "abcd"
_BASE = len(ALPHABET)


def varname(n: int) -> str:
    """Return the variable name for ordinal *n*.

    Examples:
        >>> varname(0)
        'a'
        >>> varname(4)
        'aa'
        >>> varname(19)
        'dd'
        >>> varname(20)
        'aaa'
    """
    if n < 0:
        msg = f"Variable ordinal must be non-negative, got {n}"
        raise ValueError(msg)
    digits: list[str] = []
    while True:
        digits.append(ALPHABET[n % _BASE])
        n = n // _BASE - 1
        if n < 0:
            break
    return "".join(reversed(digits))
