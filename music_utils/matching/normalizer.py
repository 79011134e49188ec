"""
Text canonicalization for cross-catalog comparisons.

Catalogs disagree on small details of the same title: a qualifier such as
"(Remastered 2018)" or "[Live]", the apostrophe glyph, a trailing plural
"s". The functions here remove that drift so two titles can be compared.

Every function is pure and the results are for comparison only; stored or
displayed titles are never replaced by their normalized form.

Rules (applied in this order by normalize()):
    1. Trim surrounding whitespace, compare case-insensitively
    2. Cut the title at the first " (" or " ["
    3. Unify the typographic ’ and the ASCII ' apostrophe
The trailing-s rule is not part of normalize(); title_variants() and
titles_equivalent() apply it to the source title only.
"""

TYPOGRAPHIC_APOSTROPHE = "’"
ASCII_APOSTROPHE = "'"

QUALIFIER_MARKERS = (" (", " [")


def strip_qualifiers(value: str) -> str:
    """
    Trim a title and drop everything from the first " (" or " [".

    Case is preserved.

    Example:
        >>> strip_qualifiers("  Kids (Remastered 2018) ")
        'Kids'
        >>> strip_qualifiers("Lover [Live]")
        'Lover'
    """
    value = value.strip()
    cut = len(value)
    for marker in QUALIFIER_MARKERS:
        index = value.find(marker)
        if index != -1 and index < cut:
            cut = index
    return value[:cut].strip()


def unify_apostrophes(value: str, glyph: str = ASCII_APOSTROPHE) -> str:
    """Rewrite both apostrophe glyphs as the given one."""
    return value.replace(TYPOGRAPHIC_APOSTROPHE, glyph).replace(ASCII_APOSTROPHE, glyph)


def apostrophe_variants(value: str) -> tuple[str, str]:
    """
    Return the value spelled with the typographic and with the ASCII
    apostrophe, in that order.

    Used where text is compared by an external store (the local library
    database) and both spellings have to be tried.
    """
    return (
        unify_apostrophes(value, TYPOGRAPHIC_APOSTROPHE),
        unify_apostrophes(value, ASCII_APOSTROPHE),
    )


def normalize(value: str) -> str:
    """
    Canonical form of a title for comparison.

    Example:
        >>> normalize("Wouldn’t It Be Nice (Mono)") == normalize("wouldn't it be nice")
        True
    """
    return unify_apostrophes(strip_qualifiers(value)).casefold()


def same_text(a: str, b: str) -> bool:
    """Trimmed, case-insensitive equality. No other normalization."""
    return a.strip().casefold() == b.strip().casefold()


def strip_plural(value: str) -> str | None:
    """
    Return the value without its trailing "s", or None when it has none.

    The check ignores case so "KIDS" and "Kids" behave the same.
    """
    value = value.strip()
    if len(value) > 1 and value[-1] in "sS":
        return value[:-1]
    return None


def title_variants(title: str) -> set[str]:
    """
    Normalized forms a title may appear under in another catalog.

    Always contains normalize(title); when the qualifier-stripped title
    ends in "s" the singular form is included as well.
    """
    base = normalize(title)
    variants = {base}
    singular = strip_plural(base)
    if singular:
        variants.add(singular)
    return variants


def titles_equivalent(source: str, target: str) -> bool:
    """
    True when a target title stands for a source title.

    Only the source may drop a trailing "s": a source "Kids" is equivalent
    to a target "Kid", while a source "Kid" is not equivalent to "Kids".
    """
    return normalize(target) in title_variants(source)
