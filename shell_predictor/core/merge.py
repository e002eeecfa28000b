"""Overlap-fold merging of typed input with a completion fragment."""


def merge(text: str, fragment: str) -> str:
    """Fold ``fragment`` onto the end of ``text`` without duplicating the overlap.

    The longest suffix of ``text`` that is a case-insensitive prefix of
    ``fragment`` is replaced by ``fragment``:

        "sco" + "scoop"          => "scoop"
        "scoop al" + "alias"     => "scoop alias"
        "scoop" + "alias"        => "scoop alias"
        "scoop update" + "*"     => "scoop update *"

    When nothing overlaps the fragment is treated as a new token.
    """
    if not text:
        return fragment

    folded_fragment = fragment.casefold()
    for i in range(len(text)):
        if folded_fragment.startswith(text[i:].casefold()):
            return text[:i] + fragment

    separator = "" if text[-1].isspace() else " "
    return f"{text}{separator}{fragment}"
