"""Name folding and matching for free-text company links."""

import uuid


def fold_name(name) -> str:
    """Fold a company name for comparison. Non-strings fold to ''."""
    if not isinstance(name, str):
        return ""
    return name.lower()


def names_match(name1, name2) -> bool:
    """Case-insensitive equality used wherever records link by company name.

    An empty or missing name never matches anything, including another
    empty name.
    """
    folded = fold_name(name1)
    return bool(folded) and folded == fold_name(name2)


def new_id() -> str:
    """Mint a record id that is unique for the life of the data set."""
    return uuid.uuid4().hex
