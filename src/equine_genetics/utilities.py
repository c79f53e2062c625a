"""Centralized text helpers shared by the coat color pipeline."""
# equine_genetics/utilities.py

import re


def capitalize_first(text: str) -> str:
    """Uppercase the first character only, leaving the rest untouched ("copper" -> "Copper")."""
    return text[:1].upper() + text[1:]


def collapse_whitespace(text: str) -> str:
    """Collapse any run of whitespace into a single space and trim both ends."""
    return re.sub(r"\s+", " ", text).strip()


def contains_term(text: str, term: str) -> bool:
    """Case-insensitive substring membership."""
    return term.lower() in text.lower()


def replace_first_ci(text: str, old: str, new: str) -> str:
    """Replace the first case-insensitive occurrence of old with new."""
    return re.sub(re.escape(old), new, text, count=1, flags=re.IGNORECASE)


def replace_all_ci(text: str, old: str, new: str) -> str:
    """Replace every case-insensitive occurrence of old with new."""
    return re.sub(re.escape(old), new, text, flags=re.IGNORECASE)
