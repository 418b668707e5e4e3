import re

_WORD = re.compile(r"\S+")
_NON_ALNUM = re.compile(r"[^a-z0-9]+")

def capitalize_words(text: str) -> str:
    """Title-case every whitespace-separated word, leaving the spacing untouched"""
    return _WORD.sub(lambda m: m.group(0)[:1].upper() + m.group(0)[1:].lower(), text)

def slugify(text: str) -> str:
    """
    Build a URL-safe slug: lowercase, every run of non-alphanumeric
    characters collapsed to one hyphen, no leading or trailing hyphens.

    >>> slugify("Hello World!")
    'hello-world'
    """
    return _NON_ALNUM.sub("-", text.lower()).strip("-")

def count_words(text: str) -> int:
    return len(text.split())

def is_palindrome(text: str) -> bool:
    # Only letters and digits take part in the comparison
    normalized = [ch.lower() for ch in text if ch.isalnum()]
    return normalized == normalized[::-1]
