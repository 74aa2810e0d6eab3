"""
Text helpers for slugs and generated identifiers.
"""

import re
import unicodedata
from typing import Optional

# Characters allowed in a slug besides separators
UNSAFE_SLUG_CHARS = re.compile(r"[^a-z0-9\-/\s]")


def generate_slug(text: Optional[str], hierarchical: bool = True) -> str:
    """
    Convert text to a URL-safe slug.

    Args:
        text: Text to convert (titles, user supplied slugs)
        hierarchical: Keep '/' so slugs can express a path

    Returns:
        Lower case slug of ascii letters, digits, '-' and optionally '/'

    Examples:
        >>> generate_slug("Hello World!")
        'hello-world'
        >>> generate_slug("Åsa & Örjan / Blog")
        'asa-orjan/blog'
    """
    if not text:
        return ""

    slug = unicodedata.normalize("NFKD", text.strip().lower())
    slug = slug.encode("ascii", "ignore").decode("ascii")
    slug = UNSAFE_SLUG_CHARS.sub("", slug)

    # Separators become single hyphens
    slug = re.sub(r"[\s\-]+", "-", slug)
    if hierarchical:
        slug = re.sub(r"-*/-*", "/", slug)
        slug = re.sub(r"/+", "/", slug)
    else:
        slug = re.sub(r"[/\-]+", "-", slug)

    return slug.strip("-/")


def generate_internal_id(title: Optional[str]) -> str:
    """
    Generate a code friendly id from a display title.

    Examples:
        >>> generate_internal_id("My first type")
        'MyFirstType'
    """
    if not title:
        return ""
    words = re.split(r"\s+", title.strip())
    joined = "".join(word[:1].upper() + word[1:] for word in words)
    return re.sub(r"[^A-Za-z0-9]", "", joined)
