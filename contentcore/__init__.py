# contentcore/__init__.py
"""contentcore - Content modeling runtime with relational persistence."""

__version__ = "1.0.0"
__title__ = "contentcore"
__description__ = "Typed and dynamic content types persisted with per-language translations"
