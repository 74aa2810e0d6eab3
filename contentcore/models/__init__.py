# contentcore/models/__init__.py
"""Content, definition and field models."""

from .content import (
    Block,
    BlockContent,
    BlockGroup,
    CategorizedContent,
    Content,
    DynamicContent,
    HtmlBlock,
    RedirectType,
    RegionBag,
    RegionList,
    Revision,
    RoutedContent,
    TaggedContent,
    Taxonomy,
)
from .content_types import ContentGroup, ContentType, ContentTypeField, ContentTypeRegion, Language
from .fields import (
    CheckBoxField,
    DateField,
    FieldBase,
    FieldContext,
    HtmlField,
    ImageField,
    MarkdownField,
    MediaProvider,
    NumberField,
    StringField,
    TextField,
)
