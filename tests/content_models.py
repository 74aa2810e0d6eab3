"""Content types shared by the tests."""

from typing import List, Optional

from pydantic import BaseModel, Field

from contentcore.models.content import RoutedContent
from contentcore.models.content_types import ContentType, ContentTypeField, ContentTypeRegion
from contentcore.models.fields import HtmlField, ImageField, StringField, TextField
from contentcore.runtime.builder import content_type


class Hero(BaseModel):
    title: StringField = Field(default_factory=StringField)
    image: ImageField = Field(default_factory=ImageField)


class Teaser(BaseModel):
    title: StringField = Field(default_factory=StringField)
    body: TextField = Field(default_factory=TextField)


@content_type(id="NewsPage", title="News page", group="page")
class NewsPage(RoutedContent):
    body: HtmlField = Field(default_factory=HtmlField)
    links: List[TextField] = Field(default_factory=list)
    hero: Optional[Hero] = None
    teasers: List[Teaser] = Field(default_factory=list)


def article_type() -> ContentType:
    """Dynamic type with a translatable body and a plain text link collection."""
    return ContentType(
        id="Article",
        title="Article",
        group="page",
        regions=[
            ContentTypeRegion(id="Body", fields=[ContentTypeField(id="Default", type="Html")]),
            ContentTypeRegion(
                id="Links", collection=True, fields=[ContentTypeField(id="Default", type="Text")]
            ),
            ContentTypeRegion(
                id="Hero",
                fields=[
                    ContentTypeField(id="Title", type="String"),
                    ContentTypeField(id="Image", type="Image"),
                ],
            ),
            ContentTypeRegion(
                id="Teasers",
                collection=True,
                fields=[
                    ContentTypeField(id="Title", type="String"),
                    ContentTypeField(id="Body", type="Text"),
                ],
            ),
        ],
    )
