"""
Tests for ContentFactory: model creation and field initialization.
"""

import uuid
from typing import ClassVar, Optional
from unittest.mock import AsyncMock

import pytest
from pydantic import Field

from content_models import Hero, NewsPage, Teaser
from contentcore.models.content import (
    Block,
    BlockGroup,
    DynamicContent,
    RegionBag,
    RegionList,
    RoutedContent,
    Taxonomy,
)
from contentcore.models.content_types import ContentType, ContentTypeField, ContentTypeRegion
from contentcore.models.fields import FieldContext, HtmlField, ImageField, StringField, TextField
from contentcore.runtime.registry import default_type_name
from contentcore.services.content_factory import ContentFactory


class ImageBlock(Block):
    type_id: ClassVar[Optional[str]] = "ImageBlock"

    image: ImageField = Field(default_factory=ImageField)


def gallery_type() -> ContentType:
    return ContentType(
        id="Gallery",
        title="Gallery",
        group="page",
        regions=[
            ContentTypeRegion(id="Cover", fields=[ContentTypeField(id="Default", type="Image")]),
            ContentTypeRegion(
                id="Images", collection=True, fields=[ContentTypeField(id="Default", type="Image")]
            ),
            ContentTypeRegion(id="Broken", fields=[ContentTypeField(id="Default", type="Missing")]),
        ],
    )


class Drifted(RoutedContent):
    """Class that no longer matches its stored content type."""

    body: HtmlField = Field(default_factory=HtmlField)
    items: Optional[list] = None


def drifted_type() -> ContentType:
    return ContentType(
        id="Drifted",
        title="Drifted",
        group="page",
        type_name=default_type_name(Drifted),
        regions=[
            ContentTypeRegion(id="body", fields=[ContentTypeField(id="Default", type="Html")]),
            ContentTypeRegion(
                id="items", collection=True, fields=[ContentTypeField(id="Default", type="Text")]
            ),
            ContentTypeRegion(id="gone", fields=[ContentTypeField(id="Default", type="Text")]),
        ],
    )


def register_drifted(runtime):
    runtime.model_types.register(Drifted)
    runtime.content_types.register(drifted_type())


@pytest.fixture
def media():
    provider = AsyncMock()
    provider.get_by_id.side_effect = lambda media_id: {"id": media_id}
    return provider


@pytest.fixture
def contexts():
    return []


@pytest.fixture
def media_runtime(make_runtime, media, contexts):
    def context_factory():
        context = FieldContext(media=media)
        contexts.append(context)
        return context

    return make_runtime(
        context_factory=context_factory,
        configure=lambda runtime: runtime.content_types.register(gallery_type()),
    )


class TestCreateDynamic:
    """Test creation of dynamic models."""

    @pytest.mark.asyncio
    async def test_regions_are_shaped(self, runtime):
        factory = ContentFactory(runtime)
        model = await factory.create(runtime.content_types.get_by_id("Article"))

        assert isinstance(model, DynamicContent)
        assert model.type_id == "Article"
        assert isinstance(model.regions["Body"], HtmlField)
        assert isinstance(model.regions["Links"], RegionList)
        assert model.regions["Links"].region_id == "Links"
        assert model.regions["Links"].type_id == "Article"
        assert isinstance(model.regions["Hero"], RegionBag)
        assert list(model.regions["Hero"]) == ["Title", "Image"]
        assert isinstance(model.regions["Hero"].Title, StringField)
        assert len(model.regions["Teasers"]) == 0

    @pytest.mark.asyncio
    async def test_capabilities_initialized(self, runtime):
        factory = ContentFactory(runtime)
        model = await factory.create(runtime.content_types.get_by_id("Article"))

        assert model.blocks == []
        assert model.tags == []
        assert isinstance(model.category, Taxonomy)
        assert model.category.is_empty

    @pytest.mark.asyncio
    async def test_unknown_field_type_region_is_skipped(self, media_runtime):
        factory = ContentFactory(media_runtime)
        model = await factory.create(media_runtime.content_types.get_by_id("Gallery"))

        assert "Broken" not in model.regions
        assert isinstance(model.regions["Cover"], ImageField)

    @pytest.mark.asyncio
    async def test_create_dynamic_region(self, runtime):
        factory = ContentFactory(runtime)
        article = runtime.content_types.get_by_id("Article")

        teaser = await factory.create_dynamic_region(article, "Teasers")
        link = await factory.create_dynamic_region(article, "Links")

        assert isinstance(teaser, RegionBag)
        assert set(teaser) == {"Title", "Body"}
        assert isinstance(link, TextField)
        assert await factory.create_dynamic_region(article, "Missing") is None


class TestCreateStatic:
    """Test creation of statically typed models."""

    @pytest.mark.asyncio
    async def test_regions_are_shaped(self, runtime):
        factory = ContentFactory(runtime)
        page = await factory.create(runtime.content_types.get_by_id("NewsPage"), NewsPage)

        assert isinstance(page, NewsPage)
        assert page.type_id == "NewsPage"
        assert isinstance(page.body, HtmlField)
        assert isinstance(page.hero, Hero)
        assert isinstance(page.hero.image, ImageField)
        assert page.links == []
        assert page.teasers == []

    @pytest.mark.asyncio
    async def test_incompatible_class_returns_none(self, runtime):
        factory = ContentFactory(runtime)

        assert await factory.create(runtime.content_types.get_by_id("Article"), NewsPage) is None

    @pytest.mark.asyncio
    async def test_static_type_as_dynamic(self, runtime):
        factory = ContentFactory(runtime)
        model = await factory.create(runtime.content_types.get_by_id("NewsPage"))

        assert isinstance(model, DynamicContent)
        assert set(model.regions) == {"body", "links", "hero", "teasers"}

    @pytest.mark.asyncio
    async def test_create_static_region_item(self, runtime):
        factory = ContentFactory(runtime)
        region_def = runtime.content_types.get_by_id("NewsPage").get_region("teasers")

        teaser = await factory.create_static_region_item(Teaser, region_def)

        assert isinstance(teaser, Teaser)
        assert isinstance(teaser.title, StringField)

    @pytest.mark.asyncio
    async def test_class_drifted_from_content_type(self, make_runtime):
        runtime = make_runtime(configure=register_drifted)
        factory = ContentFactory(runtime)

        page = await factory.create(runtime.content_types.get_by_id("Drifted"), Drifted)

        assert isinstance(page, Drifted)
        assert isinstance(page.body, HtmlField)
        # Unparameterized list, element type unknown
        assert page.items is None
        assert not hasattr(page, "gone")


class TestInitialization:
    """Test field initializers."""

    @pytest.mark.asyncio
    async def test_init_dynamic_runs_in_declaration_order(self, media_runtime, media, contexts):
        factory = ContentFactory(media_runtime)
        gallery = media_runtime.content_types.get_by_id("Gallery")
        ids = [uuid.uuid4() for _ in range(5)]

        model = await factory.create(gallery)
        model.regions["Cover"].id = ids[0]
        model.regions["Images"].extend([ImageField(id=ids[1]), ImageField(id=ids[2])])
        model.blocks = [ImageBlock(image=ImageField(id=ids[3])), BlockGroup(items=[ImageBlock(image=ImageField(id=ids[4]))])]
        contexts.clear()

        await factory.init_dynamic(model, gallery)

        assert [c.args[0] for c in media.get_by_id.await_args_list] == ids
        assert len(contexts) == 1
        assert model.regions["Images"][1].media == {"id": ids[2]}
        assert model.blocks[1].items[0].image.has_value

    @pytest.mark.asyncio
    async def test_empty_fields_skip_lookup(self, media_runtime, media):
        factory = ContentFactory(media_runtime)

        model = await factory.create(media_runtime.content_types.get_by_id("Gallery"))

        media.get_by_id.assert_not_awaited()
        assert model.regions["Cover"].has_value is False

    @pytest.mark.asyncio
    async def test_each_operation_opens_a_context(self, media_runtime, contexts):
        factory = ContentFactory(media_runtime)
        gallery = media_runtime.content_types.get_by_id("Gallery")
        contexts.clear()

        model = await factory.create(gallery)
        await factory.init_dynamic(model, gallery)
        await factory.init_dynamic(model, gallery)

        assert len(contexts) == 3
        assert len({id(c) for c in contexts}) == 3

    @pytest.mark.asyncio
    async def test_init_static(self, media_runtime, media):
        factory = ContentFactory(media_runtime)
        news = media_runtime.content_types.get_by_id("NewsPage")
        image_id = uuid.uuid4()

        page = await factory.create(news, NewsPage)
        page.hero.image = ImageField(id=image_id)
        await factory.init(page, news)

        media.get_by_id.assert_awaited_once_with(image_id)
        assert page.hero.image.media == {"id": image_id}

    @pytest.mark.asyncio
    async def test_init_rejects_dynamic_models(self, runtime):
        factory = ContentFactory(runtime)
        article = runtime.content_types.get_by_id("Article")
        model = await factory.create(article)

        with pytest.raises(ValueError, match="init_dynamic"):
            await factory.init(model, article)

    @pytest.mark.asyncio
    async def test_init_without_media_provider(self, runtime):
        factory = ContentFactory(runtime)
        article = runtime.content_types.get_by_id("Article")
        model = await factory.create(article)
        model.regions["Hero"]["Image"] = ImageField(id=uuid.uuid4(), media="stale")

        await factory.init_dynamic(model, article)

        assert model.regions["Hero"]["Image"].media is None

    @pytest.mark.asyncio
    async def test_init_field_ignores_non_fields(self, runtime):
        factory = ContentFactory(runtime)

        assert await factory.init_field(FieldContext(), "plain") == "plain"
