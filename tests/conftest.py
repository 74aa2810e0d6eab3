import os

# Keep the global database service off the filesystem during tests
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("CACHE_BACKEND", "memory")

from types import SimpleNamespace

import pytest
import pytest_asyncio

from content_models import NewsPage, article_type
from contentcore.config import Settings
from contentcore.models.content_types import ContentGroup, Language
from contentcore.repositories.content_group_repository import ContentGroupRepository
from contentcore.repositories.content_repository import ContentRepository
from contentcore.repositories.language_repository import LanguageRepository
from contentcore.runtime.app import ContentRuntime
from contentcore.runtime.cache import CacheLevel, MemoryCache
from contentcore.services.content_factory import ContentFactory
from contentcore.services.content_group_service import ContentGroupService
from contentcore.services.content_service import ContentService
from contentcore.services.database_service import DatabaseService
from contentcore.services.language_service import LanguageService
from contentcore.services.transformation_service import TransformationService


@pytest.fixture
def make_runtime():
    """Factory building a runtime with the test content types."""

    def _make(cache_level=CacheLevel.FULL, cache=None, context_factory=None, configure=None, freeze=True):
        runtime = ContentRuntime(
            settings=Settings(cache_level=cache_level, revisions_to_keep=3),
            cache=cache if cache is not None else MemoryCache(),
            context_factory=context_factory,
        )
        runtime.register_standard_fields()
        runtime.content_groups.register(ContentGroup(id="page", title="Page", is_routed_content=True))
        runtime.content_types.register(article_type())
        runtime.builder.build(NewsPage)
        if configure is not None:
            configure(runtime)
        if freeze:
            runtime.freeze()
        return runtime

    return _make


@pytest.fixture
def runtime(make_runtime):
    return make_runtime()


@pytest_asyncio.fixture
async def db():
    """In-memory SQLite database with all tables created."""
    service = DatabaseService("sqlite+aiosqlite:///:memory:")
    await service.init_db()
    yield service
    await service.close()


@pytest.fixture
def make_services(db):
    """Factory wiring repositories and services for a runtime."""

    def _make(runtime):
        factory = ContentFactory(runtime)
        transformation = TransformationService(runtime, factory)
        content_repo = ContentRepository(runtime, transformation, db=db)
        languages = LanguageService(runtime, LanguageRepository(db))
        return SimpleNamespace(
            runtime=runtime,
            db=db,
            factory=factory,
            transformation=transformation,
            content_repo=content_repo,
            languages=languages,
            groups=ContentGroupService(runtime, ContentGroupRepository(db)),
            content=ContentService(runtime, content_repo, factory, languages),
        )

    return _make


@pytest.fixture
def services(make_services, runtime):
    return make_services(runtime)


@pytest_asyncio.fixture
async def languages(services):
    """Default language (English) and a second language (Swedish)."""
    english = Language(title="English", culture="en-US", is_default=True)
    swedish = Language(title="Swedish", slug="sv", culture="sv-SE")
    await services.languages.save(english)
    await services.languages.save(swedish)
    return english, swedish
