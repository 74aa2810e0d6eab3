"""
Tests for model validation.
"""

import pytest

from contentcore.models.content import DynamicContent, Taxonomy
from contentcore.models.content_types import ContentGroup, Language
from contentcore.utils.validators import ContentValidationError, validate_model


class TestValidateModel:
    """Test declarative constraints of content and definition models."""

    def test_valid_content(self):
        validate_model(DynamicContent(title="Hello", type_id="Article"))

    def test_empty_model_can_be_created_but_not_validated(self):
        model = DynamicContent()

        with pytest.raises(ContentValidationError) as exc_info:
            validate_model(model)

        assert exc_info.value.field == "title"
        assert str(exc_info.value).startswith("title:")

    def test_max_length(self):
        model = DynamicContent(title="Hello", type_id="Article")
        model.meta_title = "x" * 129

        with pytest.raises(ContentValidationError) as exc_info:
            validate_model(model)

        assert exc_info.value.field == "meta_title"

    def test_nested_path(self):
        model = DynamicContent(title="Hello", type_id="Article")
        model.category = Taxonomy()
        model.category.title = "t" * 65

        with pytest.raises(ContentValidationError) as exc_info:
            validate_model(model)

        assert exc_info.value.field == "category.title"

    def test_language_constraints(self):
        language = Language(title="English")
        language.culture = "en-US-long"

        with pytest.raises(ContentValidationError) as exc_info:
            validate_model(language)

        assert exc_info.value.field == "culture"

    def test_group_constraints(self):
        group = ContentGroup(id="page", title="Page")
        group.id = ""

        with pytest.raises(ContentValidationError):
            validate_model(group)

    def test_is_value_error(self):
        assert issubclass(ContentValidationError, ValueError)
