"""
Runtime registries for field types, content types, content groups and
model classes.

Registries are filled during a single initialization phase and then frozen.
After ``freeze()`` every registration raises RegistryError; lookups stay
available for the lifetime of the process. Services receive the registries
by reference through ContentRuntime, there is no module level instance.

Architecture:
    - FieldTypeRegistry: field type id -> FieldType descriptor
    - ContentTypeRegistry: content type id -> ContentType definition
    - ContentGroupRegistry: group id -> ContentGroup definition
    - ModelTypeRegistry: type name -> ModelBinding (model class + accessors)

A ModelBinding replaces reflective property access on statically typed
models: the accessor table (member id -> getter/setter closures) is built
once when the class is registered.
"""

import logging
import typing
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, List, Optional, Type, TypeVar

from pydantic import BaseModel

from ..models.content_types import ContentGroup, ContentType
from ..models.fields import FieldBase

logger = logging.getLogger("contentcore.registry")

T = TypeVar("T")


class RegistryError(Exception):
    """Raised when a registry is used incorrectly."""


class _Registry(Generic[T]):
    """Id keyed registry that can be frozen after initialization."""

    kind = "item"

    def __init__(self):
        self._items: Dict[str, T] = {}
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        self._frozen = True

    def _store(self, key: str, item: T) -> None:
        if self._frozen:
            raise RegistryError(f"Cannot register {self.kind} '{key}', registry is frozen")
        if key in self._items:
            logger.warning(f"{self.kind.capitalize()} '{key}' already registered, overwriting")
        self._items[key] = item
        logger.debug(f"Registered {self.kind}: {key}")

    def get_by_id(self, key: Optional[str]) -> Optional[T]:
        if key is None:
            return None
        return self._items.get(key)

    def list(self) -> List[T]:
        return list(self._items.values())

    def __contains__(self, key: str) -> bool:
        return key in self._items

    def __len__(self) -> int:
        return len(self._items)


# =========================================================================
# FIELD TYPES
# =========================================================================


@dataclass(frozen=True)
class FieldType:
    """Runtime descriptor of a registered field type."""

    id: str
    field_class: Type[FieldBase]
    is_translatable: bool

    def create_instance(self) -> FieldBase:
        return self.field_class()

    def serialize(self, value: FieldBase) -> str:
        return value.serialize()

    def deserialize(self, data: Optional[str]) -> Optional[FieldBase]:
        return self.field_class.deserialize(data)


class FieldTypeRegistry(_Registry[FieldType]):
    kind = "field type"

    def __init__(self):
        super().__init__()
        self._by_class: Dict[type, FieldType] = {}

    def register(
        self,
        field_class: Type[FieldBase],
        type_id: Optional[str] = None,
        translatable: Optional[bool] = None,
    ) -> FieldType:
        """
        Register a field class.

        Args:
            field_class: FieldBase subclass
            type_id: Override of the class ``type_id`` (defaults to the class name)
            translatable: Override of the class ``translatable`` flag

        Returns:
            FieldType: The registered descriptor
        """
        if not issubclass(field_class, FieldBase):
            raise RegistryError(f"{field_class.__name__} is not a FieldBase subclass")

        descriptor = FieldType(
            id=type_id or field_class.type_id or field_class.__name__,
            field_class=field_class,
            is_translatable=field_class.translatable if translatable is None else translatable,
        )
        self._store(descriptor.id, descriptor)
        self._by_class[field_class] = descriptor
        return descriptor

    def get_by_type(self, field_class: type) -> Optional[FieldType]:
        return self._by_class.get(field_class)


# =========================================================================
# CONTENT TYPES & GROUPS
# =========================================================================


class ContentTypeRegistry(_Registry[ContentType]):
    kind = "content type"

    def register(self, content_type: ContentType) -> ContentType:
        self._store(content_type.id, content_type)
        return content_type


class ContentGroupRegistry(_Registry[ContentGroup]):
    kind = "content group"

    def register(self, group: ContentGroup) -> ContentGroup:
        self._store(group.id, group)
        return group


# =========================================================================
# MODEL BINDINGS
# =========================================================================


@dataclass(frozen=True)
class Accessor:
    """
    Getter/setter pair for one attribute of a bound class.

    Attributes:
        name: Python attribute name
        value_type: Attribute type with Optional unwrapped
        element_type: Item type when the attribute is a list, else None
    """

    name: str
    get: Callable[[Any], Any]
    set: Callable[[Any, Any], None]
    value_type: Optional[type]
    element_type: Optional[type]

    @property
    def is_list(self) -> bool:
        return self.element_type is not None


def _unwrap_optional(annotation: Any) -> Any:
    if typing.get_origin(annotation) is typing.Union:
        args = [a for a in typing.get_args(annotation) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return annotation


def _as_class(annotation: Any) -> Optional[type]:
    return annotation if isinstance(annotation, type) else None


def _make_accessor(name: str, annotation: Any) -> Accessor:
    annotation = _unwrap_optional(annotation)
    element_type = None
    if typing.get_origin(annotation) in (list, List):
        args = typing.get_args(annotation)
        # Unparameterized lists cannot be materialized
        element_type = _as_class(_unwrap_optional(args[0])) if args else None
        value_type = list
    else:
        value_type = _as_class(annotation)

    def getter(obj: Any) -> Any:
        return getattr(obj, name, None)

    def setter(obj: Any, value: Any) -> None:
        setattr(obj, name, value)

    return Accessor(
        name=name,
        get=getter,
        set=setter,
        value_type=value_type,
        element_type=element_type,
    )


class ModelBinding:
    """Accessor table for a statically typed model or region class."""

    def __init__(self, model_cls: Type[BaseModel], type_name: Optional[str] = None):
        self.model_cls = model_cls
        self.type_name = type_name
        self._accessors: Dict[str, Accessor] = {}

        for name, info in model_cls.model_fields.items():
            accessor = _make_accessor(name, info.annotation)
            self._accessors[name] = accessor
            if info.alias and info.alias != name:
                self._accessors[info.alias] = accessor

    def get(self, member_id: str) -> Optional[Accessor]:
        return self._accessors.get(member_id)

    def has(self, member_id: str) -> bool:
        return member_id in self._accessors

    def create(self) -> BaseModel:
        return self.model_cls()

    def __repr__(self) -> str:
        return f"<ModelBinding({self.model_cls.__name__}, type_name={self.type_name})>"


def default_type_name(model_cls: type) -> str:
    return f"{model_cls.__module__}.{model_cls.__qualname__}"


class ModelTypeRegistry(_Registry[ModelBinding]):
    kind = "model type"

    def __init__(self):
        super().__init__()
        self._by_class: Dict[type, ModelBinding] = {}

    def register(self, model_cls: Type[BaseModel], type_name: Optional[str] = None) -> ModelBinding:
        """
        Register a model class and every region class it references.

        Region classes (pydantic models used as complex region values or
        collection items) get bindings without a type name.
        """
        binding = ModelBinding(model_cls, type_name or default_type_name(model_cls))
        self._store(binding.type_name, binding)
        self._by_class[model_cls] = binding

        for name in model_cls.model_fields:
            accessor = binding.get(name)
            candidate = accessor.element_type or accessor.value_type
            if (
                candidate is not None
                and issubclass(candidate, BaseModel)
                and not issubclass(candidate, FieldBase)
                and candidate not in self._by_class
            ):
                self._by_class[candidate] = ModelBinding(candidate)
        return binding

    def binding_for(self, cls: type) -> ModelBinding:
        """Binding of a registered class, or a transient one for unknown classes."""
        binding = self._by_class.get(cls)
        if binding is None:
            binding = ModelBinding(cls)
        return binding
