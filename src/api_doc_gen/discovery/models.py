"""Reading columns and extra API fields off application model classes."""

import dataclasses
import datetime
import decimal
import enum
import importlib
import inspect
import logging
import types
import typing
import uuid
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel

from api_doc_gen.errors import ModelNotFoundError

logger = logging.getLogger(__name__)


class Column(BaseModel):
    name: str
    storage_type: str


@runtime_checkable
class HasExtraApiColumns(Protocol):
    """Models implementing this contribute computed or related fields to their schema."""

    @classmethod
    def add_extra_api_columns(cls) -> dict[str, Any]: ...


class ModelIntrospector(Protocol):
    def is_model(self, obj: Any) -> bool: ...

    def columns(self, model: type) -> list[Column]: ...

    def extra_fields(self, model: type) -> dict[str, Any] | None: ...


_SCALARS: list[tuple[type, str]] = [
    (bool, "boolean"),
    (int, "integer"),
    (float, "float"),
    (decimal.Decimal, "decimal"),
    (datetime.datetime, "datetime"),
    (datetime.date, "date"),
    (datetime.time, "time"),
    (uuid.UUID, "uuid"),
    (str, "string"),
    (bytes, "binary"),
]


def annotation_storage_type(annotation: Any) -> str:
    """Map a Python annotation onto the storage type names used by ``__columns__``."""
    origin = typing.get_origin(annotation)
    if origin in (typing.Union, types.UnionType):
        args = [arg for arg in typing.get_args(annotation) if arg is not type(None)]
        return annotation_storage_type(args[0]) if len(args) == 1 else "string"
    if origin is typing.Literal:
        return "string"
    if origin in (list, set, tuple, frozenset):
        return "array"
    if origin is dict:
        return "json"
    if not inspect.isclass(annotation):
        return "string"
    if issubclass(annotation, enum.Enum):
        return "integer" if issubclass(annotation, int) else "string"
    for python_type, storage_type in _SCALARS:
        if issubclass(annotation, python_type):
            return storage_type
    if issubclass(annotation, (list, set, tuple, frozenset)):
        return "array"
    if issubclass(annotation, (dict, BaseModel)):
        return "json"
    return "string"


class DefaultModelIntrospector:
    """Introspects pydantic models, dataclasses and classes declaring ``__columns__``.

    ``__columns__`` maps column names to storage type names such as
    ``bigint``, ``varchar`` or ``timestamp``, the way an ORM table would
    report them.
    """

    def is_model(self, obj: Any) -> bool:
        if not inspect.isclass(obj) or inspect.isabstract(obj):
            return False
        if isinstance(obj.__dict__.get("__columns__"), dict):
            return True
        if issubclass(obj, BaseModel):
            return obj is not BaseModel and bool(obj.model_fields)
        return dataclasses.is_dataclass(obj)

    def columns(self, model: type) -> list[Column]:
        declared = getattr(model, "__columns__", None)
        if isinstance(declared, dict):
            return [Column(name=name, storage_type=str(kind)) for name, kind in declared.items()]
        if inspect.isclass(model) and issubclass(model, BaseModel):
            return [
                Column(name=name, storage_type=annotation_storage_type(field.annotation))
                for name, field in model.model_fields.items()
            ]
        if dataclasses.is_dataclass(model):
            hints = typing.get_type_hints(model)
            return [
                Column(name=field.name, storage_type=annotation_storage_type(hints.get(field.name, str)))
                for field in dataclasses.fields(model)
            ]
        raise TypeError(f"{model!r} is not an introspectable model")

    def extra_fields(self, model: type) -> dict[str, Any] | None:
        if isinstance(model, HasExtraApiColumns):
            return model.add_extra_api_columns()
        return None


def import_object(path: str) -> Any:
    """Import ``pkg.module.Name`` or ``pkg.module:Name``."""
    if ":" in path:
        module_name, _, attribute = path.partition(":")
    else:
        module_name, _, attribute = path.rpartition(".")
    if not module_name:
        raise ImportError(f"'{path}' is not a dotted import path")
    module = importlib.import_module(module_name)
    try:
        obj = module
        for part in attribute.split("."):
            obj = getattr(obj, part)
    except AttributeError as exc:
        raise ImportError(f"'{path}' has no attribute '{attribute}'") from exc
    return obj


def resolve_model(reference: Any, known: dict[str, type] | None = None) -> type:
    """Turn a class, a registered short name or a dotted path into a model class."""
    if inspect.isclass(reference):
        return reference
    reference = str(reference)
    if known and reference in known:
        return known[reference]
    try:
        model = import_object(reference)
    except ImportError as exc:
        raise ModelNotFoundError(reference) from exc
    if not inspect.isclass(model):
        raise ModelNotFoundError(reference)
    return model


def discover_model_classes(module_names: list[str], introspector: ModelIntrospector) -> list[type]:
    """Model classes defined in the given modules, sorted by name."""
    found = []
    for module_name in module_names:
        try:
            module = importlib.import_module(module_name)
        except ImportError as exc:
            logger.warning("Cannot import model module %s: %s", module_name, exc)
            continue
        for _, obj in inspect.getmembers(module, inspect.isclass):
            if obj.__module__ == module.__name__ and introspector.is_model(obj):
                found.append(obj)
    return found
