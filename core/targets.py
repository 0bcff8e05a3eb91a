"""Populate caller-owned response targets in place."""

import dataclasses
from collections.abc import Iterable, Mapping
from functools import cache
from typing import Any, get_origin, get_type_hints

from pydantic import BaseModel, TypeAdapter, ValidationError

from core.exceptions import TargetError

_SEQUENCE_ORIGINS = (list, tuple, set, frozenset)


def populate_target(target: Any, data: Any) -> None:
    """Copy decoded ``data`` into ``target``.

    Supported targets: pydantic model instances, dataclass instances, ``dict``
    (merged) and ``list`` (contents replaced).
    """
    if isinstance(target, BaseModel):
        _populate_model(target, data)
    elif dataclasses.is_dataclass(target) and not isinstance(target, type):
        _populate_dataclass(target, data)
    elif isinstance(target, dict):
        if not isinstance(data, Mapping):
            raise TargetError(f"cannot decode {type(data).__name__} into dict")
        target.update(data)
    elif isinstance(target, list):
        if not isinstance(data, list):
            raise TargetError(f"cannot decode {type(data).__name__} into list")
        target[:] = data
    else:
        raise TargetError(f"unsupported response target: {type(target).__name__}")


def _populate_model(target: BaseModel, data: Any) -> None:
    model_cls = type(target)
    if not isinstance(data, Mapping):
        raise TargetError(f"cannot decode {type(data).__name__} into {model_cls.__name__}")
    try:
        fields = (
            (info.annotation, (info.alias, name)) for name, info in model_cls.model_fields.items()
        )
        parsed = model_cls.model_validate(_wrap_single_items(fields, data))
        for name in model_cls.model_fields:
            setattr(target, name, getattr(parsed, name))
    except ValidationError as e:
        raise TargetError(str(e)) from e


def _populate_dataclass(target: Any, data: Any) -> None:
    """Validate ``data`` against the dataclass and copy the result in.

    Keys missing from ``data`` keep the target's current values.
    """
    cls = type(target)
    if not isinstance(data, Mapping):
        raise TargetError(f"cannot decode {type(data).__name__} into {cls.__name__}")
    init_fields = [f for f in dataclasses.fields(target) if f.init]
    merged = {f.name: getattr(target, f.name) for f in init_fields}
    merged.update({f.name: data[f.name] for f in init_fields if f.name in data})
    hints = get_type_hints(cls)
    fields = ((hints.get(f.name, f.type), (f.name,)) for f in init_fields)
    try:
        parsed = _adapter(cls).validate_python(_wrap_single_items(fields, merged))
        for f in init_fields:
            setattr(target, f.name, getattr(parsed, f.name))
    except ValidationError as e:
        raise TargetError(str(e)) from e
    except dataclasses.FrozenInstanceError as e:
        raise TargetError(f"{cls.__name__} is frozen") from e


@cache
def _adapter(cls: type) -> TypeAdapter:
    return TypeAdapter(cls)


def _wrap_single_items(
    fields: Iterable[tuple[Any, tuple[str | None, ...]]], data: Mapping[str, Any]
) -> dict[str, Any]:
    """Wrap scalars destined for sequence fields.

    A repeated XML element decodes to a list, but a single occurrence decodes
    to a scalar.
    """
    data = dict(data)
    for annotation, keys in fields:
        if get_origin(annotation) not in _SEQUENCE_ORIGINS:
            continue
        for key in keys:
            if key and key in data and not isinstance(data[key], list):
                data[key] = [data[key]]
    return data
