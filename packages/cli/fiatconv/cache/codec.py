"""Tagged JSON encoding for cache keys and values.

Scalars are stored as plain JSON. Tuples and registered pydantic models carry
a tag so they can be rebuilt on load without the cache knowing their shape:

    (1, "a")                      -> {"__tuple__": [1, "a"]}
    CurrencyPair("USD", "AUD")    -> {"__type__": "CurrencyPair", "data": {...}}

Models have to be registered before a snapshot holding them is loaded.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel

TUPLE_TAG = "__tuple__"
TYPE_TAG = "__type__"

_models: dict[str, type[BaseModel]] = {}
_names: dict[type[BaseModel], str] = {}


def register(model: type[BaseModel], name: str | None = None) -> type[BaseModel]:
    name = name or model.__name__
    registered = _models.get(name)
    if registered is not None and registered is not model:
        raise ValueError(f"type name already registered: {name}")
    _models[name] = model
    _names[model] = name
    return model


def encode(obj: Any) -> Any:
    if obj is None or isinstance(obj, (bool, int, float, str)):
        return obj
    if isinstance(obj, tuple):
        return {TUPLE_TAG: [encode(item) for item in obj]}
    if isinstance(obj, list):
        return [encode(item) for item in obj]
    if isinstance(obj, BaseModel):
        name = _names.get(type(obj))
        if name is None:
            raise TypeError(f"type not registered: {type(obj).__name__}")
        return {TYPE_TAG: name, "data": obj.model_dump(mode="json")}
    raise TypeError(f"cannot encode value of type {type(obj).__name__}")


def decode(data: Any) -> Any:
    if isinstance(data, dict):
        if TUPLE_TAG in data:
            return tuple(decode(item) for item in data[TUPLE_TAG])
        if TYPE_TAG in data:
            model = _models[data[TYPE_TAG]]
            return model.model_validate(data.get("data"))
        raise ValueError("untagged object")
    if isinstance(data, list):
        return [decode(item) for item in data]
    return data
