"""
Structured field declarations.

A ``FieldConfig`` carries the well-known field properties as named attributes
and everything type specific (options, rows, nested ``fields``/``tabs``,
row bounds...) in an ordered ``extra`` bag, so a config can always be turned
back into the flat mapping the field types merge with their defaults.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field, fields
from typing import Any, Dict, Mapping, Optional, Tuple, Type, TypeVar, Union

T = TypeVar("T", bound="FieldConfig")

ConfigLike = Union["FieldConfig", Mapping[str, Any]]


@dataclass(frozen=True)
class FieldConfig:
    """
    Declarative description of one field.

    Named attributes left as ``None`` were not supplied and fall back to the
    field type's defaults when the field is constructed.

    Example:
        >>> cfg = FieldConfig.from_mapping(
        ...     {"name": "price", "type": "number", "required": True, "step": "0.01"}
        ... )
        >>> cfg.extra
        {'step': '0.01'}
        >>> cfg.to_dict()["step"]
        '0.01'
    """

    name: str = ""
    type: str = ""
    label: Optional[str] = None
    description: Optional[str] = None
    placeholder: Optional[str] = None
    default: Any = None
    required: Optional[bool] = None
    validation: Optional[Dict[str, Any]] = None
    use_name_prefix: Optional[bool] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def named_keys(cls) -> Tuple[str, ...]:
        return tuple(f.name for f in fields(cls) if f.name != "extra")

    @classmethod
    def from_mapping(cls: Type[T], data: ConfigLike) -> T:
        """Split a flat mapping into named attributes and the ``extra`` bag."""
        if isinstance(data, FieldConfig):
            return data  # type: ignore[return-value]
        if not isinstance(data, Mapping):
            raise TypeError(f"Field config must be a mapping, got {type(data).__name__}")
        allowed = set(cls.named_keys())
        known = {k: v for k, v in data.items() if k in allowed}
        extra = {k: copy.deepcopy(v) for k, v in data.items() if k not in allowed}
        for key in ("name", "type"):
            if known.get(key) is None:
                known.pop(key, None)
            else:
                known[key] = str(known[key])
        if known.get("validation") is not None:
            known["validation"] = dict(known["validation"])
        return cls(**known, extra=extra)

    def to_dict(self) -> Dict[str, Any]:
        """Flat mapping of every supplied key, extension keys last."""
        out: Dict[str, Any] = {}
        for key in self.named_keys():
            value = getattr(self, key)
            if key in ("name", "type"):
                if value:
                    out[key] = value
            elif value is not None:
                out[key] = copy.deepcopy(value)
        for key, value in self.extra.items():
            out[key] = copy.deepcopy(value)
        return out

    def get(self, key: str, default: Any = None) -> Any:
        if key in self.named_keys():
            value = getattr(self, key)
            return default if value is None else value
        return self.extra.get(key, default)

    def with_name(self: T, name: str) -> T:
        data = self.to_dict()
        data["name"] = name
        return type(self).from_mapping(data)


def as_mapping(config: ConfigLike) -> Dict[str, Any]:
    """Normalise a FieldConfig or plain mapping into a fresh flat dict."""
    if isinstance(config, FieldConfig):
        return config.to_dict()
    if isinstance(config, Mapping):
        return copy.deepcopy(dict(config))
    raise TypeError(f"Field config must be a mapping, got {type(config).__name__}")


__all__ = ["FieldConfig", "ConfigLike", "as_mapping"]
