"""
Declarative schema surface.

A ResourceSchema is the fixed attribute map a data source or resource exposes,
with required/optional/computed markings. ResourceData is the per-call view
handlers read inputs from and write results into; writes are staged and only
become state when the call succeeds and the provider commits them.
"""

import enum
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Union

from ibm_provider.core.exceptions import Diagnostic, SchemaError


class ValueType(str, enum.Enum):
    STRING = "string"
    INT = "int"
    FLOAT = "float"
    BOOL = "bool"
    LIST = "list"
    MAP = "map"


@dataclass(frozen=True)
class Attribute:
    type: ValueType
    required: bool = False
    optional: bool = False
    computed: bool = False
    description: str = ""
    # LIST elements: a nested block (attribute map) or a primitive type
    elem: Union[Mapping[str, "Attribute"], ValueType, None] = None
    force_new: bool = False

    @property
    def computed_only(self) -> bool:
        return self.computed and not (self.required or self.optional)


def _check_value(path: str, attribute: Attribute, value: Any) -> None:
    if value is None:
        return
    kind = attribute.type
    if kind is ValueType.STRING:
        ok = isinstance(value, str)
    elif kind is ValueType.BOOL:
        ok = isinstance(value, bool)
    elif kind is ValueType.INT:
        ok = isinstance(value, int) and not isinstance(value, bool)
    elif kind is ValueType.FLOAT:
        ok = isinstance(value, (int, float)) and not isinstance(value, bool)
    elif kind is ValueType.MAP:
        ok = isinstance(value, Mapping)
    else:
        ok = isinstance(value, (list, tuple))
    if not ok:
        raise SchemaError(f"{path}: expected {kind.value}, got {type(value).__name__}")

    if kind is ValueType.LIST and attribute.elem is not None:
        for index, item in enumerate(value):
            item_path = f"{path}.{index}"
            if isinstance(attribute.elem, ValueType):
                _check_value(item_path, Attribute(type=attribute.elem), item)
                continue
            if not isinstance(item, Mapping):
                raise SchemaError(f"{item_path}: expected a block, got {type(item).__name__}")
            _check_block(item_path, attribute.elem, item)


def _check_block(path: str, block: Mapping[str, Attribute], values: Mapping[str, Any]) -> None:
    for key, nested in values.items():
        nested_attribute = block.get(key)
        if nested_attribute is None:
            raise SchemaError(f"{path}: unsupported attribute {key!r}")
        _check_value(f"{path}.{key}", nested_attribute, nested)
    missing = [
        key
        for key, nested_attribute in block.items()
        if nested_attribute.required and values.get(key) is None
    ]
    if missing:
        raise SchemaError(f"{path}: missing required attribute(s): {', '.join(sorted(missing))}")


@dataclass(frozen=True)
class ResourceSchema:
    attributes: Mapping[str, Attribute]
    description: str = ""

    def attribute(self, key: str) -> Attribute:
        try:
            return self.attributes[key]
        except KeyError:
            raise SchemaError(f"unsupported attribute {key!r}") from None

    def validate_config(self, config: Mapping[str, Any]) -> None:
        for key, value in config.items():
            attribute = self.attribute(key)
            if attribute.computed_only:
                raise SchemaError(f"{key}: attribute is computed and cannot be configured")
            _check_value(key, attribute, value)
        missing = [
            key
            for key, attribute in self.attributes.items()
            if attribute.required and config.get(key) is None
        ]
        if missing:
            raise SchemaError(f"missing required attribute(s): {', '.join(sorted(missing))}")


_UNSET = object()


@dataclass
class ResourceData:
    """Inputs and staged outputs of one data source or resource call."""

    schema: ResourceSchema
    config: dict[str, Any] = field(default_factory=dict)
    state: dict[str, Any] = field(default_factory=dict)
    _pending: dict[str, Any] = field(default_factory=dict, init=False, repr=False)
    _pending_id: Any = field(default=_UNSET, init=False, repr=False)

    @property
    def id(self) -> str:
        if self._pending_id is not _UNSET:
            return self._pending_id
        return self.state.get("id") or ""

    def set_id(self, resource_id: str) -> None:
        """Set the identifier; an empty string marks the object as gone."""
        self._pending_id = resource_id

    def get(self, key: str, default: Any = None) -> Any:
        self.schema.attribute(key)
        for source in (self._pending, self.config, self.state):
            if key in source and source[key] is not None:
                return source[key]
        return default

    def get_config(self, key: str, default: Any = None) -> Any:
        """Read a configured value only; never falls back to prior state."""
        self.schema.attribute(key)
        value = self.config.get(key)
        return default if value is None else value

    def has_change(self, key: str) -> bool:
        return key in self.config and self.config.get(key) != self.state.get(key)

    def set(self, key: str, value: Any) -> None:
        attribute = self.schema.attribute(key)
        _check_value(key, attribute, value)
        if isinstance(value, tuple):
            value = list(value)
        self._pending[key] = value

    def commit(self) -> dict[str, Any] | None:
        """Fold config and staged writes into state.

        Returns the new state, or None when the id was cleared.
        """
        resource_id = self.id
        if not resource_id:
            self.state = {}
        else:
            merged = {**self.state, **self.config, **self._pending}
            merged["id"] = resource_id
            self.state = merged
        self._pending = {}
        self._pending_id = _UNSET
        return dict(self.state) if self.state else None


@dataclass
class OperationResult:
    """Outcome of one provider call: the committed state and any diagnostics.

    ``state`` is None when the call failed, or when the object no longer
    exists (deleted, or gone on read).
    """

    state: dict[str, Any] | None = None
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return any(d.severity == "error" for d in self.diagnostics)
