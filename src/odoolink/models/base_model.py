"""
Base Model Module.

This module defines the foundational class for all typed records within the SDK.
It wraps Pydantic (used for runtime coercion and validation) and adds:

1.  **Field Types** (`OdooInt`, `OdooFloat`, `OdooStr`, `OdooBool`): annotated
    types declaring, field by field, which loosely-typed remote values are
    accepted and how they are coerced.
2.  **Registry**: every subclass declaring `__odoo_model__` is registered, so
    that a record type can be resolved from a remote model name.
"""

from typing import Annotated, Any, ClassVar, Dict, List, Optional, Type

import pydantic
from pydantic import BeforeValidator, ConfigDict

# --- Private Registry ---
# Global dictionary mapping remote model names (e.g. "res.partner") to record types.
_RECORD_REGISTRY: Dict[str, Type["OdooRecord"]] = {}


def _is_many2one(value: Any) -> bool:
    """A many-to-one value travels as the pair [id, display_name]."""
    return isinstance(value, (list, tuple)) and len(value) == 2


def _is_blank(value: Any) -> bool:
    """Empty (or whitespace-only) strings decode to the zero value."""
    return isinstance(value, str) and not value.strip()


def _to_int(value: Any) -> Any:
    # The server sends False for empty non-boolean fields
    if value is None or value is False or _is_blank(value):
        return 0
    if _is_many2one(value):
        return value[0]
    if isinstance(value, float):
        return int(value)
    return value


def _to_float(value: Any) -> Any:
    if value is None or value is False or _is_blank(value):
        return 0.0
    return value


def _to_str(value: Any) -> Any:
    if value is None or value is False:
        return ""
    if value is True:
        return "1"
    if _is_many2one(value):
        return value[1]
    return value


def _to_bool(value: Any) -> Any:
    if value is None or _is_blank(value):
        return False
    if isinstance(value, str):
        return value.strip().lower()
    return value


OdooInt = Annotated[int, BeforeValidator(_to_int)]
"""Integer field. Accepts int, numeric strings, floats (truncated), many-to-one pairs (id); blank strings give 0."""

OdooFloat = Annotated[float, BeforeValidator(_to_float)]
"""Float field. Accepts float, int and numeric strings; blank strings give 0.0."""

OdooStr = Annotated[str, BeforeValidator(_to_str)]
"""String field. Accepts str, numbers, True (as "1") and many-to-one pairs (display name)."""

OdooBool = Annotated[bool, BeforeValidator(_to_bool)]
"""Boolean field. Accepts bool, 0/1 and 'true'/'false' (also '0'/'1', 'yes'/'no'); blank strings give False."""


class OdooRecord(pydantic.BaseModel):
    """
    The root base class for typed records.

    Unknown fields coming from the server are ignored and fields missing in the
    remote record keep their zero value, so subclasses must give every field a
    default.

    Attributes:
        __odoo_model__ (ClassVar): The remote model name this record mirrors.
    """

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    __odoo_model__: ClassVar[Optional[str]] = None

    @classmethod
    def __pydantic_init_subclass__(cls, **kwargs):
        """
        Registers the subclass under its remote model name.

        Raises:
            ValueError: If another record type is already registered for the name.
        """
        super().__pydantic_init_subclass__(**kwargs)

        model = cls.__odoo_model__
        if model is None:
            # intermediate base classes are not registered
            return

        if model in _RECORD_REGISTRY and _RECORD_REGISTRY[model] is not cls:
            raise ValueError(
                f"Duplicate record type for model '{model}' "
                f"(already registered for {_RECORD_REGISTRY[model].__name__})"
            )
        _RECORD_REGISTRY[model] = cls

    @classmethod
    def odoo_model(cls) -> str:
        """
        Returns the remote model name.

        Raises:
            TypeError: If the class does not declare `__odoo_model__`.
        """
        if cls.__odoo_model__ is None:
            raise TypeError(f"{cls.__name__} does not declare '__odoo_model__'")
        return cls.__odoo_model__

    @classmethod
    def field_names(cls) -> List[str]:
        """Returns the remote field names to request (the `search_read` projection)."""
        return list(cls.model_fields.keys())

    @classmethod
    def for_model(cls, model: str) -> Type["OdooRecord"]:
        """
        Resolves the record type registered for a remote model name.

        Raises:
            ValueError: If no record type is registered for the name.
        """
        if model not in _RECORD_REGISTRY:
            raise ValueError(
                f"No record type registered for model '{model}'. "
                f"Available models: {list(_RECORD_REGISTRY.keys())}"
            )
        return _RECORD_REGISTRY[model]

    @classmethod
    def registered_models(cls) -> List[str]:
        return list(_RECORD_REGISTRY.keys())
