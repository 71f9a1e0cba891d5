"""
Record Mapping Module.

Converts the untyped mappings returned by the server into typed records.
The coercion rules are declared on the record fields (see `base_model`);
this module runs them and reports failures as `MappingError`, naming the
offending field.
"""

from typing import Any, Iterable, List, Mapping, Type, TypeVar

import pydantic

from ..errors import MappingError
from .base_model import OdooRecord

T_OdooRecord = TypeVar("T_OdooRecord", bound=OdooRecord)


def map_record(
    record: Mapping[str, Any], target: Type[T_OdooRecord]
) -> T_OdooRecord:
    """
    Maps a single remote record into an instance of `target`.

    Args:
        record (Mapping[str, Any]): The field-name-to-value mapping from the server.
        target (Type[OdooRecord]): The typed record class.

    Returns:
        OdooRecord: An instance of `target`.

    Raises:
        MappingError: If the record is not a mapping or a field cannot be coerced.
    """
    model = target.__odoo_model__ or target.__name__
    if not isinstance(record, Mapping):
        raise MappingError(
            model=model,
            field=None,
            value=record,
            message=f"expected a mapping, got {type(record).__name__}",
        )

    try:
        return target.model_validate(dict(record))
    except pydantic.ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ())) or None
        raise MappingError(
            model=model,
            field=field,
            value=first.get("input"),
            message=first.get("msg", str(e)),
        ) from e


def map_records(
    records: Iterable[Mapping[str, Any]], target: Type[T_OdooRecord]
) -> List[T_OdooRecord]:
    """
    Maps a sequence of remote records, failing on the first invalid one.
    """
    return [map_record(record, target) for record in records]
