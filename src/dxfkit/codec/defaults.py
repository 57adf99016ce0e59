"""
Defaulting and Validation
=========================

Read path
---------
apply_defaults() gives every field that was not populated during a decode
pass its default value: the descriptor's default when it declares one
(the fixed fallback identifiers "0", "BYLAYER" and "STANDARD" for layer,
linetype and style names are declared this way in the schemas), otherwise
the empty value of its kind.

Write path
----------
validate_and_repair() re-checks value-range rules before a record is
written (and after it is read). A value failing its descriptor's check is
replaced by the descriptor's fallback, and one FIELD_DEFECT advisory is
produced per repair. Repairs mutate the record but never interrupt the
caller: the record stays usable and is still written.

    scale factor of exactly 0.0   -> 1.0
    text height of exactly 0.0    -> 1.0
    empty layer name              -> "0"
    enum value outside its range  -> the field's default
"""

from typing import Optional
import logging

from dxfkit.errors import Advisory, AdvisoryKind, SourceLocation
from dxfkit.codec.fields import FieldTable, ValueKind
from dxfkit.codec.records import Record
from dxfkit.codec.revision import Revision, is_field_active

logger = logging.getLogger(__name__)


def apply_defaults(record: Record, table: Optional[FieldTable] = None) -> Record:
    """
    Default every field never populated.

    Args:
        record: The record being completed
        table: Schema to apply (defaults to the record's own table)

    Returns:
        The same record
    """
    table = table or record.table
    for descriptor in table:
        if descriptor.name not in record.populated:
            record.set_default(descriptor.name)
    return record


def validate_and_repair(
    record: Record,
    revision: Optional[Revision] = None,
    location: Optional[SourceLocation] = None,
) -> tuple[Record, list[Advisory]]:
    """
    Check value-range rules and repair violations.

    Args:
        record: The record to check (mutated in place)
        revision: Only check fields active at this revision (all if None)
        location: Stream location to attach to advisories

    Returns:
        The record and the advisories for every repair made
    """
    advisories: list[Advisory] = []

    for descriptor in record.table:
        if revision is not None and not is_field_active(descriptor, revision):
            continue
        value = record.get(descriptor.name)

        if descriptor.kind is ValueKind.ENUM and value not in descriptor.choices:
            replacement = descriptor.default if descriptor.has_default else descriptor.choices[0]
            message = (
                f"value {value!r} is not one of {list(descriptor.choices)}, "
                f"repaired to {replacement!r}"
            )
        elif descriptor.check is not None and not descriptor.check(value):
            if not descriptor.has_fallback:
                continue
            replacement = descriptor.fallback
            if value == "":
                message = f"empty value, replaced by {replacement!r}"
            else:
                message = f"invalid value {value!r}, repaired to {replacement!r}"
        else:
            continue

        record[descriptor.name] = replacement
        advisories.append(Advisory(
            AdvisoryKind.FIELD_DEFECT,
            message,
            record_type=record.record_type,
            field=descriptor.name,
            location=location,
        ))
        logger.debug(f"Repaired {record.record_type}.{descriptor.name}: {message}")

    return record, advisories
