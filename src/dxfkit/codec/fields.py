"""
Field Descriptors and Field Tables
==================================

A field table is the declarative schema of one record type: an ordered
list of FieldDescriptor entries, each mapping a group code (and, for codes
that repeat with different meanings, an occurrence number) to a named,
typed field with its default and revision bounds.

Declaration order is output order. The codec never writes fields in the
order it discovered them on input.

Occurrence counting
-------------------
Some codes legitimately appear several times in one record with different
meanings. IMAGEDEF_REACTOR, for example, carries two 330 groups: the first
is the owner dictionary, the second the associated image. Such fields are
declared with occurrence=0, occurrence=1, ... and the codec counts the
occurrences of each code during one record's decode pass.

For continuation fields the count is per *run*: consecutive lines with the
same code form one payload, and the next run of that code (after some other
code) is the next occurrence.

A repeatable descriptor absorbs every occurrence at or after its own and
stores a list.

An occurrence left out of the stream (an unset owner handle, an empty
payload) must not shift the ones declared after it. resolve() therefore
prefers the first unconsumed occurrence declared at or after the field
matched last, and only falls back to the plain count otherwise.

Application groups
------------------
Fields with `group` set are written inside a 102 application group:

    102
    {ACAD_REACTORS
    330
    1A
    102
    }

While decoding inside a group only that group's fields are looked up
(lookup_in_group).

Example
-------
    >>> table = FieldTable("CIRCLE", [
    ...     FieldDescriptor(5, "handle", ValueKind.HANDLE, default=None),
    ...     FieldDescriptor(8, "layer", ValueKind.STRING, default="0",
    ...                     always_emit=True, check=nonempty, fallback="0"),
    ...     *point("center", 10, always_emit=True),
    ...     FieldDescriptor(40, "radius", ValueKind.REAL, required=True,
    ...                     check=nonzero, fallback=1.0),
    ... ])
    >>> table.lookup(40, 0).name
    'radius'

Copyright (c) 2026 dxfkit Contributors
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Iterable, Iterator, Optional

from dxfkit.errors import SchemaError
from dxfkit.codec.codes import APPLICATION_GROUP, COMMENT, TERMINATOR, CodeType, code_type
from dxfkit.codec.continuation import ContinuationPayload
from dxfkit.codec.revision import Revision


class ValueKind(Enum):
    """How a field's raw text value is interpreted."""
    INTEGER = "integer"
    REAL = "real"
    STRING = "string"
    ENUM = "enum"
    POINT_COMPONENT = "point-component"
    HANDLE = "handle"
    MARKER = "marker"
    CONTINUATION = "continuation"


# Code types each value kind may be declared under
_COMPATIBLE_CODE_TYPES = {
    ValueKind.INTEGER: {CodeType.INTEGER},
    ValueKind.ENUM: {CodeType.INTEGER},
    ValueKind.REAL: {CodeType.REAL},
    ValueKind.POINT_COMPONENT: {CodeType.REAL},
    ValueKind.STRING: {CodeType.STRING},
    ValueKind.MARKER: {CodeType.STRING},
    ValueKind.HANDLE: {CodeType.HANDLE},
    ValueKind.CONTINUATION: {CodeType.STRING, CodeType.BINARY},
}


class _NoDefault:
    """Sentinel type for descriptors without a default value."""

    def __repr__(self) -> str:
        return "NO_DEFAULT"


NO_DEFAULT: Any = _NoDefault()


# =============================================================================
# Value checks
# =============================================================================

def nonzero(value: Any) -> bool:
    """Valid unless exactly zero."""
    return value != 0


def nonempty(value: Any) -> bool:
    """Valid unless the empty string."""
    return value != ""


# =============================================================================
# Field Descriptor
# =============================================================================

@dataclass(frozen=True)
class FieldDescriptor:
    """
    Static description of one field of a record type.

    Attributes:
        code: Group code the field is written under
        name: Field name used to access the value on a Record
        kind: Value kind (decides coercion and empty value)
        default: Default value; NO_DEFAULT if the field has none
        first_revision: First revision the field is legal in (None = since ever)
        last_revision: Last revision the field is legal in (None = through now)
        repeatable: Field absorbs every later occurrence and stores a list
        occurrence: Which occurrence of `code` within a record this is
        always_emit: Write the field even when it equals its default
        required: Field must hold a non-empty value when written
        check: Predicate a valid value satisfies (see nonzero, nonempty)
        fallback: Replacement for values failing `check`
        choices: Legal values of an ENUM field
        chunk_width: Maximum line width of a CONTINUATION field
        group: Application group (102 "{NAME" ... "}") the field is written in
    """
    code: int
    name: str
    kind: ValueKind
    default: Any = NO_DEFAULT
    first_revision: Optional[Revision] = None
    last_revision: Optional[Revision] = None
    repeatable: bool = False
    occurrence: int = 0
    always_emit: bool = False
    required: bool = False
    check: Optional[Callable[[Any], bool]] = field(default=None, compare=False)
    fallback: Any = NO_DEFAULT
    choices: Optional[tuple[int, ...]] = None
    chunk_width: Optional[int] = None
    group: Optional[str] = None

    @property
    def has_default(self) -> bool:
        return self.default is not NO_DEFAULT

    @property
    def has_fallback(self) -> bool:
        return self.fallback is not NO_DEFAULT

    @property
    def is_marker(self) -> bool:
        return self.kind is ValueKind.MARKER

    @property
    def is_continuation(self) -> bool:
        return self.kind is ValueKind.CONTINUATION

    def empty_value(self) -> Any:
        """Return the kind's empty value (a fresh object for containers)."""
        if self.repeatable:
            return []
        if self.kind is ValueKind.CONTINUATION:
            return ContinuationPayload()
        if self.kind in (ValueKind.STRING, ValueKind.MARKER):
            return ""
        if self.kind in (ValueKind.INTEGER, ValueKind.ENUM):
            return 0
        if self.kind in (ValueKind.REAL, ValueKind.POINT_COMPONENT):
            return 0.0
        return None

    def initial_value(self) -> Any:
        """Return the value an unpopulated field takes."""
        if self.has_default:
            if isinstance(self.default, list):
                return list(self.default)
            return self.default
        return self.empty_value()

    def is_empty(self, value: Any) -> bool:
        """True for values a required field may not hold when written."""
        if value is None:
            return True
        if self.repeatable or self.is_continuation:
            return len(value) == 0
        if self.kind in (ValueKind.STRING, ValueKind.MARKER):
            return value == ""
        return False


# =============================================================================
# Descriptor helpers
# =============================================================================

def point(
    name: str,
    base_code: int,
    default: tuple[float, float, float] = (0.0, 0.0, 0.0),
    always_emit: bool = False,
    first_revision: Optional[Revision] = None,
    last_revision: Optional[Revision] = None,
) -> list[FieldDescriptor]:
    """
    Create the x, y, z descriptors of a point-valued field.

    The components use codes base, base+10 and base+20 (10/20/30,
    11/21/31, 210/220/230) and are named name_x, name_y, name_z.
    """
    return [
        FieldDescriptor(
            base_code + 10 * i,
            f"{name}_{axis}",
            ValueKind.POINT_COMPONENT,
            default=default[i],
            always_emit=always_emit,
            first_revision=first_revision,
            last_revision=last_revision,
        )
        for i, axis in enumerate("xyz")
    ]


def marker(
    value: str,
    occurrence: int,
    first_revision: Optional[Revision] = Revision.R13,
    last_revision: Optional[Revision] = None,
    name: Optional[str] = None,
) -> FieldDescriptor:
    """
    Create a subclass marker (code 100) descriptor.

    Markers are ordinary fields whose default is their fixed content;
    they are always emitted while active.
    """
    return FieldDescriptor(
        100,
        name or f"subclass_{value}",
        ValueKind.MARKER,
        default=value,
        occurrence=occurrence,
        always_emit=True,
        first_revision=first_revision,
        last_revision=last_revision,
    )


# =============================================================================
# Field Table
# =============================================================================

class FieldTable:
    """
    The schema of one record type.

    Built once per record type. Construction validates the declaration and
    raises SchemaError for inconsistencies.

    Attributes:
        record_type: The record type keyword ("CIRCLE", "LAYER", ...)
        fields: Descriptors in output order
        first_revision: First revision the record type exists in (None = always)
    """

    def __init__(
        self,
        record_type: str,
        fields: Iterable[FieldDescriptor],
        first_revision: Optional[Revision] = None,
    ):
        self.record_type = record_type
        self.first_revision = first_revision
        self.fields: tuple[FieldDescriptor, ...] = tuple(fields)
        self._by_key: dict[tuple[int, int], FieldDescriptor] = {}
        self._by_name: dict[str, FieldDescriptor] = {}
        self._occurrences: dict[int, list[int]] = {}
        self._positions: dict[str, int] = {}
        self._grouped: dict[tuple[str, int], FieldDescriptor] = {}
        self._build()

    def _build(self) -> None:
        for position, descriptor in enumerate(self.fields):
            self._validate(descriptor)
            key = (descriptor.code, descriptor.occurrence)
            if key in self._by_key:
                raise SchemaError(
                    f"duplicate code {descriptor.code} occurrence "
                    f"{descriptor.occurrence} ('{self._by_key[key].name}' and "
                    f"'{descriptor.name}')",
                    record_type=self.record_type,
                )
            if descriptor.name in self._by_name:
                raise SchemaError(
                    f"duplicate field name '{descriptor.name}'",
                    record_type=self.record_type,
                )
            self._by_key[key] = descriptor
            self._by_name[descriptor.name] = descriptor
            self._occurrences.setdefault(descriptor.code, []).append(descriptor.occurrence)
            self._positions[descriptor.name] = position
            if descriptor.group is not None:
                group_key = (descriptor.group, descriptor.code)
                if group_key in self._grouped:
                    raise SchemaError(
                        f"duplicate code {descriptor.code} in application group "
                        f"'{descriptor.group}'",
                        record_type=self.record_type,
                    )
                self._grouped[group_key] = descriptor

        for occurrences in self._occurrences.values():
            occurrences.sort()

    def _validate(self, descriptor: FieldDescriptor) -> None:
        """Check one descriptor against the code ranges and default rules."""
        def fail(message: str) -> None:
            raise SchemaError(message, record_type=self.record_type, field=descriptor.name)

        if descriptor.code in (TERMINATOR, APPLICATION_GROUP, COMMENT):
            fail(f"group code {descriptor.code} is reserved")

        if descriptor.occurrence < 0:
            fail("occurrence must not be negative")

        ctype = code_type(descriptor.code)
        allowed = _COMPATIBLE_CODE_TYPES[descriptor.kind]
        handle_at_5 = descriptor.kind is ValueKind.HANDLE and descriptor.code == 5
        if ctype not in allowed and not handle_at_5:
            fail(
                f"{descriptor.kind.value} field cannot use group code "
                f"{descriptor.code} ({ctype.value if ctype else 'unassigned'})"
            )

        if descriptor.kind is ValueKind.ENUM and not descriptor.choices:
            fail("enum field declares no choices")

        if descriptor.kind is ValueKind.MARKER and not descriptor.has_default:
            fail("marker field declares no content")

        optional_scalar = not (
            descriptor.required
            or descriptor.repeatable
            or descriptor.kind in (ValueKind.MARKER, ValueKind.CONTINUATION)
        )
        if optional_scalar and not descriptor.has_default:
            fail("optional field declares no default")

    def lookup(self, code: int, occurrence: int = 0) -> Optional[FieldDescriptor]:
        """
        Find the field for the nth occurrence of a code.

        Args:
            code: The group code
            occurrence: 0-based count of this code so far in the record

        Returns:
            The descriptor, or None if the table has no field for it
        """
        descriptor = self._by_key.get((code, occurrence))
        if descriptor is not None:
            return descriptor

        earlier = [o for o in self._occurrences.get(code, ()) if o < occurrence]
        if earlier:
            candidate = self._by_key[(code, earlier[-1])]
            if candidate.repeatable:
                return candidate
        return None

    def resolve(self, code: int, occurrence: int, position: int = -1) -> Optional[FieldDescriptor]:
        """
        Find the field for a code met while decoding a stream.

        Among the occurrences of `code` not consumed yet (`occurrence` and
        later), the first one declared at or after `position` wins, so an
        occurrence missing from the stream does not shift the later ones.
        Otherwise this is lookup(code, occurrence).

        Args:
            code: The group code
            occurrence: Number of occurrences of the code consumed so far
            position: Declaration index of the field matched last (-1 at
                the start of a record)
        """
        for candidate in self._occurrences.get(code, ()):
            if candidate < occurrence:
                continue
            descriptor = self._by_key[(code, candidate)]
            if self._positions[descriptor.name] >= position:
                return descriptor
        return self.lookup(code, occurrence)

    def lookup_in_group(self, group: str, code: int) -> Optional[FieldDescriptor]:
        """Find the field written under `code` inside an application group."""
        return self._grouped.get((group, code))

    def has_group(self, group: str) -> bool:
        """True if some field is declared inside the application group."""
        return any(name == group for name, _ in self._grouped)

    def position(self, descriptor: FieldDescriptor) -> int:
        """Declaration index of a field."""
        return self._positions[descriptor.name]

    def field(self, name: str) -> FieldDescriptor:
        """Return the descriptor for a field name (KeyError if unknown)."""
        return self._by_name[name]

    def names(self) -> list[str]:
        """Field names in declaration order."""
        return [d.name for d in self.fields]

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __iter__(self) -> Iterator[FieldDescriptor]:
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)

    def __repr__(self) -> str:
        return f"FieldTable({self.record_type!r}, {len(self.fields)} fields)"
