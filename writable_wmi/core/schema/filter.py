"""
Writable Property Filter

Scans class definitions for properties that carry the write qualifier and
match a requested CIM type.
"""

import inspect
import warnings
from collections.abc import Iterable

from writable_wmi.core.logger import Emitter, LogLevel
from writable_wmi.core.schema.errors import NoMatchWarning, RetrievalError, SelectorError
from writable_wmi.core.schema.models import (
    CimType,
    ClassMetadata,
    PropertyMetadata,
    WritablePropertyRecord,
)
from writable_wmi.wmi.errors import WmiError


WRITE_QUALIFIER = "write"
_MISSING = object()


class WritablePropertyFilter:
    """
    Single-pass, stateless filter over class definitions.

    A property matches when it has a qualifier named ``write`` (compared
    case-insensitively) and its declared type is exactly the requested
    type. Arrays of a type do not match the scalar type.

    Batches are all-or-nothing: a provider error on any class aborts the
    scan with RetrievalError and no records are returned.

    Example:
        >>> flt = WritablePropertyFilter()
        >>> records = flt.find("String", classes)
        >>> [(r.class_name, r.property_name) for r in records]
    """

    def __init__(self, logger: Emitter | None = None):
        self.logger = logger

    @staticmethod
    def is_writable(prop: PropertyMetadata) -> bool:
        return any(q.lower() == WRITE_QUALIFIER for q in prop.qualifiers)

    @staticmethod
    def matches(prop: PropertyMetadata, data_type: CimType) -> bool:
        """Check both the qualifier and the exact type."""
        return (
            not prop.is_array
            and prop.cim_type is data_type
            and WritablePropertyFilter.is_writable(prop)
        )

    def find(
        self,
        data_type: CimType | str,
        classes: ClassMetadata | Iterable[ClassMetadata] | None,
    ) -> list[WritablePropertyRecord]:
        """
        Find writable properties of a data type.

        Args:
            data_type: Requested type, as CimType or its name
            classes: One class definition or an iterable of them

        Returns:
            Records in discovery order (classes, then properties); may be empty

        Raises:
            ValueError: If data_type is not a filterable type
            SelectorError: If classes is missing or not class definitions
            RetrievalError: If inspecting any class fails
        """
        wanted = CimType.parse(data_type)
        batch = self._as_batch(classes)

        records: list[WritablePropertyRecord] = []

        for cls in batch:
            class_name = self._class_name(cls)
            try:
                records.extend(self._scan_class(cls, class_name, wanted))
            except WmiError as e:
                self._emit(LogLevel.ERROR, f"Failed to inspect {class_name}: {e}")
                raise RetrievalError(str(e), class_name=class_name) from e

        if not records:
            message = f"No writable {wanted.label} properties found in {len(batch)} class(es)"
            self._emit(LogLevel.WARNING, message)
            warnings.warn(message, NoMatchWarning, stacklevel=2)

        return records

    def _scan_class(
        self,
        cls: ClassMetadata,
        class_name: str,
        wanted: CimType,
    ) -> list[WritablePropertyRecord]:
        # Property and qualifier reads may hit the provider too
        found = []
        for prop in cls.properties:
            if not self.matches(prop, wanted):
                continue
            found.append(WritablePropertyRecord(
                class_name=class_name,
                property_name=prop.name,
                property_type=prop.cim_type,
            ))
            self._emit(
                LogLevel.DEBUG,
                f"Writable {wanted.label} property: {class_name}.{prop.name}",
            )
        return found

    @staticmethod
    def _as_batch(
        classes: ClassMetadata | Iterable[ClassMetadata] | None,
    ) -> list[ClassMetadata]:
        if classes is None:
            raise SelectorError("Specify a class or an iterable of classes to filter")
        if isinstance(classes, (str, bytes)):
            raise SelectorError(
                f"Expected class definitions, got the name {classes!r}; retrieve it first"
            )
        if isinstance(classes, Iterable):
            return list(classes)
        # getattr_static leaves lazy provider-backed properties unread
        if all(
            inspect.getattr_static(classes, attr, _MISSING) is not _MISSING
            for attr in ("name", "properties")
        ):
            return [classes]
        raise SelectorError(
            f"Expected a class definition or an iterable of them, got {type(classes).__name__}"
        )

    @staticmethod
    def _class_name(cls: ClassMetadata) -> str:
        try:
            return cls.name
        except WmiError as e:
            raise RetrievalError(str(e)) from e

    def _emit(self, level: LogLevel, message: str) -> None:
        if self.logger is not None:
            self.logger.emit(level, message)
