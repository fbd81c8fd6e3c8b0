"""
Schema Data Models

Typed dataclasses and protocols for WMI class and property metadata.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol, runtime_checkable


# Set on a CIMType code when the property holds an array of the element type
CIM_FLAG_ARRAY = 0x2000


class CimType(Enum):
    """CIM data types a writable property can be filtered on."""

    STRING = ("String", 8)
    UINT8 = ("UInt8", 17)
    UINT16 = ("UInt16", 18)
    UINT32 = ("UInt32", 19)
    UINT64 = ("UInt64", 21)
    SINT8 = ("SInt8", 16)
    SINT16 = ("SInt16", 2)
    SINT32 = ("SInt32", 3)
    SINT64 = ("SInt64", 20)
    DATETIME = ("DateTime", 101)
    BOOLEAN = ("Boolean", 11)

    # Real32, Real64, Char16, Reference, Object
    UNKNOWN = ("Unknown", -1)

    def __init__(self, label: str, code: int):
        self.label = label
        self.code = code

    def __str__(self) -> str:
        return self.label

    @classmethod
    def filterable(cls) -> list["CimType"]:
        """All types accepted as a filter target."""
        return [t for t in cls if t is not cls.UNKNOWN]

    @classmethod
    def parse(cls, value: "str | CimType") -> "CimType":
        """
        Resolve a user supplied data type.

        Raises:
            ValueError: If the value is not one of the filterable types
        """
        if isinstance(value, cls):
            if value is cls.UNKNOWN:
                raise ValueError("Unknown is not a filterable data type")
            return value

        wanted = str(value).strip().lower()
        for member in cls.filterable():
            if member.label.lower() == wanted:
                return member

        choices = ", ".join(t.label for t in cls.filterable())
        raise ValueError(f"Invalid data type '{value}'. Choose one of: {choices}")

    @classmethod
    def from_code(cls, code: int) -> "CimType":
        """Convert a WMI CIMType code to enum, ignoring the array flag."""
        element = code & ~CIM_FLAG_ARRAY
        for member in cls:
            if member.code == element:
                return member
        return cls.UNKNOWN


@runtime_checkable
class PropertyMetadata(Protocol):
    """One property of a class definition."""

    @property
    def name(self) -> str: ...

    @property
    def cim_type(self) -> CimType: ...

    @property
    def is_array(self) -> bool: ...

    @property
    def qualifiers(self) -> frozenset[str]: ...


@runtime_checkable
class ClassMetadata(Protocol):
    """
    A single class definition borrowed from the provider.

    Reading ``properties`` may hit the provider and raise a WmiError.
    """

    @property
    def name(self) -> str: ...

    @property
    def properties(self) -> Sequence[PropertyMetadata]: ...


@dataclass(frozen=True)
class PropertyMeta:
    """Plain metadata for a single property."""

    name: str
    cim_type: CimType
    qualifiers: frozenset[str] = frozenset()
    is_array: bool = False

    def __repr__(self) -> str:
        suffix = "[]" if self.is_array else ""
        return f"PropertyMeta({self.name}, type={self.cim_type.label}{suffix})"


@dataclass(frozen=True)
class ClassMeta:
    """Plain metadata for a class definition with its properties."""

    name: str
    properties: tuple[PropertyMeta, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class WritablePropertyRecord:
    """A writable property of the requested type, as found on one class."""

    class_name: str
    property_name: str
    property_type: CimType

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary for JSON/CSV export."""
        return {
            "class": self.class_name,
            "property": self.property_name,
            "type": self.property_type.label,
        }
