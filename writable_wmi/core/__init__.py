"""
Core enumeration modules.
"""

from writable_wmi.core.logger import AuditLogger, LogLevel, ScanSummary
from writable_wmi.core.schema import (
    CimType,
    ClassMeta,
    PropertyMeta,
    WritablePropertyRecord,
    ClassRetriever,
    WritablePropertyFilter,
    RetrievalError,
    SelectorError,
    NoMatchWarning,
)


__all__ = [
    "AuditLogger",
    "LogLevel",
    "ScanSummary",
    # Schema
    "CimType",
    "ClassMeta",
    "PropertyMeta",
    "WritablePropertyRecord",
    "ClassRetriever",
    "WritablePropertyFilter",
    "RetrievalError",
    "SelectorError",
    "NoMatchWarning",
]
