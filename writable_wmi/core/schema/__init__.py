"""
Schema Module

Retrieval of WMI class definitions and the writable property filter.
"""

from writable_wmi.core.schema.models import (
    CimType,
    ClassMetadata,
    PropertyMetadata,
    ClassMeta,
    PropertyMeta,
    WritablePropertyRecord,
)
from writable_wmi.core.schema.errors import RetrievalError, SelectorError, NoMatchWarning
from writable_wmi.core.schema.retriever import ClassRetriever, qualify_namespace
from writable_wmi.core.schema.filter import WritablePropertyFilter

__all__ = [
    "CimType",
    "ClassMetadata",
    "PropertyMetadata",
    "ClassMeta",
    "PropertyMeta",
    "WritablePropertyRecord",
    "RetrievalError",
    "SelectorError",
    "NoMatchWarning",
    "ClassRetriever",
    "qualify_namespace",
    "WritablePropertyFilter",
]
