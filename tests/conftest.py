"""
Shared fixtures: in-memory stand-ins for the WMI provider.
"""

import pytest

from writable_wmi.core.logger import AuditLogger
from writable_wmi.core.schema.models import CimType, ClassMeta, PropertyMeta
from writable_wmi.wmi.errors import WmiProviderError


class FakeClient:
    """Provider client serving ClassMeta objects from a dict."""

    def __init__(self, namespaces=None, error=None):
        self.namespaces = namespaces or {}
        self.error = error
        self.calls = []

    def get_class(self, class_name, namespace):
        self.calls.append(("get_class", class_name, namespace))
        if self.error:
            raise self.error
        for cls in self.namespaces.get(namespace, []):
            if cls.name.lower() == class_name.lower():
                return cls
        raise WmiProviderError("Not found", hresult=0x80041002)

    def list_classes(self, namespace):
        self.calls.append(("list_classes", namespace))
        if self.error:
            raise self.error
        if namespace not in self.namespaces:
            raise WmiProviderError("Invalid namespace", hresult=0x8004100E)
        return list(self.namespaces[namespace])


class BrokenClass:
    """Class definition whose property list cannot be read."""

    def __init__(self, name, message="Access denied"):
        self.name = name
        self.message = message

    @property
    def properties(self):
        raise WmiProviderError(self.message, hresult=0x80041003)


class UnreadableQualifiersProperty:
    """Property whose qualifier set fails on first read."""

    name = "SecretPath"
    cim_type = CimType.STRING
    is_array = False

    @property
    def qualifiers(self):
        raise WmiProviderError("Access denied", hresult=0x80041003)


@pytest.fixture
def recovery_class():
    return ClassMeta(
        name="Win32_OSRecoveryConfiguration",
        properties=(
            PropertyMeta("AutoReboot", CimType.BOOLEAN, frozenset({"write", "description"})),
            PropertyMeta("DebugFilePath", CimType.STRING, frozenset({"write"})),
        ),
    )


@pytest.fixture
def service_class():
    return ClassMeta(
        name="Win32_Service",
        properties=(
            PropertyMeta("Name", CimType.STRING, frozenset({"key", "read"})),
            PropertyMeta("PathName", CimType.STRING, frozenset({"read"})),
            PropertyMeta("ProcessId", CimType.UINT32, frozenset({"read"})),
        ),
    )


@pytest.fixture
def fake_client(recovery_class, service_class):
    return FakeClient({"root\\cimv2": [recovery_class, service_class]})


@pytest.fixture
def make_client():
    return FakeClient


@pytest.fixture
def broken_class():
    return BrokenClass


@pytest.fixture
def logger():
    return AuditLogger(console_output=False, verbose=True)


@pytest.fixture
def unreadable_property():
    return UnreadableQualifiersProperty()
