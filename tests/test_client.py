"""
Tests for the WMI COM client, using stand-ins for the SWbem objects.
"""

from types import SimpleNamespace

import pytest

from writable_wmi.core.schema.filter import WritablePropertyFilter
from writable_wmi.core.schema.models import CimType, ClassMetadata
from writable_wmi.wmi.client import WmiClass, WmiClient, describe_com_error


def com_property(name, cim_type, qualifiers, is_array=False):
    return SimpleNamespace(
        Name=name,
        CIMType=cim_type,
        IsArray=is_array,
        Qualifiers_=[SimpleNamespace(Name=q) for q in qualifiers],
    )


def com_class(name, properties):
    return SimpleNamespace(
        Path_=SimpleNamespace(Class=name),
        Properties_=properties,
    )


class FakeServices:
    def __init__(self, classes):
        self.classes = classes
        self.requested = []

    def Get(self, name):
        self.requested.append(name)
        return self.classes[name]

    def SubclassesOf(self):
        return list(self.classes.values())


class FakeLocator:
    def __init__(self, services):
        self.services = services
        self.connections = []

    def ConnectServer(self, *args):
        self.connections.append(args)
        return self.services


@pytest.fixture
def recovery_com():
    return com_class("Win32_OSRecoveryConfiguration", [
        com_property("AutoReboot", 11, ["CIMTYPE", "write", "read"]),
        com_property("DebugFilePath", 8, ["CIMTYPE", "write", "read"]),
        com_property("Name", 8, ["key", "read"]),
    ])


@pytest.fixture
def services(recovery_com):
    return FakeServices({
        "Win32_OSRecoveryConfiguration": recovery_com,
        "Win32_Environment": com_class("Win32_Environment", [
            com_property("VariableValue", 8, ["write"]),
        ]),
    })


class TestWmiClass:
    """Tests for WmiClass."""

    def test_reads_properties(self, recovery_com):
        cls = WmiClass(recovery_com)

        assert cls.name == "Win32_OSRecoveryConfiguration"
        assert isinstance(cls, ClassMetadata)

        props = {p.name: p for p in cls.properties}
        assert props["AutoReboot"].cim_type == CimType.BOOLEAN
        assert props["DebugFilePath"].qualifiers == frozenset({"CIMTYPE", "write", "read"})
        assert props["Name"].is_array is False

    def test_array_flag(self):
        cls = WmiClass(com_class("Win32_NetworkAdapterConfiguration", [
            com_property("DNSServerSearchOrder", 0x2000 | 8, ["write"], is_array=True),
        ]))

        [prop] = cls.properties
        assert prop.cim_type == CimType.STRING
        assert prop.is_array is True

    def test_properties_read_once(self, recovery_com):
        cls = WmiClass(recovery_com)
        first = cls.properties
        recovery_com.Properties_ = []

        assert cls.properties is first

    def test_feeds_filter(self, recovery_com):
        records = WritablePropertyFilter().find(CimType.STRING, WmiClass(recovery_com))

        assert [r.property_name for r in records] == ["DebugFilePath"]


class TestWmiClient:
    """Tests for WmiClient."""

    def test_is_local(self):
        assert WmiClient().is_local
        assert WmiClient(host="localhost").is_local
        assert WmiClient(host="").host == "."
        assert not WmiClient(host="dc01").is_local

    def test_local_connection_has_no_credentials(self, services):
        client = WmiClient(username="CORP\\audit", password="secret")
        client._locator = FakeLocator(services)

        client.connect("root\\cimv2")

        assert client._locator.connections == [(".", "root\\cimv2")]

    def test_remote_connection_passes_credentials(self, services):
        client = WmiClient(host="dc01", username="CORP\\audit", password="secret")
        client._locator = FakeLocator(services)

        client.connect("root\\cimv2")

        assert client._locator.connections == [
            ("dc01", "root\\cimv2", "CORP\\audit", "secret", "", ""),
        ]

    def test_connection_reused_per_namespace(self, services):
        client = WmiClient()
        client._locator = FakeLocator(services)

        client.connect("root\\cimv2")
        client.connect("ROOT\\CIMV2")
        client.connect("root\\SecurityCenter2")

        assert len(client._locator.connections) == 2

    def test_get_class(self, services):
        client = WmiClient()
        client._locator = FakeLocator(services)

        cls = client.get_class("Win32_OSRecoveryConfiguration", "root\\cimv2")

        assert cls.name == "Win32_OSRecoveryConfiguration"
        assert services.requested == ["Win32_OSRecoveryConfiguration"]

    def test_list_classes(self, services):
        client = WmiClient()
        client._locator = FakeLocator(services)

        names = [c.name for c in client.list_classes("root\\cimv2")]

        assert names == ["Win32_OSRecoveryConfiguration", "Win32_Environment"]


class TestDescribeComError:
    """Tests for com_error message extraction."""

    def test_uses_excepinfo_description(self):
        error = Exception(
            -2147352567,
            "Exception occurred.",
            (0, "SWbemServicesEx", "Access denied ", None, 0, -2147217405),
            None,
        )

        message, hresult = describe_com_error(error)

        assert message == "Access denied"
        assert hresult == -2147217405

    def test_falls_back_to_strerror(self):
        error = Exception(-2147023174, "The RPC server is unavailable.", None, None)

        message, hresult = describe_com_error(error)

        assert message == "The RPC server is unavailable."
        assert hresult == -2147023174
