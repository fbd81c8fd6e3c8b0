"""
WMI COM Client

Provides a clean interface for reading class definitions from a local or
remote WMI provider through the WbemScripting COM API (pywin32).
"""

from dataclasses import dataclass, field
from typing import Any

from writable_wmi.core.schema.models import CimType, PropertyMeta, CIM_FLAG_ARRAY
from writable_wmi.wmi.errors import WmiConnectionError, WmiProviderError


LOCAL_HOSTS = frozenset({"", ".", "localhost", "127.0.0.1", "::1"})


def _com_error() -> type[Exception]:
    """Exception class raised by pywin32 for failed COM calls."""
    import pywintypes

    return pywintypes.com_error


def describe_com_error(error: Exception) -> tuple[str, int | None]:
    """
    Extract the provider's own description from a com_error.

    Returns:
        Tuple of (message, hresult)
    """
    args = getattr(error, "args", ())
    hresult = args[0] if args and isinstance(args[0], int) else None
    message = args[1] if len(args) > 1 and args[1] else str(error)

    # excepinfo: (wcode, source, description, helpfile, helpcontext, scode)
    excepinfo = args[2] if len(args) > 2 else None
    if excepinfo and len(excepinfo) > 2 and excepinfo[2]:
        message = str(excepinfo[2]).strip()
    if len(excepinfo or ()) > 5 and excepinfo[5]:
        hresult = excepinfo[5]

    return message, hresult


class WmiClass:
    """
    Class definition backed by a live SWbemObject.

    Properties and qualifiers are read from the provider on first access;
    failures surface as WmiProviderError.
    """

    def __init__(self, com_object: Any, name: str | None = None):
        self._object = com_object
        self._name = name
        self._properties: tuple[PropertyMeta, ...] | None = None

    def __repr__(self) -> str:
        return f"WmiClass({self.name})"

    @property
    def name(self) -> str:
        if self._name is None:
            try:
                self._name = str(self._object.Path_.Class)
            except _com_error() as e:
                message, hresult = describe_com_error(e)
                raise WmiProviderError(message, hresult) from e
        return self._name

    @property
    def properties(self) -> tuple[PropertyMeta, ...]:
        if self._properties is None:
            self._properties = self._read_properties()
        return self._properties

    def _read_properties(self) -> tuple[PropertyMeta, ...]:
        try:
            result = []
            for prop in self._object.Properties_:
                code = int(prop.CIMType)
                result.append(
                    PropertyMeta(
                        name=str(prop.Name),
                        cim_type=CimType.from_code(code),
                        qualifiers=frozenset(
                            str(q.Name) for q in prop.Qualifiers_
                        ),
                        is_array=bool(prop.IsArray) or bool(code & CIM_FLAG_ARRAY),
                    )
                )
            return tuple(result)
        except _com_error() as e:
            message, hresult = describe_com_error(e)
            raise WmiProviderError(message, hresult) from e


@dataclass
class WmiClient:
    """
    COM client for WMI class definitions.

    Connections are made through ``WbemScripting.SWbemLocator`` and kept
    per namespace. Credentials are only sent to remote hosts; WMI refuses
    them for local connections.

    Example:
        >>> client = WmiClient(host="dc01", username="CORP\\\\audit", password="...")
        >>> cls = client.get_class("Win32_OSRecoveryConfiguration", "root\\\\cimv2")
        >>> [p.name for p in cls.properties]
    """

    host: str = "."
    username: str | None = None
    password: str | None = None
    authority: str | None = None

    # Internal state
    _locator: Any = field(default=None, init=False, repr=False)
    _services: dict[str, Any] = field(default_factory=dict, init=False, repr=False)

    def __post_init__(self) -> None:
        self.host = (self.host or ".").strip()

    @property
    def is_local(self) -> bool:
        return self.host.lower() in LOCAL_HOSTS

    def _init_locator(self) -> Any:
        """Create the SWbemLocator COM object."""
        try:
            import win32com.client
        except ImportError as e:
            raise WmiConnectionError(
                "pywin32 is required to query WMI (Windows only)"
            ) from e

        try:
            return win32com.client.Dispatch("WbemScripting.SWbemLocator")
        except _com_error() as e:
            message, hresult = describe_com_error(e)
            raise WmiConnectionError(f"Failed to create WMI locator: {message}") from e

    def connect(self, namespace: str) -> Any:
        """
        Connect to a namespace and return its SWbemServices object.

        Args:
            namespace: Fully qualified namespace (e.g., "root\\\\cimv2")

        Raises:
            WmiConnectionError: If the locator is unavailable
            WmiProviderError: If the provider refuses the connection
        """
        key = namespace.lower()
        if key in self._services:
            return self._services[key]

        if self._locator is None:
            self._locator = self._init_locator()

        try:
            if self.is_local:
                services = self._locator.ConnectServer(".", namespace)
            else:
                services = self._locator.ConnectServer(
                    self.host,
                    namespace,
                    self.username or "",
                    self.password or "",
                    "",
                    self.authority or "",
                )
        except _com_error() as e:
            message, hresult = describe_com_error(e)
            raise WmiProviderError(message, hresult) from e

        self._services[key] = services
        return services

    def get_class(self, class_name: str, namespace: str) -> WmiClass:
        """
        Get a single class definition.

        Args:
            class_name: Class name (e.g., "Win32_Service")
            namespace: Fully qualified namespace

        Returns:
            WmiClass for the definition
        """
        services = self.connect(namespace)
        try:
            com_object = services.Get(class_name)
        except _com_error() as e:
            message, hresult = describe_com_error(e)
            raise WmiProviderError(message, hresult) from e
        return WmiClass(com_object, name=class_name)

    def list_classes(self, namespace: str) -> list[WmiClass]:
        """
        Get every class definition in a namespace, in provider order.

        Args:
            namespace: Fully qualified namespace

        Returns:
            List of WmiClass
        """
        services = self.connect(namespace)
        try:
            return [
                WmiClass(com_object, name=str(com_object.Path_.Class))
                for com_object in services.SubclassesOf()
            ]
        except _com_error() as e:
            message, hresult = describe_com_error(e)
            raise WmiProviderError(message, hresult) from e

    def version(self) -> dict[str, Any]:
        """Get operating system information from the target host."""
        services = self.connect("root\\cimv2")
        try:
            for os_info in services.ExecQuery(
                "SELECT Caption, Version, CSName FROM Win32_OperatingSystem"
            ):
                return {
                    "caption": str(os_info.Caption),
                    "version": str(os_info.Version),
                    "hostname": str(os_info.CSName),
                }
        except _com_error() as e:
            message, hresult = describe_com_error(e)
            raise WmiProviderError(message, hresult) from e
        return {}
