"""
Class Retriever

Resolves a namespace and class selector into class definitions from the
WMI provider.
"""

from typing import Any

from writable_wmi.core.logger import Emitter, LogLevel
from writable_wmi.core.schema.errors import RetrievalError, SelectorError
from writable_wmi.core.schema.models import ClassMetadata
from writable_wmi.wmi.errors import WmiError


DEFAULT_NAMESPACE = "cimv2"
ROOT_SEGMENT = "root"


def qualify_namespace(namespace: str | None = DEFAULT_NAMESPACE) -> str:
    """
    Prefix a namespace with the root segment.

    A namespace that already starts at root is kept, with forward slashes
    turned into backslashes.

    Examples:
        >>> qualify_namespace("cimv2")
        'root\\\\cimv2'
        >>> qualify_namespace("root/SecurityCenter2")
        'root\\\\SecurityCenter2'
    """
    value = (namespace or DEFAULT_NAMESPACE).strip().replace("/", "\\").strip("\\")
    if not value:
        value = DEFAULT_NAMESPACE

    head = value.split("\\", 1)[0]
    if head.lower() == ROOT_SEGMENT:
        return value
    return f"{ROOT_SEGMENT}\\{value}"


class ClassRetriever:
    """
    Fetches class definitions from the provider.

    Exactly one selector is accepted per call: a class name or the
    all-classes flag. Provider failures are raised as RetrievalError with
    no retry and no partial result.

    Example:
        >>> retriever = ClassRetriever(WmiClient())
        >>> [cls] = retriever.retrieve(class_name="Win32_OSRecoveryConfiguration")
        >>> everything = retriever.retrieve(all_classes=True, namespace="SecurityCenter2")
    """

    def __init__(self, client: Any, logger: Emitter | None = None):
        """
        Initialize retriever.

        Args:
            client: Provider client exposing get_class() and list_classes()
            logger: Optional logging collaborator
        """
        self.client = client
        self.logger = logger

    def retrieve(
        self,
        class_name: str | None = None,
        all_classes: bool = False,
        namespace: str | None = DEFAULT_NAMESPACE,
    ) -> list[ClassMetadata]:
        """
        Retrieve one class or every class in a namespace.

        Args:
            class_name: Class to look up
            all_classes: List every class in the namespace instead
            namespace: Namespace below root (default "cimv2")

        Returns:
            One-element list for a class name, the provider's full listing
            for all_classes

        Raises:
            SelectorError: If neither or both selectors are given
            RetrievalError: If the provider lookup or listing fails
        """
        class_name = class_name.strip() if class_name else None

        if class_name and all_classes:
            raise SelectorError("Specify either a class name or all classes, not both")
        if not class_name and not all_classes:
            raise SelectorError("Specify a class name or request all classes")

        if class_name:
            return [self.get_class(class_name, namespace)]
        return self.list_classes(namespace)

    def get_class(
        self,
        class_name: str,
        namespace: str | None = DEFAULT_NAMESPACE,
    ) -> ClassMetadata:
        """Look up a single class definition."""
        qualified = qualify_namespace(namespace)
        self._emit(LogLevel.DEBUG, f"Getting class {class_name} from {qualified}")

        try:
            result = self.client.get_class(class_name, qualified)
        except WmiError as e:
            self._emit(LogLevel.ERROR, f"Failed to get {class_name} from {qualified}: {e}")
            raise RetrievalError(str(e), class_name=class_name, namespace=qualified) from e

        self._emit(LogLevel.DEBUG, f"Retrieved class {class_name}")
        return result

    def list_classes(
        self,
        namespace: str | None = DEFAULT_NAMESPACE,
    ) -> list[ClassMetadata]:
        """List every class definition in a namespace, in provider order."""
        qualified = qualify_namespace(namespace)
        self._emit(LogLevel.DEBUG, f"Listing all classes in {qualified}")

        try:
            result = list(self.client.list_classes(qualified))
        except WmiError as e:
            self._emit(LogLevel.ERROR, f"Failed to list classes in {qualified}: {e}")
            raise RetrievalError(str(e), namespace=qualified) from e

        self._emit(LogLevel.DEBUG, f"Retrieved {len(result)} classes from {qualified}")
        return result

    def _emit(self, level: LogLevel, message: str) -> None:
        if self.logger is not None:
            self.logger.emit(level, message)
