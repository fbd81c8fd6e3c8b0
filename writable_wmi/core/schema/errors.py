"""
Schema Errors

Exceptions and warnings raised while retrieving and filtering class metadata.
"""


class SelectorError(ValueError):
    """Raised when a call is made without exactly one class selector."""
    pass


class RetrievalError(Exception):
    """
    Raised when the provider fails during lookup, listing or inspection.

    Carries the provider's original message plus the class and namespace
    being processed, where known.
    """

    def __init__(
        self,
        message: str,
        class_name: str | None = None,
        namespace: str | None = None,
    ):
        self.provider_message = message
        self.class_name = class_name
        self.namespace = namespace
        super().__init__(self._format())

    def _format(self) -> str:
        context = []
        if self.class_name:
            context.append(f"class {self.class_name}")
        if self.namespace:
            context.append(f"namespace {self.namespace}")
        if not context:
            return self.provider_message
        return f"{self.provider_message} ({', '.join(context)})"


class NoMatchWarning(UserWarning):
    """Issued when a filter pass completes with zero matching properties."""
    pass
