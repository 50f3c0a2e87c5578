"""
Error taxonomy for lingora.

Only loading operations are allowed to fail outward. Translation never
raises: a missing key renders as the key itself and a broken template
renders as its raw text.

Hierarchy:
    LingoraError
    ├── LocaleUnavailable      source has no data for a locale (expected)
    │   └── NamespaceUnavailable
    ├── SourceError            transport / parse failure in a source
    ├── TemplateFormatError    template grammar could not be parsed or evaluated
    └── ConfigurationError     an operation needs a source that was not configured
"""


class LingoraError(Exception):
    """Base error for every lingora failure."""

    pass


class LocaleUnavailable(LingoraError):
    """A message source has no data for the requested locale."""

    def __init__(self, locale: str, message: str | None = None) -> None:
        self.locale = locale
        super().__init__(message or f"Locale not found: {locale}")


class NamespaceUnavailable(LocaleUnavailable):
    """A namespace source has no fragment for (namespace, locale)."""

    def __init__(self, namespace: str, locale: str) -> None:
        self.namespace = namespace
        super().__init__(locale, f"Namespace not found: {namespace} ({locale})")


class SourceError(LingoraError):
    """Transport or payload failure while loading from a source."""

    def __init__(self, message: str, locale: str | None = None, status: int | None = None) -> None:
        self.locale = locale
        self.status = status
        super().__init__(message)


class TemplateFormatError(LingoraError):
    """A template-grammar string could not be compiled or evaluated."""

    def __init__(self, message: str, template: str = "") -> None:
        self.template = template
        super().__init__(message)


class ConfigurationError(LingoraError):
    """A loading operation was requested without the matching source."""

    pass
