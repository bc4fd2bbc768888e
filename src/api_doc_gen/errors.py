"""Exceptions raised while collecting and rendering API documentation."""


class ApiDocError(Exception):
    """Base class for every error raised by api-doc-gen."""


class ConfigurationError(ApiDocError):
    """A fatal problem with the documented application or its settings.

    Discovery never swallows these; they abort the whole run.
    """


class InvalidDocAttributeError(ConfigurationError):
    """A documentation decorator carries an invalid value."""

    @classmethod
    def for_attribute(cls, attribute: str, message: str) -> "InvalidDocAttributeError":
        return cls(f"Invalid {attribute}: {message}")


class ModelNotFoundError(ConfigurationError):
    """A model referenced from the documentation cannot be imported."""

    def __init__(self, reference: str):
        super().__init__(f"Model '{reference}' could not be found")
        self.reference = reference


class MissingRouteError(ConfigurationError):
    """An endpoint reached the collection without a route."""


class ProbeReentryError(ConfigurationError):
    """Documentation mode was entered twice on the same discovery context."""


class ContainerResolutionError(ApiDocError):
    """The dependency container has no binding for a requested type."""


class DocumentationModeEnabled(Exception):
    """Raised by document() once the endpoint has been registered.

    It stops the handler body from doing real work; discovery treats it
    as the normal end of a probe.
    """

    def __init__(self, message: str = "Requests cannot be executed while in documentation mode."):
        super().__init__(message)


class VersionNotFoundError(ApiDocError):
    """A changelog snapshot was requested that has not been saved."""

    def __init__(self, version: str | None):
        message = f"Version {version} not found" if version else "No previous versions found"
        super().__init__(message)
        self.version = version
