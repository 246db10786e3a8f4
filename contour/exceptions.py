"""Exceptions raised (or absorbed) while projecting content."""


class ProjectionError(Exception):
    """Base class for all projection errors."""

    pass


class ConfigurationError(ProjectionError):
    """Raised when a destination type cannot be projected onto.

    This indicates a structural problem with the destination type itself,
    such as an unsupported constructor shape. It is never retried.
    """

    @classmethod
    def invalid_constructor(cls, destination_type: type, reason: str) -> "ConfigurationError":
        return cls(
            f"Type {destination_type.__qualname__} has invalid constructor parameters: {reason}"
        )


class InstanceCreationError(ProjectionError):
    """Raised when invoking a destination type's constructor fails."""

    def __init__(self, destination_type: type, cause: BaseException):
        self.destination_type = destination_type
        self.cause = cause
        super().__init__(
            f"Could not create an instance of {destination_type.__qualname__}: "
            f"{type(cause).__name__}: {cause}"
        )


class ResolutionFailure(ProjectionError):
    """A resolver failed for a single property.

    Resolution failures are recovered locally: the property keeps its
    default value and the projection carries on.
    """

    def __init__(self, property_name: str, cause: BaseException):
        self.property_name = property_name
        self.cause = cause
        super().__init__(f"Could not resolve a value for '{property_name}': {cause}")


class ConversionFailure(ProjectionError):
    """A converter failed for a single property.

    Like resolution failures, these never abort a projection.
    """

    def __init__(self, property_name: str, cause: BaseException):
        self.property_name = property_name
        self.cause = cause
        super().__init__(f"Could not convert the value for '{property_name}': {cause}")
