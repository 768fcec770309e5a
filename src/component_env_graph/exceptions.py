"""Exceptions raised by the component environment graph."""


class ComponentEnvGraphError(Exception):
    """Base class for all graph errors."""

    pass


class ConfigurationError(ComponentEnvGraphError):
    """Raised when module-resolution or project configuration is missing or invalid."""

    pass


class SourceParseError(ComponentEnvGraphError):
    """Raised when a source file cannot be parsed."""

    def __init__(self, file_path: str, message: str):
        super().__init__(f"{file_path}: {message}")
        self.file_path = file_path
