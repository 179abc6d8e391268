"""Exceptions raised by the error injection engine."""


class ErrorEngineError(Exception):
    """Base exception for engine operations."""

    pass


class InvalidTransformationError(ErrorEngineError):
    """Raised when a payload cannot be parsed into a transformation."""

    pass


class UnsupportedStrategyError(ErrorEngineError):
    """Raised when a spatial strategy key has no implementation."""

    def __init__(self, key: str):
        super().__init__(f"No spatial strategy registered for '{key}'")
        self.key = key


class StrategyExecutionError(ErrorEngineError):
    """Raised by a spatial strategy whose preconditions fail during apply."""

    pass


class InvalidSpaceConfigurationError(ErrorEngineError):
    """Raised when a space parameter falls outside its declared ranges."""

    def __init__(self, errors: list[str]):
        super().__init__("Invalid space parameter: " + "; ".join(errors))
        self.errors = errors
