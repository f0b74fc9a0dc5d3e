"""Custom exceptions for the trading kit."""


class PolyError(Exception):
    """Base exception for all trading kit errors."""


class ConfigError(PolyError):
    """Missing or invalid configuration."""


class MissingDependencyError(PolyError):
    """An optional client library is not installed."""


class DataApiError(PolyError):
    """Error reading from the Gamma, Data or CLOB REST APIs."""


class ExecutionError(PolyError):
    """Error querying prices or relaying transactions."""


class SessionError(PolyError):
    """Trading session bootstrap could not complete."""


class SafeNotDeployedError(SessionError):
    """The Safe has no bytecode and auto-deploy is disabled."""


class SafeDeploymentError(SessionError):
    """The relayer did not confirm a deployed Safe address."""
