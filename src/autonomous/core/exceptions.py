"""autonomous exception hierarchy."""

from __future__ import annotations


class AutonomousError(Exception):
    """Base exception for all autonomous errors."""


class ConfigError(AutonomousError):
    """Raised when the configuration is invalid or cannot be read."""


class ConfigNotFoundError(ConfigError):
    """Raised when an explicitly requested configuration file does not exist."""


class CacheError(AutonomousError):
    """Raised when an evaluation cache or metadata file cannot be parsed."""


class AdapterError(AutonomousError):
    """Raised when an agent CLI adapter is unknown or misconfigured."""


class SessionError(AutonomousError):
    """Raised when session management fails."""


class SpawnError(SessionError):
    """Raised when the agent process cannot be started."""


class SessionKilledError(SessionError):
    """Raised when the agent process was terminated by a signal."""

    def __init__(self, signal_name: str, exit_code: int | None = None) -> None:
        super().__init__(f"Agent process killed by signal {signal_name}")
        self.signal = signal_name
        self.exit_code = exit_code
