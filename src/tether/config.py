"""Application configuration.

AppConfig is a frozen dataclass — immutable after creation, IDE-autocompletable,
no string-key dict lookups.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(debug=True, strict_bindings=True)
    """

    debug: bool = False

    # Bindings
    # A route that binds a name with no registered resolver fails at
    # startup when strict, and per request (through the error channel)
    # otherwise.
    strict_bindings: bool = False

    # Logging — level applied to the "tether" logger at freeze; None leaves it alone
    log_level: str | None = None

    # Limits
    max_content_length: int = 16 * 1024 * 1024  # 16 MB
