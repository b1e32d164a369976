"""Application configuration.

AppConfig is a frozen dataclass: immutable after creation and
typed, with no string-key dict lookups.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(debug=True, request_timeout=5.0)
    """

    debug: bool = False
    log_level: str = "warning"

    # Honor X-HTTP-Method-Override on POST (HTML forms can't send PUT/DELETE)
    method_override: bool = False

    # Seconds before a request is cancelled with 504; None disables
    request_timeout: float | None = 30.0
