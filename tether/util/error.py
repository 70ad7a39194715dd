"""Utility layer errors."""


class UtilError(Exception):
    """Base utility error."""

    pass


class ConfigurationError(UtilError):
    """Raised at startup when settings are unsafe for the environment."""

    pass


def check_settings(settings) -> None:
    """Refuse to start a deployed environment with development defaults.

    Raises:
        ConfigurationError: If a production-only requirement is not met
    """
    if settings.environment not in ("staging", "production"):
        return

    if settings.auth.jwt_secret == "CHANGE_ME_IN_PRODUCTION":
        raise ConfigurationError("AUTH__JWT_SECRET must be set")
    if settings.code_store.backend == "memory":
        raise ConfigurationError(
            "CODE_STORE__BACKEND=memory cannot be shared between API workers"
        )
    if settings.device_login.operator_ticket.enabled and settings.environment == "production":
        raise ConfigurationError("The operator test ticket cannot run in production")
