"""
Runtime configuration for paramchain.

Values come from the environment (a local .env file is loaded first):

    # Log a warning every time an operation rejects its params
    export PARAMCHAIN_LOG_VALIDATION_ERRORS=true

    # Params that don't declare `required` are required
    export PARAMCHAIN_DEFAULT_REQUIRED=true

    # Chains wrap error results together with the failing operation
    export PARAMCHAIN_CHAIN_NAME_IN_ERROR=false
"""
import os

from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() == 'true'


class Settings:
    """Library settings with environment variable support."""

    def __init__(
        self,
        log_validation_errors: bool = True,
        default_required: bool = True,
        chain_name_in_error: bool = False,
    ):
        self.log_validation_errors = log_validation_errors
        self.default_required = default_required
        self.chain_name_in_error = chain_name_in_error

    @classmethod
    def from_env(cls) -> 'Settings':
        """Build settings from the current process environment."""
        return cls(
            log_validation_errors=_env_flag('PARAMCHAIN_LOG_VALIDATION_ERRORS', 'true'),
            default_required=_env_flag('PARAMCHAIN_DEFAULT_REQUIRED', 'true'),
            chain_name_in_error=_env_flag('PARAMCHAIN_CHAIN_NAME_IN_ERROR', 'false'),
        )

    def __repr__(self):
        return (
            f"Settings(log_validation_errors={self.log_validation_errors}, "
            f"default_required={self.default_required}, "
            f"chain_name_in_error={self.chain_name_in_error})"
        )


settings = Settings.from_env()


def reload_settings() -> Settings:
    """Re-read the environment into the shared settings instance."""
    fresh = Settings.from_env()
    settings.log_validation_errors = fresh.log_validation_errors
    settings.default_required = fresh.default_required
    settings.chain_name_in_error = fresh.chain_name_in_error
    return settings
