"""Environment-based configuration for lazy-concat buffers."""

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Library-wide defaults.

    All settings can be overridden via environment variables with
    LAZY_CONCAT_ prefix. For example:
        LAZY_CONCAT_REPR_FRAGMENT_LIMIT=20
        LAZY_CONCAT_MAX_PENDING_FRAGMENTS=1024
    """

    # Debug formatting
    repr_fragment_limit: int = Field(default=8, ge=0)

    # Auto-fold once more than this many fragments are pending (None = never)
    max_pending_fragments: int | None = Field(default=None, ge=1)

    model_config = {"env_prefix": "LAZY_CONCAT_"}


settings = Settings()
