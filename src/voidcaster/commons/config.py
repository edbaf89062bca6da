"""Runtime settings read from the environment"""

# System
from typing import Optional
import os

# Utils
from pydantic import BaseModel, field_validator

DEFAULT_BACKUP_SUFFIX = "~"


class Settings(BaseModel):
    libclang_path: Optional[str] = None
    backup_suffix: str = DEFAULT_BACKUP_SUFFIX
    staging_dir: Optional[str] = None

    @field_validator("backup_suffix")
    @classmethod
    def _non_empty_suffix(cls, value: str) -> str:
        if not value:
            raise ValueError("backup suffix must not be empty")
        return value

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            libclang_path=os.getenv("VOIDCASTER_LIBCLANG") or None,
            backup_suffix=os.getenv("VOIDCASTER_BACKUP_SUFFIX", DEFAULT_BACKUP_SUFFIX),
            staging_dir=os.getenv("VOIDCASTER_STAGING_DIR") or None,
        )
