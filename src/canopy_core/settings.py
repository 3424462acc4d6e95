from __future__ import annotations
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .crypto import check_algorithm


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", case_sensitive=False, extra="ignore"
    )

    hash_alg: str = Field(default="sha256", alias="CANOPY_HASH_ALG")
    files_dir: str = Field(default="./files", alias="CANOPY_FILES_DIR")

    signing_key_path: str = Field(
        default="./keys/ed25519_private.key", alias="CANOPY_SIGNING_KEY_PATH"
    )
    signing_pubkey_path: str = Field(
        default="./keys/ed25519_public.key", alias="CANOPY_SIGNING_PUBKEY_PATH"
    )

    log_level: str = Field(default="INFO", alias="CANOPY_LOG_LEVEL")
    # Report elapsed time of setup/verify/insert
    log_timings: bool = Field(default=True, alias="CANOPY_LOG_TIMINGS")

    @field_validator("hash_alg")
    @classmethod
    def _known_algorithm(cls, v: str) -> str:
        return check_algorithm(v)


settings = Settings()  # load at import
