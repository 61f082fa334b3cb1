# config/settings.py
import os
import sys
from typing import FrozenSet
from dotenv import load_dotenv
from pydantic import ValidationError, Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from util.enums import Environment
import logging


if os.getenv("APP_ENV", Environment.DEV) == Environment.DEV:
    load_dotenv()

_log = logging.getLogger("config.settings")


class Settings(BaseSettings):
    # Loaded once at startup; components get it through their constructors.
    model_config = SettingsConfigDict(frozen=True)

    # App
    APP_ENV: str = Field(..., validation_alias="APP_ENV")
    REDIS_URL: str = Field(..., validation_alias="REDIS_URL")

    # CORS & Limits
    ALLOWED_ORIGIN: str = Field(..., validation_alias="ALLOWED_ORIGIN")
    RATE_LIMIT_TIMES: int = Field(..., validation_alias="RATE_LIMIT_TIMES")
    RATE_LIMIT_SECONDS: int = Field(..., validation_alias="RATE_LIMIT_SECONDS")
    TRUST_PROXY: bool = Field(default=False, validation_alias="TRUST_PROXY")

    # Event bus
    SNS_TOPIC_SUBSCRIPTION_ARN: str = Field(
        ..., validation_alias="SNS_TOPIC_SUBSCRIPTION_ARN"
    )
    SNS_HANDSHAKE_TIMEOUT_SECONDS: float = Field(
        default=10.0, validation_alias="SNS_HANDSHAKE_TIMEOUT_SECONDS"
    )

    # Object storage
    S3_ENDPOINT_URL: str = Field(..., validation_alias="S3_ENDPOINT_URL")
    S3_REGION: str = Field(default="us-east-1", validation_alias="S3_REGION")
    S3_ACCESS_KEY_ID: str = Field(default="", validation_alias="S3_ACCESS_KEY_ID")
    S3_SECRET_ACCESS_KEY: str = Field(
        default="", validation_alias="S3_SECRET_ACCESS_KEY"
    )
    S3_FORCE_PATH_STYLE: bool = Field(default=True, validation_alias="S3_FORCE_PATH_STYLE")
    S3_ASSETS_BUCKET: str = Field(..., validation_alias="S3_ASSETS_BUCKET")
    S3_ASSETS_PATH_PREFIX: str = Field(
        default="assets", validation_alias="S3_ASSETS_PATH_PREFIX"
    )
    S3_MAP_TILES_TTL: int = Field(default=86400, validation_alias="S3_MAP_TILES_TTL")
    S3_MULTIPART_THRESHOLD_MB: int = Field(
        default=8, validation_alias="S3_MULTIPART_THRESHOLD_MB"
    )
    S3_MULTIPART_CHUNK_MB: int = Field(default=8, validation_alias="S3_MULTIPART_CHUNK_MB")

    # Data lifecycle
    WIPE_OBJECT_TTL_DAYS: int = Field(
        default=1, ge=1, validation_alias="WIPE_OBJECT_TTL_DAYS"
    )
    WIPE_PROTECTED_WORKSPACES: str = Field(
        default="", validation_alias="WIPE_PROTECTED_WORKSPACES"
    )
    REFERENCE_CHECK_STRICT: bool = Field(
        default=False, validation_alias="REFERENCE_CHECK_STRICT"
    )
    WORKFLOW_TTL_SECONDS: int = Field(
        default=7 * 24 * 3600, validation_alias="WORKFLOW_TTL_SECONDS"
    )

    # Logging knobs
    LOGGER_NAME: str = "workspace-lifecycle"
    LOG_LEVEL: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    LOG_TO_FILE: bool = Field(default=False, validation_alias="LOG_TO_FILE")
    LOG_DIR: str = Field(default="logs", validation_alias="LOG_DIR")
    LOG_FILE_NAME: str = Field(default="app.log", validation_alias="LOG_FILE_NAME")
    LOG_MAX_BYTES: int = Field(
        default=50 * 1024 * 1024, validation_alias="LOG_MAX_BYTES"
    )
    LOG_BACKUP_COUNT: int = Field(default=5, validation_alias="LOG_BACKUP_COUNT")

    @property
    def protected_workspaces(self) -> FrozenSet[str]:
        # Comma separated in the environment, e.g. "MARAPP,internal"
        return frozenset(
            w.strip() for w in self.WIPE_PROTECTED_WORKSPACES.split(",") if w.strip()
        )


try:
    settings = Settings()
except ValidationError as e:
    print("❌ Missing/invalid environment variables:", file=sys.stderr)
    for err in e.errors():
        loc = ".".join(str(x) for x in err.get("loc", []))
        msg = err.get("msg", "")
        print(f" - {loc}: {msg}", file=sys.stderr)
    sys.exit(1)
except Exception as e:
    print(f"❌ Settings initialization failed: {e}", file=sys.stderr)
    sys.exit(1)
