# model/storage.py
from typing import List
from pydantic import BaseModel, ConfigDict, Field
from util.types import S3LifecycleConfiguration


class StorageEvent(BaseModel):
    """Outcome of an upload or an existence probe. Callers persist what they need."""

    model_config = ConfigDict(frozen=True)

    bucket: str
    key: str
    etag: str
    storageUrl: str
    metadata: dict[str, str] | None = None


class LifecyclePolicy(BaseModel):
    """
    Expiration rules attached to a bucket.
    Applying a policy replaces whatever the bucket had before.
    """

    model_config = ConfigDict(frozen=True)

    bucket: str
    prefixes: List[str] = Field(min_length=1)
    expirationDays: int = Field(default=1, ge=1)
    enabled: bool = True

    def to_s3(self) -> S3LifecycleConfiguration:
        status = "Enabled" if self.enabled else "Disabled"
        return {
            "Rules": [
                {
                    "ID": f"expire-{i}-{prefix}"[:255],
                    "Filter": {"Prefix": prefix},
                    "Expiration": {"Days": self.expirationDays},
                    "Status": status,
                }
                for i, prefix in enumerate(self.prefixes)
            ]
        }
