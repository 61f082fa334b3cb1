# service/object_store_service.py
import asyncio
import logging
from typing import BinaryIO, Dict, List, Optional, Union
from boto3.exceptions import Boto3Error
from boto3.s3.transfer import TransferConfig
from botocore.exceptions import BotoCoreError, ClientError
from model.storage import LifecyclePolicy, StorageEvent
from util.enums import ErrorMessage
from util.errors import ConfigurationError, MissingTenant, UploadError
from util.functions import url_join
from util.timing import timed
from util.types import UploadExtraArgs

logger = logging.getLogger(__name__)

_NOT_FOUND_CODES = frozenset({"404", "NotFound", "NoSuchKey"})
_BACKEND_ERRORS = (ClientError, BotoCoreError, Boto3Error)


def _backend_message(err: Exception) -> str:
    if isinstance(err, ClientError):
        return err.response.get("Error", {}).get("Message") or str(err)
    return str(err)


class ObjectStoreGateway:
    """
    Moves byte streams into S3-compatible storage and manages their retention.

    - upload / key_exists raise UploadError on backend failure; the caller owns retries.
    - create_lifecycle_policy is best effort: failures are logged and reported as False
      so a sweep over several buckets or prefixes can carry on.

    boto3 is blocking, so every call is pushed to a worker thread.
    """

    def __init__(
        self,
        client,
        *,
        endpoint_url: str,
        default_bucket: str,
        cache_ttl: int,
        path_prefix: str = "",
        transfer_config: TransferConfig | None = None,
    ) -> None:
        self._s3 = client
        self._endpoint = endpoint_url
        self._bucket = default_bucket
        self._cache_ttl = int(cache_ttl)
        self._path_prefix = path_prefix.strip("/")
        self._transfer = transfer_config or TransferConfig()

    @property
    def default_bucket(self) -> str:
        return self._bucket

    def storage_url(self, bucket: str, key: str) -> str:
        return url_join(self._endpoint, bucket, key)

    def tenant_prefix(self, workspace: str) -> str:
        """Key prefix owning every object of `workspace`, e.g. "assets/acme/"."""
        if not workspace:
            raise MissingTenant("Missing required parameter: workspace")
        return url_join(self._path_prefix, workspace) + "/"

    # ---------------- Upload ----------------

    async def upload(
        self,
        stream: BinaryIO,
        key: str,
        content_type: str,
        metadata: Optional[Dict[str, str]] = None,
        bucket: Optional[str] = None,
    ) -> StorageEvent:
        """
        Stream `stream` to `bucket/key`. Payloads above the multipart threshold are
        sent part by part, so the whole body is never held in memory.
        Objects are public-read with a cache-control max-age of the tile TTL.
        """
        bucket = bucket or self._bucket
        extra: UploadExtraArgs = {
            "ContentType": content_type,
            "ACL": "public-read",
            "CacheControl": f"max-age={self._cache_ttl}",
        }
        if metadata:
            extra["Metadata"] = dict(metadata)

        try:
            with timed(logger, "s3.upload", bucket=bucket, key=key):
                await asyncio.to_thread(
                    self._s3.upload_fileobj,
                    stream,
                    bucket,
                    key,
                    ExtraArgs=extra,
                    Config=self._transfer,
                )
                # upload_fileobj returns nothing; read back what the backend computed
                head = await asyncio.to_thread(self._s3.head_object, Bucket=bucket, Key=key)
        except _BACKEND_ERRORS as e:
            msg = _backend_message(e)
            logger.error("s3.upload.error bucket=%s key=%s err=%s", bucket, key, msg)
            raise UploadError(f"{ErrorMessage.UPLOAD_FAILED.value.message} {msg}") from e

        event = StorageEvent(
            bucket=bucket,
            key=key,
            etag=head.get("ETag", ""),
            storageUrl=self.storage_url(bucket, key),
            metadata=dict(metadata) if metadata else None,
        )
        logger.debug("s3.upload.ok url=%s", event.storageUrl)
        return event

    # ---------------- Existence probe ----------------

    async def key_exists(
        self, key: str, bucket: Optional[str] = None
    ) -> Optional[StorageEvent]:
        """Metadata-only lookup. None when the key does not exist."""
        bucket = bucket or self._bucket
        try:
            meta = await asyncio.to_thread(self._s3.head_object, Bucket=bucket, Key=key)
        except ClientError as e:
            code = str(e.response.get("Error", {}).get("Code", ""))
            if code in _NOT_FOUND_CODES:
                logger.debug("s3.head.missing bucket=%s key=%s", bucket, key)
                return None
            msg = _backend_message(e)
            logger.error("s3.head.error bucket=%s key=%s err=%s", bucket, key, msg)
            raise UploadError(
                f"{ErrorMessage.META_FAILED.value.message} {msg}",
                ErrorMessage.META_FAILED.value,
            ) from e
        except (BotoCoreError, Boto3Error) as e:
            logger.error("s3.head.error bucket=%s key=%s err=%s", bucket, key, e)
            raise UploadError(
                f"{ErrorMessage.META_FAILED.value.message} {e}",
                ErrorMessage.META_FAILED.value,
            ) from e

        logger.debug(
            "s3.head.found bucket=%s key=%s bytes=%s", bucket, key, meta.get("ContentLength")
        )
        return StorageEvent(
            bucket=bucket,
            key=key,
            etag=meta.get("ETag", ""),
            storageUrl=self.storage_url(bucket, key),
            metadata=meta.get("Metadata") or None,
        )

    # ---------------- Lifecycle ----------------

    async def create_lifecycle_policy(
        self,
        prefixes: Union[str, List[str]],
        bucket: Optional[str] = None,
        expiration_days: int = 1,
    ) -> bool:
        """
        Replace the bucket's lifecycle configuration with one expiration rule per prefix.

        Rules previously attached to the bucket are dropped unless passed again.
        """
        if isinstance(prefixes, str):
            key_prefixes = [prefixes]
        elif (
            isinstance(prefixes, list)
            and prefixes
            and all(isinstance(p, str) for p in prefixes)
        ):
            key_prefixes = list(prefixes)
        else:
            raise ConfigurationError("Unsupported object key prefix format.")
        if (
            isinstance(expiration_days, bool)
            or not isinstance(expiration_days, int)
            or expiration_days < 1
        ):
            raise ConfigurationError("Expiration must be a positive number of days.")

        policy = LifecyclePolicy(
            bucket=bucket or self._bucket,
            prefixes=key_prefixes,
            expirationDays=expiration_days,
        )
        logger.debug("s3.lifecycle.apply bucket=%s prefixes=%s", policy.bucket, key_prefixes)

        try:
            res = await asyncio.to_thread(
                self._s3.put_bucket_lifecycle_configuration,
                Bucket=policy.bucket,
                LifecycleConfiguration=policy.to_s3(),
            )
        except _BACKEND_ERRORS as e:
            logger.error(
                "s3.lifecycle.error bucket=%s err=%s", policy.bucket, _backend_message(e)
            )
            return False

        logger.debug("s3.lifecycle.ok bucket=%s response=%s", policy.bucket, res)
        return True
