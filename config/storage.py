# config/storage.py
from functools import lru_cache
import boto3
from botocore.config import Config
from boto3.s3.transfer import TransferConfig
from config.settings import Settings, settings

MB = 1024 * 1024


def build_s3_client(cfg: Settings):
    """Path-style S3 client bound to the configured endpoint (works with localstack/minio)."""
    session = boto3.session.Session(
        aws_access_key_id=cfg.S3_ACCESS_KEY_ID or None,
        aws_secret_access_key=cfg.S3_SECRET_ACCESS_KEY or None,
        region_name=cfg.S3_REGION or None,
    )
    return session.client(
        "s3",
        endpoint_url=cfg.S3_ENDPOINT_URL or None,
        config=Config(
            s3={"addressing_style": "path" if cfg.S3_FORCE_PATH_STYLE else "auto"},
        ),
    )


def build_transfer_config(cfg: Settings) -> TransferConfig:
    return TransferConfig(
        multipart_threshold=cfg.S3_MULTIPART_THRESHOLD_MB * MB,
        multipart_chunksize=cfg.S3_MULTIPART_CHUNK_MB * MB,
    )


@lru_cache(maxsize=1)
def get_s3_client():
    # boto3 clients are thread-safe; one per process is enough.
    return build_s3_client(settings)
