# app/core/storage.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from urllib.parse import urlparse, urlunparse

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from app.core.config import get_settings
from app.core.errors import StorageError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StorageConfig:
    endpoint_url: str
    # browser-facing endpoint; presigned URLs are rewritten onto it
    public_endpoint_url: str

    access_key: str
    secret_key: str
    region: str

    bucket: str
    upload_expires_s: int = 600
    download_expires_s: int = 300


class ObjectStorage:
    """
    Thin wrapper over an S3-compatible bucket.

    Every botocore failure is re-raised as StorageError so callers only deal
    with one collaborator-failure type.
    """

    def __init__(self, cfg: StorageConfig) -> None:
        self.cfg = cfg
        self._client = boto3.client(
            "s3",
            endpoint_url=cfg.endpoint_url,
            aws_access_key_id=cfg.access_key,
            aws_secret_access_key=cfg.secret_key,
            region_name=cfg.region,
            config=BotoConfig(
                signature_version="s3v4",
                s3={"addressing_style": "path"},
            ),
        )

    def _rewrite_to_public(self, presigned_url: str) -> str:
        # signature covers path+query only for path-style, so swapping host is safe
        if not self.cfg.public_endpoint_url:
            return presigned_url
        u = urlparse(presigned_url)
        pub = urlparse(self.cfg.public_endpoint_url)
        return urlunparse(
            (pub.scheme or u.scheme, pub.netloc or u.netloc, u.path, u.params, u.query, u.fragment)
        )

    def presign_upload(self, key: str, content_type: str) -> str:
        try:
            url = self._client.generate_presigned_url(
                ClientMethod="put_object",
                Params={
                    "Bucket": self.cfg.bucket,
                    "Key": key,
                    "ContentType": content_type or "application/octet-stream",
                },
                ExpiresIn=int(self.cfg.upload_expires_s),
            )
        except (BotoCoreError, ClientError) as e:
            raise StorageError(f"Could not issue upload URL: {e}") from e
        return self._rewrite_to_public(url)

    def presign_download(self, key: str) -> str:
        try:
            url = self._client.generate_presigned_url(
                ClientMethod="get_object",
                Params={"Bucket": self.cfg.bucket, "Key": key},
                ExpiresIn=int(self.cfg.download_expires_s),
            )
        except (BotoCoreError, ClientError) as e:
            raise StorageError(f"Could not issue download URL: {e}") from e
        return self._rewrite_to_public(url)

    def remove(self, keys: list[str]) -> None:
        if not keys:
            return
        try:
            resp = self._client.delete_objects(
                Bucket=self.cfg.bucket,
                Delete={"Objects": [{"Key": k} for k in keys], "Quiet": True},
            )
        except (BotoCoreError, ClientError) as e:
            raise StorageError(f"Could not remove objects: {e}") from e

        errors = resp.get("Errors") or []
        if errors:
            raise StorageError(
                "Could not remove objects: "
                + ", ".join(f"{e.get('Key')} ({e.get('Code')})" for e in errors)
            )


@lru_cache(maxsize=1)
def get_storage() -> ObjectStorage:
    settings = get_settings()
    cfg = StorageConfig(
        endpoint_url=settings.s3_endpoint_url,
        public_endpoint_url=settings.s3_public_endpoint_url,
        access_key=settings.s3_access_key,
        secret_key=settings.s3_secret_key,
        region=settings.s3_region,
        bucket=settings.s3_bucket,
        upload_expires_s=settings.upload_url_expires_s,
        download_expires_s=settings.download_url_expires_s,
    )
    logger.info("object storage bucket=%s endpoint=%s", cfg.bucket, cfg.endpoint_url)
    return ObjectStorage(cfg)
