# utils/s3.py
import io
import logging
from functools import lru_cache
from pathlib import PurePosixPath

import boto3

from app.core.config import settings

logger = logging.getLogger(__name__)


class MediaStorage:
    """Thin wrapper over an S3 client that stores post media under one prefix."""

    def __init__(self, client, bucket: str, prefix: str = "", region: str | None = None, endpoint_url: str | None = None):
        self.client = client
        self.bucket = bucket
        self.prefix = prefix.strip("/")
        self.region = region
        self.endpoint_url = endpoint_url

    def key_for(self, filename: str) -> str:
        # Keyed by the original filename, minus any client-supplied directories
        name = PurePosixPath((filename or "").replace("\\", "/")).name or "upload"
        return f"{self.prefix}/{name}" if self.prefix else name

    def public_url(self, key: str) -> str:
        if self.endpoint_url:
            return f"{self.endpoint_url.rstrip('/')}/{self.bucket}/{key}"
        if self.region:
            return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{key}"
        return f"https://{self.bucket}.s3.amazonaws.com/{key}"

    def upload(self, key: str, body: bytes, content_type: str) -> str:
        logger.info("Uploading %d bytes to s3://%s/%s", len(body), self.bucket, key)
        self.client.upload_fileobj(
            Fileobj=io.BytesIO(body),
            Bucket=self.bucket,
            Key=key,
            ExtraArgs={"ContentType": content_type},
        )
        return self.public_url(key)

    def delete(self, key: str) -> None:
        logger.warning("Deleting s3://%s/%s", self.bucket, key)
        self.client.delete_object(Bucket=self.bucket, Key=key)


@lru_cache
def get_storage() -> MediaStorage:
    s3 = boto3.client(
        "s3",
        aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
        aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
        region_name=settings.AWS_REGION,
        endpoint_url=settings.S3_ENDPOINT_URL,
    )
    return MediaStorage(
        s3,
        bucket=settings.S3_BUCKET_NAME,
        prefix=settings.S3_MEDIA_PREFIX,
        region=settings.AWS_REGION,
        endpoint_url=settings.S3_ENDPOINT_URL,
    )
