"""S3-compatible object store backend (AWS S3, MinIO) built on the MinIO client."""

from typing import BinaryIO, Optional

from fastapi import UploadFile
from fastapi.concurrency import run_in_threadpool
from minio import Minio
from minio.credentials import (
    AWSConfigProvider,
    ChainedProvider,
    EnvAWSProvider,
    EnvMinioProvider,
    IamAwsProvider,
)
from minio.error import MinioException
from urllib3.exceptions import HTTPError

from app.errors import StorageIOError
from app.logging_config import logger
from app.storage.base import StorageBackend, generate_filename

# Multipart chunk size when the upload length is not known up front
UNKNOWN_LENGTH_PART_SIZE = 10 * 1024 * 1024

# Failures the MinIO client can surface: S3 API errors, malformed responses,
# transport errors and local read errors on the source stream.
CLIENT_ERRORS = (MinioException, HTTPError, OSError, ValueError)


def create_minio_client(
    endpoint: str,
    region: str,
    secure: bool = True,
    access_key: Optional[str] = None,
    secret_key: Optional[str] = None,
) -> Minio:
    """Build a MinIO client.

    Static keys are used when both are given; otherwise credentials come from
    the ambient AWS chain (environment, shared config file, instance role).
    """
    endpoint = endpoint.replace("http://", "").replace("https://", "")

    if access_key and secret_key:
        return Minio(
            endpoint,
            access_key=access_key,
            secret_key=secret_key,
            secure=secure,
            region=region,
        )

    credentials = ChainedProvider([
        EnvAWSProvider(),
        EnvMinioProvider(),
        AWSConfigProvider(),
        IamAwsProvider(),
    ])
    return Minio(endpoint, secure=secure, region=region, credentials=credentials)


class ObjectStorage(StorageBackend):
    """Stores media files as objects in a single bucket.

    Locators have the form ``{public_base_url}/{object-key}`` where the base
    defaults to the virtual-hosted bucket URL
    ``https://{bucket}.s3.{region}.amazonaws.com``.
    """

    name = "s3"

    def __init__(
        self,
        client: Minio,
        bucket: str,
        region: str,
        public_base_url: Optional[str] = None,
    ):
        self.client = client
        self.bucket = bucket
        self.region = region
        self.public_base_url = (
            public_base_url or f"https://{bucket}.s3.{region}.amazonaws.com"
        ).rstrip("/")

        logger.info(
            "Object storage initialized",
            bucket=bucket,
            region=region,
            public_base_url=self.public_base_url,
        )

    def ensure_bucket(self) -> None:
        """Create the bucket if it does not exist."""
        try:
            if not self.client.bucket_exists(bucket_name=self.bucket):
                self.client.make_bucket(bucket_name=self.bucket, location=self.region)
                logger.info("Created storage bucket", bucket=self.bucket)
        except CLIENT_ERRORS as e:
            logger.error("Failed to create bucket", bucket=self.bucket, error=str(e))
            raise StorageIOError(f"Cannot prepare bucket {self.bucket!r}") from e

    def _put(self, data: BinaryIO, file: UploadFile, object_key: str) -> None:
        length = file.size if file.size is not None else -1
        self.client.put_object(
            bucket_name=self.bucket,
            object_name=object_key,
            data=data,
            length=length,
            part_size=0 if length >= 0 else UNKNOWN_LENGTH_PART_SIZE,
            content_type=file.content_type or "application/octet-stream",
        )

    async def upload(self, file: UploadFile) -> str:
        object_key = generate_filename(file.filename)

        try:
            await self._stream_in_thread(self._put, file, file, object_key)
        except CLIENT_ERRORS as e:
            self._record("upload", "error")
            logger.error(
                "Failed to upload object",
                bucket=self.bucket,
                object_key=object_key,
                original_filename=file.filename,
                error=str(e),
            )
            raise StorageIOError(f"Failed to upload {file.filename!r}") from e

        self._record("upload", "success")
        locator = f"{self.public_base_url}/{object_key}"
        logger.info(
            "Uploaded object to storage",
            bucket=self.bucket,
            object_key=object_key,
            original_filename=file.filename,
        )
        return locator

    def object_key(self, locator: str) -> str:
        """Derive the object key from a locator.

        Raises:
            StorageIOError: If the locator does not point into this bucket
        """
        prefix = f"{self.public_base_url}/"
        key = locator[len(prefix):] if locator.startswith(prefix) else ""
        if not key:
            raise StorageIOError(f"Locator does not belong to bucket {self.bucket!r}: {locator!r}")
        return key

    async def delete(self, locator: str) -> None:
        try:
            object_key = self.object_key(locator)
        except StorageIOError:
            self._record("delete", "error")
            logger.warning("Cannot resolve locator for deletion", locator=locator, bucket=self.bucket)
            raise

        try:
            await run_in_threadpool(
                self.client.remove_object,
                bucket_name=self.bucket,
                object_name=object_key,
            )
        except CLIENT_ERRORS as e:
            self._record("delete", "error")
            logger.warning(
                "Failed to delete object",
                bucket=self.bucket,
                object_key=object_key,
                error=str(e),
            )
            raise StorageIOError(f"Failed to delete {locator!r}") from e

        self._record("delete", "success")
        logger.info("Deleted object from storage", bucket=self.bucket, object_key=object_key)
