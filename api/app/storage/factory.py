"""Process-wide storage backend selected from configuration."""

from typing import Optional

from app.config import Settings, settings
from app.logging_config import logger
from app.storage.base import StorageBackend
from app.storage.local import LocalStorage
from app.storage.object_store import ObjectStorage, create_minio_client


def build_storage_backend(config: Settings) -> StorageBackend:
    """Instantiate the backend named by ``config.storage_backend``."""
    if config.storage_backend == "s3":
        client = create_minio_client(
            endpoint=config.s3_endpoint,
            region=config.aws_region,
            secure=config.s3_secure,
            access_key=config.s3_access_key,
            secret_key=config.s3_secret_key,
        )
        backend = ObjectStorage(
            client=client,
            bucket=config.aws_bucket_name,
            region=config.aws_region,
            public_base_url=config.s3_public_base_url,
        )
        if config.s3_create_bucket:
            backend.ensure_bucket()
        return backend

    return LocalStorage(upload_dir=config.upload_dir, base_url=config.upload_base_url)


class StorageProvider:
    """Singleton holder for the configured storage backend."""

    _instance: Optional[StorageBackend] = None

    @classmethod
    def get_backend(cls) -> StorageBackend:
        """Get or create the storage backend instance."""
        if cls._instance is None:
            cls._instance = build_storage_backend(settings)
            logger.info("Storage backend selected", backend=cls._instance.name)
        return cls._instance


def get_storage_backend() -> StorageBackend:
    """Get storage backend instance (for dependency injection)."""
    return StorageProvider.get_backend()
