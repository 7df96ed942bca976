"""
Document store abstraction for local and S3 backends.
"""

from django.conf import settings
from django.core.files.storage import default_storage

from apps.core.logging import get_logger

logger = get_logger(__name__)


class StorageService:
    """
    Abstraction over local filesystem and S3 storage.

    In production, hands out presigned GET URLs on the private bucket.
    In development, files sit under MEDIA_ROOT and are served by URL.
    """

    def __init__(self) -> None:
        self.use_s3 = getattr(settings, "USE_S3_STORAGE", False)
        if self.use_s3:
            import boto3

            self.s3_client = boto3.client(
                "s3",
                aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
                aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
                region_name=getattr(settings, "AWS_S3_REGION_NAME", "us-east-1"),
            )
            self.bucket_name = settings.AWS_STORAGE_BUCKET_NAME

    def get_download_url(self, key: str, expires_in: int) -> str:
        """
        Get a time-limited URL for downloading a file.

        For S3: presigned GET URL valid for expires_in seconds
        For local: plain URL under MEDIA_URL (no expiry)
        """
        if self.use_s3:
            return self.s3_client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self.bucket_name, "Key": key},
                ExpiresIn=expires_in,
            )
        backend_url = getattr(settings, "BACKEND_URL", "http://localhost:8000").rstrip("/")
        return f"{backend_url}/{settings.MEDIA_URL.lstrip('/')}{key}"

    def delete(self, key: str) -> bool:
        """
        Delete a file from storage.

        Returns False when the backend refused; the caller decides whether
        that matters.
        """
        try:
            if self.use_s3:
                self.s3_client.delete_object(Bucket=self.bucket_name, Key=key)
            elif default_storage.exists(key):
                default_storage.delete(key)
        except Exception as e:
            logger.warning("document_blob_delete_failed", storage_path=key, error=str(e))
            return False
        return True


# Singleton instance
_storage_service: StorageService | None = None


def get_storage_service() -> StorageService:
    """Get the storage service singleton."""
    global _storage_service
    if _storage_service is None:
        _storage_service = StorageService()
    return _storage_service
