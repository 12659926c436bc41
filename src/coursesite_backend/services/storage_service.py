import io
import logging
from typing import Optional
from minio import Minio
from minio.error import S3Error

from ..api.exceptions import (
    ServiceUnavailableException, 
    NotFoundException
)
from ..settings import settings

logger = logging.getLogger(__name__)


def create_minio_client() -> Minio:
    """Build a MinIO client from the MINIO_* settings"""
    logger.info(f"Connecting attachment storage to {settings.MINIO_ENDPOINT}")
    return Minio(
        settings.MINIO_ENDPOINT,
        access_key=settings.MINIO_ACCESS_KEY,
        secret_key=settings.MINIO_SECRET_KEY,
        secure=settings.MINIO_SECURE,
        region=settings.MINIO_REGION
    )


class StorageService:
    """Service for handling MinIO storage operations"""
    
    def __init__(self, client: Optional[Minio] = None, bucket_name: Optional[str] = None):
        self.client = client or create_minio_client()
        self.default_bucket = bucket_name or settings.MINIO_BUCKET
    
    def ensure_bucket_exists(self) -> str:
        """Ensure bucket exists, create if it doesn't"""
        bucket = self.default_bucket
        try:
            if not self.client.bucket_exists(bucket):
                self.client.make_bucket(bucket)
                logger.info(f"Created bucket: {bucket}")
        except S3Error as e:
            logger.error(f"Error ensuring bucket exists: {e}")
            raise ServiceUnavailableException(f"Storage service error: {e}")
        return bucket
    
    def put_bytes(self, object_key: str, data: bytes, content_type: Optional[str] = None) -> None:
        """Upload a blob to MinIO storage"""
        bucket = self.ensure_bucket_exists()
        
        try:
            self.client.put_object(
                bucket_name=bucket,
                object_name=object_key,
                data=io.BytesIO(data),
                length=len(data),
                content_type=content_type or 'application/octet-stream'
            )
            logger.info(f"Uploaded object: {bucket}/{object_key}")
        except S3Error as e:
            logger.error(f"Error uploading file: {e}")
            raise ServiceUnavailableException(f"Storage upload error: {e}")
    
    def get_bytes(self, object_key: str) -> bytes:
        """Download a blob from MinIO storage"""
        bucket = self.default_bucket
        
        try:
            response = self.client.get_object(bucket, object_key)
            try:
                return response.read()
            finally:
                response.close()
                response.release_conn()
        except S3Error as e:
            logger.error(f"Error downloading file: {e}")
            if e.code in ('NoSuchKey', 'NoSuchBucket'):
                raise NotFoundException(f"Object not found: {object_key}")
            raise ServiceUnavailableException(f"Storage download error: {e}")
    
    def remove(self, object_key: str) -> None:
        """Delete a blob; a missing object is not an error"""
        bucket = self.default_bucket
        
        try:
            self.client.remove_object(bucket, object_key)
            logger.info(f"Deleted object: {bucket}/{object_key}")
        except S3Error as e:
            if e.code == 'NoSuchKey':
                return
            logger.error(f"Error deleting file: {e}")
            raise ServiceUnavailableException(f"Storage delete error: {e}")


_storage_service: Optional[StorageService] = None


def get_storage_service() -> StorageService:
    """Get the shared storage service instance"""
    global _storage_service
    if _storage_service is None:
        _storage_service = StorageService()
    return _storage_service
