"""
Object Storage Service for S3-compatible storage (MinIO, AWS S3, DigitalOcean Spaces).

Compliance documents are private objects keyed `{business_id}/{file_name}`;
reading one back requires a time-limited signed URL.

Architecture:
- Uses boto3 (AWS SDK for Python)
- Compatible with MinIO (local), AWS S3, DigitalOcean Spaces
- Automatic bucket creation on init
"""
import logging
from io import BytesIO
from typing import Dict, List, Optional

import boto3
from botocore.client import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError
from flask import current_app

from bizhub.exceptions import StorageError

logger = logging.getLogger(__name__)


def object_key(owner_id, file_name: str) -> str:
    """Storage path for a file owned by a business: `{owner_id}/{file_name}`."""
    return f"{owner_id}/{file_name}"


class StorageService:
    """
    S3-compatible object storage service.

    Usage:
        storage = StorageService()
        storage.upload_bytes(data, '12/tax-clearance-1700000000.pdf', 'application/pdf')
        url = storage.generate_signed_url('12/tax-clearance-1700000000.pdf')
    """

    def __init__(self, client=None, bucket: Optional[str] = None, signed_url_ttl: Optional[int] = None):
        """Initialize S3 client from Flask config unless one is supplied."""
        config = current_app.config
        self.bucket = bucket or config['S3_BUCKET']
        self.signed_url_ttl = signed_url_ttl or config.get('S3_SIGNED_URL_TTL', 3600)

        if client is not None:
            self.client = client
            return

        self.client = boto3.client(
            's3',
            endpoint_url=config['S3_ENDPOINT'],
            aws_access_key_id=config['S3_ACCESS_KEY'],
            aws_secret_access_key=config['S3_SECRET_KEY'],
            region_name=config['S3_REGION'],
            config=BotoConfig(signature_version='s3v4')
        )

        # Ensure bucket exists
        self._ensure_bucket_exists()

    def _ensure_bucket_exists(self):
        """Create bucket if it doesn't exist."""
        try:
            self.client.head_bucket(Bucket=self.bucket)
            logger.info(f"[STORAGE] Bucket '{self.bucket}' exists")
        except ClientError as e:
            error_code = e.response.get('Error', {}).get('Code')
            if error_code not in ('404', 'NoSuchBucket'):
                logger.error(f"[STORAGE] Failed to check bucket: {e}")
                raise StorageError() from e
            try:
                self.client.create_bucket(Bucket=self.bucket)
                logger.info(f"[STORAGE] Bucket '{self.bucket}' created")
            except ClientError as create_error:
                logger.error(f"[STORAGE] Failed to create bucket: {create_error}")
                raise StorageError() from create_error
        except BotoCoreError as e:
            logger.error(f"[STORAGE] Storage endpoint unreachable: {e}")
            raise StorageError() from e

    def upload_bytes(
        self,
        data: bytes,
        object_name: str,
        content_type: str = 'application/octet-stream',
        metadata: Optional[dict] = None
    ) -> str:
        """
        Upload raw bytes as a private object.

        Args:
            data: File content
            object_name: S3 object key (e.g., '12/tax-clearance-1700000000.pdf')
            content_type: MIME type
            metadata: Optional metadata dict

        Returns:
            The object key that was written

        Raises:
            StorageError: If upload fails
        """
        extra_args = {'ContentType': content_type}
        if metadata:
            extra_args['Metadata'] = metadata

        try:
            logger.info(f"[STORAGE] Uploading '{object_name}' to bucket '{self.bucket}'...")
            self.client.upload_fileobj(BytesIO(data), self.bucket, object_name, ExtraArgs=extra_args)
            logger.info(f"[STORAGE] File uploaded: {object_name} ({len(data)} bytes)")
            return object_name
        except (ClientError, BotoCoreError) as e:
            logger.exception(f"[STORAGE] Upload failed: {e}")
            raise StorageError('The file could not be uploaded. Please try again.') from e

    def list_objects(self, prefix: str) -> List[Dict]:
        """
        List objects under a prefix.

        Returns:
            list of dicts with key, size and last_modified, in listing order

        Raises:
            StorageError: If the listing cannot be retrieved
        """
        objects = []
        try:
            paginator = self.client.get_paginator('list_objects_v2')
            for page in paginator.paginate(Bucket=self.bucket, Prefix=prefix):
                for entry in page.get('Contents', []):
                    objects.append({
                        'key': entry['Key'],
                        'size': entry.get('Size', 0),
                        'last_modified': entry.get('LastModified'),
                    })
        except (ClientError, BotoCoreError) as e:
            logger.error(f"[STORAGE] Listing '{prefix}' failed: {e}")
            raise StorageError('Stored documents could not be listed.') from e
        return objects

    def generate_signed_url(self, object_name: str, expires_in: Optional[int] = None) -> str:
        """Time-limited GET URL for a private object."""
        try:
            return self.client.generate_presigned_url(
                'get_object',
                Params={'Bucket': self.bucket, 'Key': object_name},
                ExpiresIn=expires_in or self.signed_url_ttl
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"[STORAGE] Signing URL for '{object_name}' failed: {e}")
            raise StorageError('A download link could not be created.') from e

    def delete_file(self, object_name: str) -> bool:
        """
        Delete file from S3-compatible storage.

        Returns:
            True if deleted successfully, False otherwise
        """
        try:
            logger.info(f"[STORAGE] Deleting '{object_name}' from bucket '{self.bucket}'...")
            self.client.delete_object(Bucket=self.bucket, Key=object_name)
            return True
        except (ClientError, BotoCoreError) as e:
            logger.exception(f"[STORAGE] Delete failed: {e}")
            return False


# Singleton instance
_storage_service = None


def get_storage_service() -> StorageService:
    """
    Get or create StorageService singleton.

    Returns:
        StorageService instance
    """
    global _storage_service
    if _storage_service is None:
        _storage_service = StorageService()
    return _storage_service
