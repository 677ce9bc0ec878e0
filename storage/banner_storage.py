"""S3-backed storage for event banner images."""
import logging
import re
import uuid
from dataclasses import dataclass
from typing import Optional
from urllib.parse import unquote, urlparse

import boto3
from botocore.exceptions import ClientError

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = {
    'image/jpeg',
    'image/jpg',
    'image/png',
    'image/gif',
    'image/webp',
}

DEFAULT_MAX_SIZE_MB = 5


class ImageValidationError(ValueError):
    """Image rejected before upload, or URL not owned by the bucket."""


@dataclass
class ImageFile:
    """An image selected for upload."""
    name: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


def validate_image_file(image: ImageFile, max_size_mb: float = DEFAULT_MAX_SIZE_MB) -> None:
    """
    Check type and size of an image before upload.

    Args:
        image: Image to check
        max_size_mb: Largest accepted size in megabytes

    Raises:
        ImageValidationError: If the image is not acceptable
    """
    content_type = (image.content_type or '').lower()
    if content_type not in ALLOWED_IMAGE_TYPES:
        raise ImageValidationError(
            f"Invalid file type: {image.content_type or 'unknown'}. "
            f"Only JPG, PNG, GIF and WebP images are allowed."
        )

    if image.size == 0:
        raise ImageValidationError('File is empty')

    max_bytes = max_size_mb * 1024 * 1024
    if image.size > max_bytes:
        raise ImageValidationError(
            f"File is too large ({image.size / 1024 / 1024:.2f} MB). "
            f"Maximum size is {max_size_mb} MB."
        )


class BannerStorage:
    """Uploads and deletes banner images in a public S3 bucket."""

    def __init__(self, bucket_name: str, region: str = 'us-east-1',
                 prefix: str = 'event-banners'):
        """
        Initialize S3 client and bucket settings.

        Args:
            bucket_name: Name of the S3 bucket
            region: AWS region of the bucket
            prefix: Key prefix for banner objects
        """
        self.bucket_name = bucket_name
        self.region = region
        self.prefix = prefix.strip('/')
        self.s3 = boto3.client('s3', region_name=region)
        logger.info(f"Initialized BannerStorage for bucket: {bucket_name}")

    def upload_event_banner(self, image: ImageFile) -> str:
        """
        Upload a banner image under a unique key.

        Returns:
            Public URL of the stored object

        Raises:
            ClientError: If the upload fails
        """
        key = self._build_key(image.name)
        logger.info(f"Uploading banner {image.name!r} ({image.size} bytes) to {key}")

        try:
            self.s3.put_object(
                Bucket=self.bucket_name,
                Key=key,
                Body=image.data,
                ContentType=image.content_type,
                CacheControl='max-age=3600'
            )
        except ClientError as e:
            logger.error(f"Error uploading banner to S3: {e}")
            raise

        return self.public_url(key)

    def delete_event_banner(self, url: str) -> None:
        """
        Delete a banner previously returned by upload_event_banner.

        Raises:
            ImageValidationError: If the URL does not belong to this bucket
            ClientError: If the delete fails
        """
        key = self.key_from_url(url)
        if key is None:
            raise ImageValidationError(f"Not a banner URL for this bucket: {url}")

        logger.info(f"Deleting banner {key}")
        try:
            self.s3.delete_object(Bucket=self.bucket_name, Key=key)
        except ClientError as e:
            logger.error(f"Error deleting banner from S3: {e}")
            raise

    def public_url(self, key: str) -> str:
        return f"https://{self.bucket_name}.s3.{self.region}.amazonaws.com/{key}"

    def key_from_url(self, url: str) -> Optional[str]:
        """Extract the object key from a public banner URL, or None."""
        parsed = urlparse(url or '')
        if parsed.netloc != f"{self.bucket_name}.s3.{self.region}.amazonaws.com":
            return None

        key = unquote(parsed.path.lstrip('/'))
        if not key.startswith(f"{self.prefix}/"):
            return None
        return key

    def _build_key(self, file_name: str) -> str:
        safe_name = re.sub(r'[^A-Za-z0-9._-]+', '-', file_name).strip('-') or 'banner'
        return f"{self.prefix}/{uuid.uuid4().hex}-{safe_name}"
