"""State for the internal banner upload test page."""
import logging
from typing import Optional

from storage.banner_storage import (
    DEFAULT_MAX_SIZE_MB,
    BannerStorage,
    ImageFile,
    ImageValidationError,
    validate_image_file,
)

logger = logging.getLogger(__name__)


class BannerUploadSession:
    """Select, upload and delete a single banner image."""

    def __init__(self, storage: BannerStorage, max_size_mb: float = DEFAULT_MAX_SIZE_MB):
        self.storage = storage
        self.max_size_mb = max_size_mb
        self.selected_file: Optional[ImageFile] = None
        self.uploaded_url = ''
        self.uploading = False
        self.error = ''
        self.success = ''

    def select_file(self, image: Optional[ImageFile]) -> None:
        if image is None:
            return

        try:
            validate_image_file(image, self.max_size_mb)
        except ImageValidationError as e:
            self.error = str(e)
            self.selected_file = None
            return

        self.selected_file = image
        self.error = ''
        self.success = ''

    def upload(self) -> None:
        if not self.selected_file:
            return

        self.uploading = True
        self.error = ''
        self.success = ''
        try:
            url = self.storage.upload_event_banner(self.selected_file)
        except Exception as e:
            logger.error(f"Banner upload failed: {e}", exc_info=True)
            self.error = str(e) or 'Upload failed'
        else:
            self.uploaded_url = url
            self.success = f"Upload successful! URL: {url}"
        finally:
            self.uploading = False

    def delete(self) -> None:
        if not self.uploaded_url:
            return

        self.uploading = True
        self.error = ''
        self.success = ''
        try:
            self.storage.delete_event_banner(self.uploaded_url)
        except Exception as e:
            logger.error(f"Banner delete failed: {e}", exc_info=True)
            self.error = str(e) or 'Delete failed'
        else:
            self.success = 'Image deleted successfully!'
            self.uploaded_url = ''
            self.selected_file = None
        finally:
            self.uploading = False

    def clear(self) -> None:
        self.selected_file = None
        self.uploaded_url = ''
        self.error = ''
        self.success = ''
