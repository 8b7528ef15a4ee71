import logging
import os
import shutil
from typing import Iterable, List, Optional

from utils import s3_utils

logger = logging.getLogger(__name__)

EXPORT_DIR = os.getenv("EXPORT_DIR", "exports")

CONTENT_TYPES = {
    ".pdf": "application/pdf",
    ".html": "text/html; charset=utf-8",
}


class S3ShareTarget:
    """Uploads the PDF and its attachments to the documents bucket and shares presigned links."""

    def __init__(self, prefix: str = "catalogs", expires_in: int = 7 * 24 * 3600):
        self.prefix = prefix
        self.expires_in = expires_in
        self.last_location: Optional[str] = None
        self.last_attachments: List[str] = []

    def _upload(self, path: str) -> str:
        content_type = CONTENT_TYPES.get(os.path.splitext(path)[1].lower(), "application/octet-stream")
        s3_path = s3_utils.upload_document_to_s3(path, prefix=self.prefix, content_type=content_type)
        return s3_utils.generate_presigned_download_url(s3_path, expires_in=self.expires_in)

    def share(self, pdf_path: str, attachments: Iterable[str] = ()) -> str:
        self.last_location = self._upload(pdf_path)
        self.last_attachments = [self._upload(path) for path in attachments]
        return self.last_location


class DirectoryShareTarget:
    """Moves the PDF and its attachments into a local export directory."""

    def __init__(self, directory: str = None):
        self.directory = directory or EXPORT_DIR
        self.last_location: Optional[str] = None
        self.last_attachments: List[str] = []

    def _move(self, path: str) -> str:
        destination = os.path.join(self.directory, os.path.basename(path))
        shutil.move(path, destination)
        return os.path.abspath(destination)

    def share(self, pdf_path: str, attachments: Iterable[str] = ()) -> str:
        os.makedirs(self.directory, exist_ok=True)
        self.last_location = self._move(pdf_path)
        self.last_attachments = [self._move(path) for path in attachments]
        logger.info(f"Document exported to {self.last_location}")
        return self.last_location


def get_share_target(prefix: str = "catalogs"):
    if s3_utils.S3_BUCKET_NAME:
        return S3ShareTarget(prefix=prefix)
    return DirectoryShareTarget()
