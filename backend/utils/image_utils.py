"""
Image fetch and compression for document generation.

Images are downloaded one at a time into the caller's working directory,
shrunk with Pillow and returned as JPEG data URIs ready to be embedded.
"""

import base64
import logging
import os
import uuid
from dataclasses import dataclass
from io import BytesIO

import requests
from PIL import Image, UnidentifiedImageError

from exceptions import AssetFailure
from utils.memory_utils import format_bytes, plan_resize, should_compress

logger = logging.getLogger(__name__)

DOWNLOAD_TIMEOUT_SECONDS = 10
DOWNLOAD_CHUNK_BYTES = 64 * 1024
# Source images above this are rejected before decoding
MAX_DOWNLOAD_BYTES = 15 * 1024 * 1024


@dataclass
class EmbeddedImage:
    link_id: str
    data_uri: str
    size: int  # encoded size in bytes


class ImageFetcher:
    """Downloads an image, resizes it and encodes it as a data URI."""

    def __init__(
        self,
        session: requests.Session = None,
        timeout: float = DOWNLOAD_TIMEOUT_SECONDS,
        max_download_bytes: int = MAX_DOWNLOAD_BYTES,
    ):
        self.session = session or requests.Session()
        self.timeout = timeout
        self.max_download_bytes = max_download_bytes

    def download(self, url: str, workdir: str) -> str:
        """Stream the image to a file in `workdir`, never holding the whole body in memory."""
        local_path = os.path.join(workdir, f"img_{uuid.uuid4().hex}")
        try:
            self._stream_to_file(url, local_path)
        except Exception:
            if os.path.exists(local_path):
                os.remove(local_path)
            raise
        return local_path

    def _stream_to_file(self, url: str, local_path: str) -> None:
        received = 0
        try:
            with self.session.get(url, timeout=self.timeout, stream=True) as response:
                response.raise_for_status()
                with open(local_path, "wb") as f:
                    for chunk in response.iter_content(chunk_size=DOWNLOAD_CHUNK_BYTES):
                        received += len(chunk)
                        if received > self.max_download_bytes:
                            raise AssetFailure(
                                f"Image at {url} is larger than {format_bytes(self.max_download_bytes)}"
                            )
                        f.write(chunk)
        except requests.RequestException as e:
            raise AssetFailure(f"Download failed for {url}: {e}") from e
        except OSError as e:
            raise AssetFailure(f"Could not store image from {url}: {e}") from e

    def compress(self, source_path: str, workdir: str, max_dimension: int, quality: float = None) -> str:
        """
        Resize to fit `max_dimension` and re-encode as JPEG at `quality`.

        Without an explicit quality the resize plan's default is used.
        """
        target_path = os.path.join(workdir, f"cmp_{uuid.uuid4().hex}.jpg")
        try:
            if should_compress(os.path.getsize(source_path)):
                logger.debug(f"Source image {os.path.basename(source_path)} is over the per-image limit")
            with Image.open(source_path) as img:
                plan = plan_resize(img.width, img.height, max_dimension)
                jpeg_quality = plan.quality if quality is None else quality
                rgb = img.convert("RGB")
                if (plan.width, plan.height) != (img.width, img.height):
                    rgb = rgb.resize((plan.width, plan.height), Image.LANCZOS)
                rgb.save(target_path, format="JPEG", quality=int(round(jpeg_quality * 100)), optimize=True)
        except (UnidentifiedImageError, Image.DecompressionBombError, ValueError, OSError) as e:
            raise AssetFailure(f"Could not process image {source_path}: {e}") from e
        return target_path

    def fetch(self, link_id: str, url: str, workdir: str, max_dimension: int, quality: float) -> EmbeddedImage:
        """
        Full pipeline for one image. Intermediate files are removed before
        returning; only the encoded payload stays in memory.

        Raises:
            AssetFailure: download, decode or encode failed.
        """
        raw_path = None
        compressed_path = None
        try:
            raw_path = self.download(url, workdir)
            compressed_path = self.compress(raw_path, workdir, max_dimension, quality)
            with open(compressed_path, "rb") as f:
                payload = f.read()
        except OSError as e:
            raise AssetFailure(f"Could not read compressed image for link {link_id}: {e}") from e
        finally:
            for path in {raw_path, compressed_path}:
                if path and os.path.exists(path):
                    os.remove(path)

        data_uri = "data:image/jpeg;base64," + base64.b64encode(payload).decode("ascii")
        logger.debug(f"Image for link {link_id}: {format_bytes(len(payload))} -> {format_bytes(len(data_uri))} encoded")
        return EmbeddedImage(link_id=link_id, data_uri=data_uri, size=len(data_uri))


def decode_data_uri(data_uri: str) -> BytesIO:
    """Raw bytes of a base64 data URI, as a file-like object."""
    _, _, encoded = data_uri.partition("base64,")
    return BytesIO(base64.b64decode(encoded))
