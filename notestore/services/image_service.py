"""
notestore — Image Service
==========================

What:  Client for the image hosting endpoint: stage → validate → upload, and
       download of previously uploaded images to local files.
How:   Source bytes are copied into the staging directory under a UUID name,
       size-checked, sent as a single multipart part named "image", and the
       staged copy is removed afterwards. Downloads stream into a new
       UUID-named file in the download directory.
Who:   Called by NoteStore (upload_image, download_image, submit_note).

Upload exchange:
    POST {image_api_base_url}upload.php
    Content-Type: multipart/form-data; part "image", filename temp_image_<uuid>.<ext>
    ← {"success": true, "imageUrl": "http://…/uploads/x.jpg", "error": null}

Sources accepted by upload():
    - a filesystem path (str / os.PathLike)
    - raw bytes
    - a binary file object (anything with .read() returning bytes)
"""

import logging
import mimetypes
import os
import uuid
from pathlib import Path, PurePosixPath
from typing import BinaryIO, Optional, Tuple, Union
from urllib.parse import urlparse

import aiofiles
import aiofiles.os
import httpx
from pydantic import ValidationError as PydanticValidationError

from notestore.config import settings
from notestore.exceptions import DownloadError, UploadError
from notestore.http_client import json_or_none
from notestore.schemas.note import ImageUploadResponse

logger = logging.getLogger(__name__)

ImageSource = Union[str, "os.PathLike[str]", bytes, bytearray, BinaryIO]

# ── File Naming ───────────────────────────────────────────────────────────
# Extensions kept when they appear on a source file or URL; anything else
# is stored as .jpg
IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp", ".bmp", ".heic"}
DEFAULT_EXTENSION = ".jpg"

STAGED_PREFIX = "temp_image_"
DOWNLOADED_PREFIX = "note_image_"


def extension_for(name: str) -> str:
    """Lower-cased image extension of `name` (a file name or URL path)."""
    ext = PurePosixPath(name).suffix.lower()
    return ext if ext in IMAGE_EXTENSIONS else DEFAULT_EXTENSION


class ImageService:
    """
    Moves image bytes between the device and the image endpoint.

    Directory use:
        staging_dir/temp_image_<uuid>.<ext>     removed after each upload
        download_dir/note_image_<uuid>.<ext>    one new file per download
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        upload_url: Optional[str] = None,
        staging_dir: Optional[str] = None,
        download_dir: Optional[str] = None,
        max_file_size: Optional[int] = None,
    ):
        """
        Args:
            client: Shared AsyncClient (timeouts come from its configuration)
            upload_url: Override settings.image_upload_url
            staging_dir / download_dir: Override the configured directories (tests)
            max_file_size: Override settings.max_file_size, in bytes
        """
        self.client = client
        self.upload_url = upload_url or settings.image_upload_url
        self.staging_dir = Path(staging_dir or settings.staging_dir).resolve()
        self.download_dir = Path(download_dir or settings.download_dir).resolve()
        self.max_file_size = max_file_size or settings.max_file_size

    # ── Staging ───────────────────────────────────────────────────────────

    async def read_source(self, source: ImageSource) -> Tuple[bytes, str]:
        """
        Read all bytes of `source`.

        Returns: (content, extension used for the staged file name)
        Raises:  UploadError when the source cannot be read
        """
        if isinstance(source, (bytes, bytearray)):
            return bytes(source), DEFAULT_EXTENSION

        if isinstance(source, (str, os.PathLike)):
            path = Path(source)
            try:
                async with aiofiles.open(path, "rb") as f:
                    content = await f.read()
            except OSError as e:
                logger.error("Cannot read image source %s: %s", path, e)
                raise UploadError(
                    message="Could not read the selected image.",
                    context={"path": str(path), "os_error": str(e)},
                )
            return content, extension_for(path.name)

        read = getattr(source, "read", None)
        if callable(read):
            try:
                content = read()
            except OSError as e:
                raise UploadError(
                    message="Could not read the selected image.",
                    context={"os_error": str(e)},
                )
            if not isinstance(content, (bytes, bytearray)):
                raise UploadError(message="Image file must be opened in binary mode.")
            return bytes(content), extension_for(str(getattr(source, "name", "")))

        raise UploadError(
            message=f"Unsupported image source: {type(source).__name__}",
            context={"type": type(source).__name__},
        )

    def validate_size(self, size: int) -> None:
        """
        Reject empty images and images over max_file_size.

        Raises:
            UploadError with a human-readable size message
        """
        max_mb = self.max_file_size / (1024 * 1024)
        if size == 0:
            raise UploadError(message="The selected image is empty.", context={"size": 0})
        if size > self.max_file_size:
            raise UploadError(
                message=f"Image size ({size / (1024 * 1024):.1f}MB) exceeds maximum of {max_mb:.0f}MB.",
                context={"max_size_mb": max_mb, "actual_size": size},
            )

    async def stage(self, source: ImageSource) -> Path:
        """
        Copy `source` into the staging directory.

        Returns: Absolute path of the staged copy
        Raises:  UploadError (unreadable source, bad size, write failure)
        """
        content, extension = await self.read_source(source)
        self.validate_size(len(content))

        staged = self.staging_dir / f"{STAGED_PREFIX}{uuid.uuid4()}{extension}"
        try:
            staged.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(staged, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to stage image at %s: %s", staged, e)
            await self.cleanup_file(staged)
            raise UploadError(
                message="Failed to prepare the image for upload.",
                context={"path": str(staged), "os_error": str(e)},
            )

        logger.debug("Image staged: %s (%d bytes)", staged.name, len(content))
        return staged

    # ── Upload ────────────────────────────────────────────────────────────

    async def upload(self, source: ImageSource) -> str:
        """
        Stage and upload an image.

        Returns: The URL assigned by the server
        Raises:  UploadError carrying the server's error text when it reports
                 success=false, or a transport/HTTP description otherwise
        """
        staged = await self.stage(source)
        try:
            try:
                async with aiofiles.open(staged, "rb") as f:
                    content = await f.read()
            except OSError as e:
                raise UploadError(
                    message="Failed to prepare the image for upload.",
                    context={"path": str(staged), "os_error": str(e)},
                )

            content_type = mimetypes.guess_type(staged.name)[0] or "image/*"
            files = {"image": (staged.name, content, content_type)}

            logger.debug("Sending %s (%d bytes) to %s", staged.name, len(content), self.upload_url)
            try:
                response = await self.client.post(self.upload_url, files=files)
            except (httpx.HTTPError, httpx.InvalidURL) as e:
                raise UploadError(
                    message=f"Image upload failed: {str(e) or type(e).__name__}",
                    context={"url": self.upload_url, "error": type(e).__name__},
                )

            return self._parse_upload_response(response)
        finally:
            await self.cleanup_file(staged)

    def _parse_upload_response(self, response: httpx.Response) -> str:
        payload = json_or_none(response)
        parsed: Optional[ImageUploadResponse] = None
        if isinstance(payload, dict):
            try:
                parsed = ImageUploadResponse.model_validate(payload)
            except PydanticValidationError:
                parsed = None

        context = {"url": self.upload_url, "status_code": response.status_code}

        if response.is_error:
            message = (parsed.error if parsed else None) or (
                f"Image server returned HTTP {response.status_code}"
            )
            raise UploadError(message=message, context=context)

        if parsed is None:
            raise UploadError(message="Image server returned an invalid response.", context=context)

        if not parsed.succeeded:
            raise UploadError(message=parsed.error or "Failed to upload image", context=context)

        logger.info("Image uploaded: %s", parsed.image_url)
        return parsed.image_url

    # ── Download ──────────────────────────────────────────────────────────

    async def download(self, url: str) -> Path:
        """
        Fetch `url` into a new file in the download directory.

        Returns: Path of the written file (always a new file)
        Raises:  DownloadError; a partially written file is removed first
        """
        target = self.download_dir / f"{DOWNLOADED_PREFIX}{uuid.uuid4()}{extension_for(urlparse(url).path)}"

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            async with self.client.stream("GET", url) as response:
                if response.is_error:
                    raise DownloadError(
                        message=f"Image server returned HTTP {response.status_code}",
                        context={"url": url, "status_code": response.status_code},
                    )
                size = 0
                async with aiofiles.open(target, "wb") as f:
                    async for chunk in response.aiter_bytes():
                        size += len(chunk)
                        await f.write(chunk)
        except DownloadError:
            await self.cleanup_file(target)
            raise
        except (httpx.HTTPError, httpx.InvalidURL, OSError) as e:
            logger.error("Download of %s failed: %s", url, e)
            await self.cleanup_file(target)
            raise DownloadError(
                message=f"Failed to download image: {str(e) or type(e).__name__}",
                context={"url": url, "error": type(e).__name__},
            )

        logger.info("Image downloaded to %s (%d bytes)", target, size)
        return target

    # ── Cleanup ───────────────────────────────────────────────────────────

    async def cleanup_file(self, file_path: Union[str, Path]) -> None:
        """
        Remove a staged or partial file if it exists.

        Best effort: failures are logged, never raised.
        """
        path = Path(file_path)
        try:
            if await aiofiles.os.path.exists(path):
                await aiofiles.os.remove(path)
                logger.debug("Cleaned up file: %s", path.name)
        except OSError as e:
            logger.warning("Failed to clean up file %s: %s", path, e)
