from __future__ import annotations

from contextlib import ExitStack
import logging
import mimetypes
from pathlib import Path
from typing import Iterable, Optional

from storefront.domain.errors import ApiError, ValidationError
from storefront.domain.models import UploadBatch, UploadedImage
from storefront.domain.normalize import many, to_str, uploaded_image_from_api

log = logging.getLogger(__name__)

MAX_FILE_MB = 10
MAX_IMAGES = 10
MAX_PRODUCT_IMAGES = 5


def image_mimetype(path: Path) -> Optional[str]:
    kind, _ = mimetypes.guess_type(path.name)
    return kind if kind and kind.startswith("image/") else None


def validate_image_file(path: Path | str, max_size_mb: float = MAX_FILE_MB) -> Optional[str]:
    """Return a human-readable problem with the file, or None when it is uploadable."""
    p = Path(path)
    if not p.is_file():
        return "File not found"
    if image_mimetype(p) is None:
        return "File must be an image"
    if p.stat().st_size > max_size_mb * 1024 * 1024:
        return f"File exceeds {max_size_mb:g}MB limit"
    return None


def validate_image_files(
    paths: Iterable[Path | str],
    max_files: int = MAX_IMAGES,
    max_size_mb: float = MAX_FILE_MB,
) -> Optional[str]:
    files = [Path(p) for p in paths]
    if not files:
        return "No files provided"
    if len(files) > max_files:
        return f"Maximum {max_files} files allowed"
    for f in files:
        error = validate_image_file(f, max_size_mb)
        if error:
            return f"{f.name}: {error}"
    return None


class UploadService:
    def __init__(self, api):
        self.api = api

    def _post_files(self, endpoint: str, field: str, paths: list[Path], data: Optional[dict] = None) -> dict:
        with ExitStack() as stack:
            files = [
                (field, (p.name, stack.enter_context(p.open("rb")), image_mimetype(p)))
                for p in paths
            ]
            body = self.api.post(endpoint, files=files, data=data, fallback_message="Upload failed")
        log.info("upload_done endpoint=%s files=%s", endpoint, len(paths))
        return body

    def upload_single(self, endpoint: str, path: Path | str) -> dict:
        p = Path(path)
        error = validate_image_file(p)
        if error:
            raise ValidationError(f"{p.name}: {error}")
        return self._post_files(endpoint, "file", [p])

    def upload_images(self, paths: Iterable[Path | str], folder: Optional[str] = None) -> UploadBatch:
        files = [Path(p) for p in paths]
        error = validate_image_files(files, max_files=MAX_IMAGES)
        if error:
            raise ValidationError(error)
        body = self._post_files("/uploads/images", "files", files, data={"folder": folder} if folder else None)
        payload = body.get("data") or {}
        failed = tuple(
            (to_str(f.get("originalName")), to_str(f.get("error")))
            for f in payload.get("failed") or ()
        )
        return UploadBatch(
            successful=tuple(many(uploaded_image_from_api, payload.get("successful"))),
            failed=failed,
            message=to_str(body.get("message")),
        )

    def upload_avatar(self, path: Path | str) -> UploadedImage:
        body = self.upload_single("/uploads/avatar", path)
        data = body.get("data")
        if not isinstance(data, dict):
            raise ApiError("Upload response did not include image data.", payload=body)
        return uploaded_image_from_api(data)

    def upload_product_images(self, paths: Iterable[Path | str]) -> tuple[UploadedImage, ...]:
        files = [Path(p) for p in paths]
        error = validate_image_files(files, max_files=MAX_PRODUCT_IMAGES)
        if error:
            raise ValidationError(error)
        body = self._post_files("/uploads/product", "files", files)
        return tuple(many(uploaded_image_from_api, (body.get("data") or {}).get("images")))
