"""
Notify Backend: Image Upload Service
=====================================

What:  Validates uploaded post images and converts them to base64 data URIs.
How:   Extension check, declared content-type check, size check, content
       sniffing with python-magic, then `data:<mime>;base64,<payload>`.
Who:   Called by PostService on create and update.

Images are opaque blobs to the rest of the system: the data URI is stored on
the post row as-is and returned unchanged to clients.

Validation order (cheapest first):
    1. Extension       no content needed
    2. Content type    from the multipart part header
    3. Size            empty and oversize uploads rejected
    4. Content sniff   the bytes must really be the declared image type
"""

import base64
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from app.config import settings
from app.exceptions import ValidationError

logger = logging.getLogger(__name__)

ALLOWED_MIME_TYPES = {
    "image/png": {".png"},
    "image/jpeg": {".jpg", ".jpeg"},
    "image/jpg": {".jpg", ".jpeg"},
    "image/gif": {".gif"},
    "image/webp": {".webp"},
}

ALLOWED_EXTENSIONS = {".png", ".jpg", ".jpeg", ".gif", ".webp"}

EXTENSION_MIME = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".webp": "image/webp",
}


@dataclass
class UploadedImage:
    """An image part read from a multipart request."""

    filename: str
    content_type: Optional[str]
    content: bytes


class ImageService:
    def __init__(self, max_size: Optional[int] = None):
        self.max_size = max_size or settings.max_image_size

    def validate_extension(self, filename: str) -> str:
        """Returns the normalized (lowercase, dotted) extension."""
        ext = Path(filename).suffix.lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise ValidationError(
                message=(
                    f"File type '{ext}' is not supported. "
                    f"Allowed types: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
                ),
                field="image",
                context={"extension": ext},
            )
        return ext

    def validate_content_type(self, content_type: Optional[str], extension: str) -> str:
        mime = (content_type or "").split(";")[0].strip().lower()
        if mime not in ALLOWED_MIME_TYPES:
            raise ValidationError(
                message=f"Content type '{mime or 'unknown'}' is not supported. Upload a PNG, JPEG, GIF or WebP image.",
                field="image",
                context={"content_type": mime},
            )
        if extension not in ALLOWED_MIME_TYPES[mime]:
            raise ValidationError(
                message=f"File extension '{extension}' does not match content type '{mime}'.",
                field="image",
                context={"content_type": mime, "extension": extension},
            )
        return "image/jpeg" if mime == "image/jpg" else mime

    def validate_size(self, content: bytes) -> None:
        if not content:
            raise ValidationError(message="Image file is empty", field="image")

        if len(content) > self.max_size:
            max_mb = self.max_size / (1024 * 1024)
            raise ValidationError(
                message=f"Image is too large. Maximum size is {max_mb:.0f}MB.",
                field="image",
                context={"max_size": self.max_size, "actual_size": len(content)},
            )

    def detect_mime(self, content: bytes, extension: str) -> str:
        """
        Determine the real MIME type from the file header bytes.

        Without libmagic the type is inferred from the extension.
        """
        try:
            import magic
            return magic.from_buffer(content, mime=True)
        except ImportError:
            logger.warning(
                "python-magic not available, falling back to extension-based type detection. "
                "Install libmagic for production security."
            )
            return EXTENSION_MIME.get(extension, "application/octet-stream")

    def validate_detected_type(self, content: bytes, declared_mime: str, extension: str) -> str:
        detected = self.detect_mime(content, extension)
        if detected not in ALLOWED_MIME_TYPES:
            raise ValidationError(
                message=(
                    f"File content type '{detected}' is not supported. "
                    f"The file must be a valid PNG, JPEG, GIF or WebP image."
                ),
                field="image",
                context={"detected_mime": detected, "declared_mime": declared_mime},
            )
        if extension not in ALLOWED_MIME_TYPES[detected]:
            raise ValidationError(
                message=f"File content '{detected}' does not match its declared type '{declared_mime}'.",
                field="image",
                context={"detected_mime": detected, "declared_mime": declared_mime},
            )
        return "image/jpeg" if detected == "image/jpg" else detected

    def to_data_uri(self, upload: UploadedImage) -> str:
        """
        Validate an upload and encode it.

        Returns:
            "data:image/png;base64,iVBORw0KGgo..."

        Raises:
            ValidationError: unsupported type, mismatched extension, empty or
                             oversize content, content that is not the
                             declared image type
        """
        ext = self.validate_extension(upload.filename)
        declared = self.validate_content_type(upload.content_type, ext)
        self.validate_size(upload.content)
        mime = self.validate_detected_type(upload.content, declared, ext)

        encoded = base64.b64encode(upload.content).decode("ascii")
        logger.debug("Encoded %s image (%d bytes)", mime, len(upload.content))
        return f"data:{mime};base64,{encoded}"


image_service = ImageService()
