"""
Notify Backend: Image Service Unit Tests
=========================================

What:  Upload validation (extension, content type, size) and data-URI output.

Test Strategy:
    ✅ Allowed extensions, case-insensitive
    ✅ Rejected extensions and content types
    ✅ Extension/content-type mismatch
    ✅ Empty and oversize uploads
    ✅ Data URI format
    ✅ Content sniffing: bytes must really be the declared image type
"""

import base64
import sys

import pytest

from app.exceptions import ValidationError
from app.services.image_service import ImageService, UploadedImage


class TestImageValidation:

    def setup_method(self):
        self.service = ImageService(max_size=1024)

    # ── Extension Validation ──────────────────────────────────────────────

    @pytest.mark.parametrize("filename", ["photo.png", "photo.jpg", "photo.jpeg", "anim.gif", "pic.webp"])
    def test_allowed_extensions(self, filename):
        assert self.service.validate_extension(filename).startswith(".")

    def test_extension_check_is_case_insensitive(self):
        assert self.service.validate_extension("photo.JPG") == ".jpg"
        assert self.service.validate_extension("photo.Png") == ".png"

    @pytest.mark.parametrize("filename", ["document.pdf", "malware.exe", "noextension"])
    def test_rejected_extensions(self, filename):
        with pytest.raises(ValidationError, match="not supported"):
            self.service.validate_extension(filename)

    # ── Content Type Validation ───────────────────────────────────────────

    def test_content_type_with_parameters(self):
        assert self.service.validate_content_type("image/png; charset=binary", ".png") == "image/png"

    def test_jpg_alias_normalized(self):
        assert self.service.validate_content_type("image/jpg", ".jpg") == "image/jpeg"

    def test_unsupported_content_type(self):
        with pytest.raises(ValidationError, match="not supported"):
            self.service.validate_content_type("application/pdf", ".png")

    def test_missing_content_type(self):
        with pytest.raises(ValidationError, match="unknown"):
            self.service.validate_content_type(None, ".png")

    def test_extension_must_match_content_type(self):
        with pytest.raises(ValidationError, match="does not match"):
            self.service.validate_content_type("image/png", ".jpg")

    # ── Size Validation ───────────────────────────────────────────────────

    def test_size_within_limit(self):
        self.service.validate_size(b"x" * 1024)

    def test_size_over_limit(self):
        with pytest.raises(ValidationError, match="too large") as exc_info:
            self.service.validate_size(b"x" * 1025)
        assert exc_info.value.context["actual_size"] == 1025

    def test_empty_upload(self):
        with pytest.raises(ValidationError, match="empty"):
            self.service.validate_size(b"")


class TestDataUri:

    def test_to_data_uri(self, sample_png_bytes):
        service = ImageService()
        upload = UploadedImage(filename="a.png", content_type="image/png", content=sample_png_bytes)

        uri = service.to_data_uri(upload)

        prefix = "data:image/png;base64,"
        assert uri.startswith(prefix)
        assert base64.b64decode(uri[len(prefix):]) == sample_png_bytes

    def test_to_data_uri_validates_before_encoding(self):
        service = ImageService()
        upload = UploadedImage(filename="a.png", content_type="image/png", content=b"")

        with pytest.raises(ValidationError) as exc_info:
            service.to_data_uri(upload)
        assert exc_info.value.field == "image"


class TestContentSniffing:

    SCRIPT_BYTES = b"#!/bin/sh\nrm -rf /tmp/cache\n"

    def test_non_image_content_rejected(self, monkeypatch):
        service = ImageService()
        monkeypatch.setattr(service, "detect_mime", lambda content, ext: "text/x-shellscript")
        upload = UploadedImage(filename="evil.png", content_type="image/png", content=self.SCRIPT_BYTES)

        with pytest.raises(ValidationError, match="not supported") as exc_info:
            service.to_data_uri(upload)
        assert exc_info.value.context["detected_mime"] == "text/x-shellscript"

    def test_content_must_match_extension(self, monkeypatch, sample_png_bytes):
        service = ImageService()
        monkeypatch.setattr(service, "detect_mime", lambda content, ext: "image/png")
        upload = UploadedImage(filename="photo.jpg", content_type="image/jpeg", content=sample_png_bytes)

        with pytest.raises(ValidationError, match="does not match"):
            service.to_data_uri(upload)

    def test_data_uri_uses_detected_type(self, monkeypatch):
        service = ImageService()
        monkeypatch.setattr(service, "detect_mime", lambda content, ext: "image/jpg")
        upload = UploadedImage(filename="photo.jpeg", content_type="image/jpeg", content=b"\xff\xd8\xff")

        assert service.to_data_uri(upload).startswith("data:image/jpeg;base64,")

    def test_extension_fallback_without_libmagic(self, monkeypatch):
        monkeypatch.setitem(sys.modules, "magic", None)

        assert ImageService().detect_mime(b"anything", ".webp") == "image/webp"
        assert ImageService().detect_mime(b"anything", ".bmp") == "application/octet-stream"

    def test_libmagic_sniffs_real_bytes(self, sample_png_bytes):
        pytest.importorskip("magic")
        service = ImageService()

        assert service.detect_mime(sample_png_bytes, ".png") == "image/png"
        with pytest.raises(ValidationError):
            service.to_data_uri(
                UploadedImage(filename="evil.png", content_type="image/png", content=self.SCRIPT_BYTES)
            )
