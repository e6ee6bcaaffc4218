"""Validation and encoding of uploaded note files (images and PDFs)."""

from __future__ import annotations

import base64
import logging
import mimetypes
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from src.domain.content.models.analysis_models import EncodedFile
from src.domain.shared.services import ValidationError

logger = logging.getLogger(__name__)

PDF_MIME_TYPE = "application/pdf"


@dataclass
class UploadBatch:
    """Outcome of processing a batch of files."""

    images: list[EncodedFile] = field(default_factory=list)
    pdfs: list[EncodedFile] = field(default_factory=list)
    errors: list[ValidationError] = field(default_factory=list)

    @property
    def accepted_count(self) -> int:
        return len(self.images) + len(self.pdfs)


class UploadProcessor:
    """Checks file type and size and base64 encodes accepted files."""

    def __init__(self, max_bytes: int = 10 * 1024 * 1024) -> None:
        self.max_bytes = max_bytes

    def process(self, paths: Iterable[str | Path]) -> UploadBatch:
        """Encode every valid file; invalid ones are reported, not fatal.

        Args:
            paths: Files selected by the user

        Returns:
            Encoded images and PDFs plus one ValidationError per rejected file
        """
        batch = UploadBatch()
        for path in paths:
            try:
                encoded = self.encode_file(Path(path))
            except ValidationError as e:
                logger.warning(f"Rejected upload {path}: {e}")
                batch.errors.append(e)
                continue

            if encoded.mime_type == PDF_MIME_TYPE:
                batch.pdfs.append(encoded)
            else:
                batch.images.append(encoded)

        logger.info(
            f"Processed uploads: {len(batch.images)} images, "
            f"{len(batch.pdfs)} PDFs, {len(batch.errors)} rejected"
        )
        return batch

    def encode_file(self, path: Path) -> EncodedFile:
        """Validate and encode a single file.

        Raises:
            ValidationError: Missing, unreadable, unsupported or too large file
        """
        if not path.is_file():
            raise ValidationError(f"{path.name}: file not found", field=str(path))

        mime_type = self.detect_mime_type(path)
        if mime_type is None:
            raise ValidationError(
                f"{path.name}: only images and PDFs are supported", field=str(path)
            )

        try:
            size = path.stat().st_size
            if size > self.max_bytes:
                limit_mb = self.max_bytes / (1024 * 1024)
                raise ValidationError(
                    f"{path.name}: file is larger than {limit_mb:g} MB", field=str(path)
                )
            content = path.read_bytes()
        except OSError as e:
            raise ValidationError(f"{path.name}: could not be read", field=str(path)) from e

        data = base64.b64encode(content).decode("utf-8")
        return EncodedFile(
            filename=path.name, mime_type=mime_type, data=data, size_bytes=size
        )

    @staticmethod
    def detect_mime_type(path: Path) -> str | None:
        """Return the MIME type if it is an image or a PDF, else None."""
        mime_type, _ = mimetypes.guess_type(path.name)
        if mime_type == PDF_MIME_TYPE or (mime_type or "").startswith("image/"):
            return mime_type
        return None
