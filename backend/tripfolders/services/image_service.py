"""
TripFolders Backend — Embedded Image Decoding
==============================================

What:  Turns the upload widget's encoded image into bytes + mime type.
Why:   Trip files keep their image inline in the row;
       the browser sends it as JSON `{"type": "<mime>", "data": "<base64>"}`.
How:   Parse JSON → check mime against settings.allowed_image_types →
       base64-decode → check size.

Policy:
    - No image submitted            → nothing to store (not an error)
    - Unsupported mime type         → image dropped, file saved without it
    - Malformed JSON / base64       → ValidationError
    - Decoded bytes over the limit  → ValidationError
"""

import base64
import binascii
import json
import logging
from typing import Optional, Tuple

from pydantic import ValidationError as PydanticValidationError

from tripfolders.config import settings
from tripfolders.exceptions import ValidationError
from tripfolders.schemas.folder import EncodedImage

logger = logging.getLogger(__name__)


class ImageService:
    """Decodes and validates embedded images."""

    def decode(self, encoded: Optional[str]) -> Optional[Tuple[bytes, str]]:
        """
        Decode an upload widget payload.

        Returns:
            (bytes, mime_type), or None when there is nothing to store.

        Raises:
            ValidationError: payload is not decodable or too large
        """
        if encoded is None or not encoded.strip():
            return None

        try:
            payload = EncodedImage.model_validate(json.loads(encoded))
        except (json.JSONDecodeError, PydanticValidationError) as e:
            raise ValidationError(
                message="The attached image could not be read. Please upload it again.",
                field="image",
                context={"error_type": type(e).__name__},
            )

        if payload.type not in settings.allowed_image_types:
            logger.info("Ignoring attached image with unsupported type %s", payload.type)
            return None

        try:
            data = base64.b64decode(payload.data, validate=True)
        except (binascii.Error, ValueError):
            raise ValidationError(
                message="The attached image could not be read. Please upload it again.",
                field="image",
                context={"mime_type": payload.type},
            )

        if len(data) > settings.max_image_size:
            max_mb = settings.max_image_size / (1024 * 1024)
            raise ValidationError(
                message=f"Image exceeds the maximum size of {max_mb:.0f}MB.",
                field="image",
                context={"actual_size": len(data), "max_size": settings.max_image_size},
            )

        return data, payload.type

    def apply(self, target, encoded: Optional[str]) -> bool:
        """
        Decode `encoded` onto any model with `image`/`image_type` columns.

        Returns True when an image was stored.
        """
        decoded = self.decode(encoded)
        if decoded is None:
            return False
        target.image, target.image_type = decoded
        return True


# ── Singleton Instance ────────────────────────────────────────────────────
image_service = ImageService()
