from __future__ import annotations

import io
import logging

from PIL import Image, UnidentifiedImageError

from filerenamer.domain.rename_logic import normalize_date
from filerenamer.ports.image_metadata_port import ImageMetadataPort

logger = logging.getLogger(__name__)

_EXIF_IFD = 0x8769
_DATETIME_ORIGINAL = 0x9003
_DATETIME_DIGITIZED = 0x9004
_DATETIME = 0x0132


class PillowExifAdapter(ImageMetadataPort):
    def capture_date(self, image_bytes: bytes) -> str | None:
        try:
            with Image.open(io.BytesIO(image_bytes)) as image:
                exif = image.getexif()
        except (UnidentifiedImageError, OSError) as exc:
            logger.debug("No readable EXIF block: %s", exc)
            return None
        if not exif:
            return None
        sub_ifd = exif.get_ifd(_EXIF_IFD)
        for value in (
            sub_ifd.get(_DATETIME_ORIGINAL),
            sub_ifd.get(_DATETIME_DIGITIZED),
            exif.get(_DATETIME),
        ):
            if isinstance(value, str):
                normalized = normalize_date(value)
                if normalized:
                    return normalized
        return None
