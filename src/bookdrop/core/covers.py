# ABOUTME: Cover acquisition: fetch a cover by URL or decode an inline data URI.
# ABOUTME: Sniffs the real image type from the bytes and normalizes it to JPEG with Pillow.

import base64
import binascii
import logging
from dataclasses import dataclass
from io import BytesIO

from PIL import Image, UnidentifiedImageError, features

from bookdrop.metadata.gemini import split_data_uri
from bookdrop.metadata.http import HttpClient, MetadataFetchError
from bookdrop.metadata.types import PLACEHOLDER_COVER

logger = logging.getLogger(__name__)

JPEG_MIME = "image/jpeg"
JPEG_QUALITY = 85
UNKNOWN_MIME = "application/octet-stream"

_CONVERTIBLE = {"image/jpeg", "image/png", "image/gif", "image/webp"}


@dataclass(frozen=True)
class CoverAsset:
    """Cover image bytes plus the MIME type they are actually encoded in."""

    data: bytes
    mime_type: str

    @property
    def is_jpeg(self) -> bool:
        return self.mime_type == JPEG_MIME


def sniff_mime(data: bytes) -> str:
    """Identify an image's MIME type from its bytes, ignoring any URL or header."""
    try:
        with Image.open(BytesIO(data)) as img:
            return Image.MIME.get(img.format or "", UNKNOWN_MIME)
    except (UnidentifiedImageError, OSError, Image.DecompressionBombError):
        return UNKNOWN_MIME


def jpeg_codec_available() -> bool:
    """Whether this Pillow build can encode JPEG."""
    return bool(features.check_codec("jpg"))


def to_jpeg(data: bytes, quality: int = JPEG_QUALITY) -> bytes:
    """Decode an image and re-encode it as a baseline RGB JPEG.

    Transparent images are composited over white since JPEG has no alpha.
    """
    with Image.open(BytesIO(data)) as img:
        img.load()
        if img.mode in ("RGBA", "LA") or (img.mode == "P" and "transparency" in img.info):
            rgba = img.convert("RGBA")
            flattened = Image.new("RGB", rgba.size, (255, 255, 255))
            flattened.paste(rgba, mask=rgba.split()[-1])
        else:
            flattened = img.convert("RGB")
        out = BytesIO()
        flattened.save(out, format="JPEG", quality=quality)
        return out.getvalue()


class CoverFetcher:
    """Turns a record's cover reference into image bytes ready for packaging."""

    def __init__(self, http_client: HttpClient) -> None:
        self._http = http_client

    def acquire(self, cover_ref: str) -> CoverAsset | None:
        """Resolve a cover reference into a CoverAsset.

        Returns None for the placeholder marker, for undecodable inline data,
        and when the download fails. A downloaded image in a convertible format
        comes back as JPEG; anything else keeps its raw bytes and sniffed type.
        """
        if not cover_ref or cover_ref == PLACEHOLDER_COVER:
            return None
        if cover_ref.startswith("data:"):
            return self._decode_inline(cover_ref)
        return self._download(cover_ref)

    def _decode_inline(self, cover_ref: str) -> CoverAsset | None:
        mime_type, payload = split_data_uri(cover_ref)
        try:
            data = base64.b64decode(payload, validate=False)
        except (binascii.Error, ValueError) as exc:
            logger.warning("Inline cover image could not be decoded: %s", exc)
            return None
        if not data:
            return None
        logger.info("Using base64 encoded cover image (%s).", mime_type)
        return CoverAsset(data=data, mime_type=mime_type)

    def _download(self, url: str) -> CoverAsset | None:
        logger.info("Attempting to download cover from: %s", url)
        try:
            data = self._http.get_bytes(url)
        except MetadataFetchError as exc:
            logger.error("Failed to download cover from %s: %s", url, exc)
            return None

        mime_type = sniff_mime(data)
        if mime_type not in _CONVERTIBLE or not jpeg_codec_available():
            logger.warning(
                "Downloaded cover is not a convertible image or no JPEG codec (%s). "
                "Using raw content.",
                mime_type,
            )
            return CoverAsset(data=data, mime_type=mime_type)

        try:
            converted = to_jpeg(data)
        except (OSError, ValueError, Image.DecompressionBombError) as exc:
            logger.warning("Cover conversion to JPEG failed (%s): %s", mime_type, exc)
            return CoverAsset(data=data, mime_type=mime_type)

        logger.info("Cover image successfully converted to JPEG.")
        return CoverAsset(data=converted, mime_type=JPEG_MIME)


def usable_cover(asset: CoverAsset | None) -> CoverAsset | None:
    """Keep an asset only if it can be embedded as the container's JPEG cover."""
    if asset is None:
        return None
    if not asset.is_jpeg:
        logger.warning("Cover is %s, not JPEG. Treating as no cover.", asset.mime_type)
        return None
    return asset
