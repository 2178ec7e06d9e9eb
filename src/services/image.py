"""
Image intake service.

Turns camera captures and uploads into ImagePayload objects and
renders merged detections back onto the captured frame.
"""

import base64
import binascii
import io
import logging
import re

from PIL import Image, ImageDraw, UnidentifiedImageError

from src.config import get_settings
from src.core.exceptions import InvalidImageError
from src.schemas.detection import ImagePayload, MergedDetection


logger = logging.getLogger(__name__)

# Prefix produced by canvas.toDataURL('image/jpeg', ...)
DATA_URL_PREFIX = re.compile(r'^data:image/[a-z+.-]+;base64,', re.IGNORECASE)

BOX_COLOR = (16, 185, 129)
TEXT_COLOR = (255, 255, 255)
LABEL_HEIGHT = 25
BOX_WIDTH = 3


class ImageService:
    """
    Image intake service.

    Handles:
    - data URL / base64 decoding and validation
    - Upload validation and JPEG normalization
    - Drawing detections on the source image
    """

    def __init__(self, max_size_mb: int | None = None, jpeg_quality: int | None = None):
        settings = get_settings()
        self.max_size_mb = max_size_mb or settings.max_file_size_mb
        self.jpeg_quality = jpeg_quality or settings.jpeg_quality

    def from_data_url(self, image: str | None, filename: str = 'capture.jpg') -> ImagePayload:
        """
        Build a payload from a data URL or bare base64 string.

        Args:
            image: 'data:image/jpeg;base64,...' or plain base64
            filename: Name used in error and log messages

        Returns:
            ImagePayload carrying base64 JPEG without the data URL prefix.
            Non-JPEG images are re-encoded.

        Raises:
            InvalidImageError: If the image is missing, not base64, too large,
                or not a decodable image
        """
        if not image or not image.strip():
            raise InvalidImageError(filename, 'No image provided')

        data = DATA_URL_PREFIX.sub('', image.strip(), count=1)
        if not data:
            raise InvalidImageError(filename, 'Data URL carries no image data')

        try:
            raw = base64.b64decode(data, validate=True)
        except (binascii.Error, ValueError) as e:
            raise InvalidImageError(filename, f'Image data is not valid base64: {e}') from e

        if not raw:
            raise InvalidImageError(filename, 'Decoded image is empty')

        self.validate_size(raw, filename)
        jpeg_bytes = self.convert_to_jpeg(raw, filename)
        if jpeg_bytes is raw:
            return ImagePayload(data=data, filename=filename)
        return ImagePayload(data=base64.b64encode(jpeg_bytes).decode('ascii'), filename=filename)

    def from_upload(self, image_bytes: bytes, filename: str = 'upload.jpg') -> ImagePayload:
        """
        Build a payload from uploaded file bytes.

        Non-JPEG images are re-encoded to JPEG before base64 encoding.

        Raises:
            InvalidImageError: If the upload is empty, too large or not an image
        """
        if not image_bytes:
            raise InvalidImageError(filename, 'Empty image data provided')

        self.validate_size(image_bytes, filename)
        jpeg_bytes = self.convert_to_jpeg(image_bytes, filename)
        return ImagePayload(data=base64.b64encode(jpeg_bytes).decode('ascii'), filename=filename)

    def validate_size(self, image_bytes: bytes, filename: str = 'unknown') -> None:
        """
        Validate image file size.

        Raises:
            InvalidImageError: If larger than the configured maximum
        """
        size_mb = len(image_bytes) / (1024 * 1024)

        if size_mb > self.max_size_mb:
            raise InvalidImageError(
                filename, f'File size {size_mb:.2f}MB exceeds maximum {self.max_size_mb}MB'
            )

    def convert_to_jpeg(self, image_bytes: bytes, filename: str = 'unknown') -> bytes:
        """
        Convert image to JPEG format. JPEG input is returned untouched.

        Args:
            image_bytes: Original image bytes
            filename: Name used in error messages

        Returns:
            JPEG bytes
        """
        img = _open(image_bytes, filename)
        source_format = img.format
        if source_format == 'JPEG':
            return image_bytes

        # Convert to RGB if needed
        if img.mode != 'RGB':
            img = img.convert('RGB')

        buffer = io.BytesIO()
        img.save(buffer, format='JPEG', quality=self.jpeg_quality, optimize=True)
        logger.debug(f'Re-encoded {filename} from {source_format or "unknown"} to JPEG')
        return buffer.getvalue()

    def annotate(self, image: ImagePayload, detections: list[MergedDetection]) -> bytes:
        """
        Draw detections onto the image.

        Each box is drawn from its centre and extents with a
        "<label> (<confidence>%)" caption above it.

        Args:
            image: Source payload the detections were computed on
            detections: Merged detections in source pixel space

        Returns:
            JPEG bytes of the annotated image
        """
        img = _open(base64.b64decode(image.data), image.filename).convert('RGB')
        draw = ImageDraw.Draw(img)

        for det in detections:
            if det.width <= 0 or det.height <= 0:
                continue
            x1, y1, x2, y2 = det.corners()
            draw.rectangle((x1, y1, x2, y2), outline=BOX_COLOR, width=BOX_WIDTH)

            caption = f'{det.label} ({round(det.confidence * 100)}%)'
            label_top = max(y1 - LABEL_HEIGHT - 5, 0)
            draw.rectangle((x1, label_top, x2, label_top + LABEL_HEIGHT), fill=BOX_COLOR)
            draw.text((x1 + 8, label_top + 6), caption, fill=TEXT_COLOR)

        buffer = io.BytesIO()
        img.save(buffer, format='JPEG', quality=self.jpeg_quality)
        return buffer.getvalue()


def _open(image_bytes: bytes, filename: str) -> Image.Image:
    try:
        img = Image.open(io.BytesIO(image_bytes))
        img.load()
    except (UnidentifiedImageError, OSError) as e:
        raise InvalidImageError(filename, f'Not a decodable image: {e}') from e
    return img
