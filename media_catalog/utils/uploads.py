import json
import logging
import secrets
import time
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from starlette.datastructures import UploadFile
from starlette.requests import Request

from ..errors import RecordValidationError

logger = logging.getLogger(__name__)

FORM_CONTENT_TYPES = ('multipart/form-data', 'application/x-www-form-urlencoded')
IMAGE_EXTENSIONS = {
    'image/jpeg': '.jpg',
    'image/png': '.png',
    'image/gif': '.gif',
    'image/webp': '.webp',
}


class PosterUpload:
    """
    A poster image received with a create or update request.

    Nothing is written to disk until ``save`` is called, so a request that
    fails validation leaves no file behind.
    """

    def __init__(
        self,
        upload: UploadFile,
        upload_dir: str,
        url_prefix: str = '/uploads',
        max_bytes: int = 5 * 1024 * 1024
    ):
        self.upload = upload
        self.upload_dir = Path(upload_dir)
        self.url_prefix = url_prefix.rstrip('/')
        self.max_bytes = max_bytes
        self.saved_path: Optional[Path] = None

    def check(self) -> Optional[str]:
        """Return an error message when the file cannot be accepted."""
        if self.upload.content_type not in IMAGE_EXTENSIONS:
            return "Only image files are allowed"
        if self.upload.size is not None and self.upload.size > self.max_bytes:
            return f"Poster must be at most {self.max_bytes // (1024 * 1024)} MB"
        return None

    def _filename(self) -> str:
        suffix = Path(self.upload.filename or '').suffix.lower()
        if not suffix:
            suffix = IMAGE_EXTENSIONS.get(self.upload.content_type, '')
        return f"poster-{int(time.time() * 1000)}-{secrets.randbelow(10 ** 9)}{suffix}"

    async def save(self) -> str:
        """
        Write the file under the upload directory.

        :return: server-relative path to store on the record, e.g.
                 '/uploads/poster-1700000000000-123.jpg'
        """
        contents = await self.upload.read()
        if len(contents) > self.max_bytes:
            raise RecordValidationError({'poster': self.check() or "Poster is too large"})
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        name = self._filename()
        self.saved_path = self.upload_dir / name
        self.saved_path.write_bytes(contents)
        logger.info("Stored poster %s (%d bytes)", name, len(contents))
        return f"{self.url_prefix}/{name}"

    def discard(self):
        """Remove the stored file, e.g. when the record could not be written."""
        if self.saved_path is not None:
            self.saved_path.unlink(missing_ok=True)
            logger.info("Discarded poster %s", self.saved_path.name)
            self.saved_path = None


async def read_record_submission(
    request: Request,
    upload_dir: str,
    url_prefix: str = '/uploads',
    max_bytes: int = 5 * 1024 * 1024
) -> Tuple[Dict[str, Any], Optional[PosterUpload]]:
    """
    Extract the candidate record and optional poster from a write request.

    Form bodies (multipart or url-encoded) provide fields as strings and may
    carry a 'poster' file part. Any other body is read as a JSON object.
    """
    content_type = request.headers.get('content-type', '')
    if content_type.startswith(FORM_CONTENT_TYPES):
        form = await request.form()
        payload: Dict[str, Any] = {}
        poster = None
        for key, value in form.multi_items():
            if isinstance(value, UploadFile):
                if key == 'poster' and value.filename:
                    poster = PosterUpload(value, upload_dir, url_prefix, max_bytes)
            else:
                payload[key] = value
        return payload, poster

    body = await request.body()
    if not body.strip():
        return {}, None
    try:
        payload = json.loads(body)
    except ValueError:
        raise RecordValidationError({'body': "Request body must be valid JSON"})
    if not isinstance(payload, dict):
        raise RecordValidationError({'body': "Request body must be a JSON object"})
    return payload, None
