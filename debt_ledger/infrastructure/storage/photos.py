"""Client photo storage on the local filesystem"""

import base64
import binascii
import logging
import secrets
from pathlib import Path
from debt_ledger.config import settings
from debt_ledger.domain.exceptions import ValidationError
from debt_ledger.utils.date_utils import utc_now


def safe_filename(fullname: str) -> str:
    """Keep letters (any script), digits, '_' and '-'; whitespace becomes '_'"""
    chars = []
    for char in fullname:
        if char.isalpha() or char.isdigit() or char in "_-":
            chars.append(char)
        elif char.isspace():
            chars.append("_")
    return "".join(chars) or "unknown"


class PhotoStore:
    """Persists base64 data-URL photos and hands back a public reference"""

    def __init__(self, root: str | None = None, url_prefix: str | None = None):
        self.root = Path(root or settings.upload_dir)
        self.url_prefix = (url_prefix or settings.upload_url_prefix).rstrip("/")

    def is_reference(self, photo_data: str) -> bool:
        return photo_data.startswith(self.url_prefix + "/")

    def store(self, photo_data: str, fullname: str) -> str:
        """
        Save a photo and return its reference.

        Accepts either an existing reference (returned untouched) or a data
        URL such as "data:image/jpeg;base64,<payload>". Files land in a
        per-month directory: <root>/2026-10/Name_2026-10-19_12345.jpg

        Raises:
            ValidationError: On anything that is not a reference or a valid data URL
        """
        if self.is_reference(photo_data):
            return photo_data

        header, sep, payload = photo_data.partition(",")
        if not sep or not header.startswith("data:") or not payload:
            raise ValidationError("Photo must be a base64 data URL")
        try:
            content = base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ValidationError("Photo is not valid base64") from e

        now = utc_now()
        month = now.strftime("%Y-%m")
        filename = f"{safe_filename(fullname)}_{now.strftime('%Y-%m-%d')}_{secrets.randbelow(100_000)}.jpg"

        directory = self.root / month
        directory.mkdir(parents=True, exist_ok=True)
        (directory / filename).write_bytes(content)

        logging.info("Photo stored", extra={"step": "photo_stored", "path": f"{month}/{filename}"})
        return f"{self.url_prefix}/{month}/{filename}"
