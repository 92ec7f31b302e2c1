"""Local storage for uploaded payment receipts"""

import logging
import uuid
from pathlib import Path
from typing import Optional

from woyu_finance.config import settings
from woyu_finance.domain.exceptions import InvalidInputError

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp", ".pdf"}
PUBLIC_PREFIX = "/uploads"


class ReceiptStore:
    """Writes receipts under <upload_dir>/receipts and returns their public URL"""

    def __init__(self, upload_dir: Optional[str] = None):
        self.root = Path(upload_dir or settings.upload_dir)
        self.receipts_dir = self.root / "receipts"

    def save(self, filename: str, content: bytes) -> str:
        extension = Path(filename or "").suffix.lower()
        if extension not in ALLOWED_EXTENSIONS:
            raise InvalidInputError(f"Unsupported receipt file type: {extension or filename}")

        self.receipts_dir.mkdir(parents=True, exist_ok=True)
        stored_name = f"receipt-{uuid.uuid4().hex}{extension}"
        (self.receipts_dir / stored_name).write_bytes(content)

        logger.info("Receipt stored", extra={"file_name": stored_name, "size": len(content)})
        return f"{PUBLIC_PREFIX}/receipts/{stored_name}"

    def discard(self, url: str) -> None:
        """Remove a receipt saved for a payment that was not recorded"""
        path = self.receipts_dir / Path(url).name
        if path.exists():
            path.unlink()
            logger.info("Receipt discarded", extra={"file_name": path.name})
