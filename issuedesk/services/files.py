import logging
import time
import uuid
from pathlib import Path

from fastapi import HTTPException, UploadFile

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


def _safe_name(filename: str | None) -> str:
    name = Path(filename or "upload").name.strip().replace(" ", "_")
    return name or "upload"


class FileStore:
    """Keeps uploaded bytes on local disk; records only hold the path."""

    def __init__(self, root: Path):
        self.root = Path(root)

    def save(self, upload: UploadFile, max_bytes: int) -> tuple[Path, int]:
        self.root.mkdir(parents=True, exist_ok=True)
        target = self.root / f"{int(time.time() * 1000)}-{uuid.uuid4()}-{_safe_name(upload.filename)}"
        size = 0
        with target.open("wb") as out:
            while True:
                chunk = upload.file.read(CHUNK_SIZE)
                if not chunk:
                    break
                size += len(chunk)
                if size > max_bytes:
                    break
                out.write(chunk)
        if size > max_bytes:
            target.unlink(missing_ok=True)
            raise HTTPException(
                status_code=413,
                detail="File exceeds the upload size limit",
            )
        return target, size

    def exists(self, filepath: str) -> bool:
        return Path(filepath).is_file()

    def delete(self, filepath: str) -> None:
        try:
            Path(filepath).unlink(missing_ok=True)
        except OSError:
            logger.warning(
                "Could not remove stored file", extra={"event": {"filepath": filepath}}
            )
