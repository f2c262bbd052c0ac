import os
import shutil
import secrets
from pathlib import Path
from fastapi import UploadFile
from .globals import logger


class BlobStore:
    """
    Uploaded bytes on local disk, one flat directory. Blobs are named by a
    random token plus the original extension; the logical name only lives in
    the database row.
    """

    def __init__(self, root: str | os.PathLike, chunk_size: int = 1048576) -> None:
        self.root = Path(root)
        self.chunk_size = chunk_size
        self.root.mkdir(parents=True, exist_ok=True)

    def path(self, name: str) -> Path:
        if not name or name != os.path.basename(name) or name in (".", ".."):
            raise ValueError(f"Invalid blob name {name!r}")
        return self.root / name

    def exists(self, name: str) -> bool:
        try:
            return self.path(name).is_file()
        except ValueError:
            return False

    def new_name(self, filename: str | None) -> str:
        ext = os.path.splitext(filename or "")[1][:16]
        return f"{secrets.token_hex(16)}{ext}"

    async def save(self, upload: UploadFile) -> tuple[str, int]:
        """Copies the upload to a freshly named blob; returns (name, bytes written)."""
        name = self.new_name(upload.filename)
        target = self.path(name)
        written = 0
        await upload.seek(0)
        try:
            with open(target, "wb") as f:
                while chunk := await upload.read(self.chunk_size):
                    f.write(chunk)
                    written += len(chunk)
        except BaseException:
            target.unlink(missing_ok=True)
            raise
        return name, written

    def remove(self, name: str) -> bool:
        if not name:
            return False
        try:
            self.path(name).unlink()
            return True
        except FileNotFoundError:
            logger.warning(f"Blob {name} was already missing from disk")
        except (OSError, ValueError) as e:
            logger.warning(f"Could not remove blob {name}: {e}")
        return False

    def free_space(self) -> int:
        return shutil.disk_usage(self.root).free
