import mimetypes
import re
from pathlib import PurePath
from ..records import FileRecord
from ..storage import Storage

def validate_email(email: str) -> bool:
    return bool(re.compile(r"[^@]+@[^@]+\.[^@]+").fullmatch(email))

def guess_type(filename: str, declared: str | None = None) -> str:
    if declared and declared != "application/octet-stream":
        return declared
    return mimetypes.guess_type(filename)[0] or "application/octet-stream"

def clean_name(name: str) -> str:
    """
    Normalises a user supplied file or folder name. Names only live in the
    database, but separators are still stripped so a name never reads as a path.
    """
    return PurePath(name.replace("\\", "/")).name.strip()

async def get_ancestors(storage: Storage, file: FileRecord) -> list[FileRecord]:
    """
    Returns the folders above `file`, nearest first, by following parent ids.
    Stops at the root, at a dangling parent id, or on a cycle.
    """
    ancestors: list[FileRecord] = []
    seen = {file.id}
    parent_id = file.parent_id
    while parent_id is not None and parent_id not in seen:
        parent = await storage.get_file(parent_id)
        if not parent:
            break
        ancestors.append(parent)
        seen.add(parent.id)
        parent_id = parent.parent_id
    return ancestors
