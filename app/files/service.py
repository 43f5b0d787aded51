import logging
from pathlib import Path
from typing import BinaryIO, List

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.auth.service import get_home_dir
from app.files.models import FileRecord
from app.files.storage import clean_filename, read_head, save_stream
from app.shared.config import settings
from app.shared.errors import NotFound, StorageFailure

logger = logging.getLogger(__name__)

# --- file records ---

def record_file(db: Session, user_id: str, filename: str, full_path: str) -> FileRecord:
    # uploads are additive: same filename twice gives two records
    rec = FileRecord(user_id=user_id, filename=filename, filepath=full_path)
    db.add(rec)
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise StorageFailure(f"could not record file: {e}") from e
    db.refresh(rec)
    return rec

def list_files(db: Session, user_id: str) -> List[FileRecord]:
    stmt = (
        select(FileRecord)
        .where(FileRecord.user_id == user_id)
        .order_by(FileRecord.filename, FileRecord.id)
    )
    return list(db.scalars(stmt).all())

def get_file(db: Session, user_id: str, file_id: int) -> FileRecord:
    f = db.get(FileRecord, file_id)
    # someone else's file looks exactly like a missing one
    if not f or f.user_id != user_id:
        raise NotFound("file not found")
    return f

def resolve_path(db: Session, user_id: str, file_id: int) -> Path:
    return Path(get_file(db, user_id, file_id).filepath)

# --- file access ---

def upload(db: Session, user_id: str, filename: str, content: BinaryIO) -> FileRecord:
    """
    Store ``content`` under the user's home and record it.

    The disk name is the cleaned form of ``filename``; the record keeps the
    name exactly as uploaded. Nothing is recorded unless the write finished.
    """
    home = get_home_dir(db, user_id)
    target = home / clean_filename(filename)
    try:
        size = save_stream(content, target, settings.MAX_UPLOAD_BYTES)
    except OSError as e:
        raise StorageFailure(f"save failed: {e}") from e
    rec = record_file(db, user_id, filename, str(target))
    logger.info("stored %s for %s (%d bytes, id=%d)", target, user_id, size, rec.id)
    return rec

def preview(db: Session, user_id: str, file_id: int, line_limit: int | None = None) -> str:
    path = resolve_path(db, user_id, file_id)
    try:
        return read_head(path, settings.PREVIEW_LINES if line_limit is None else line_limit)
    except FileNotFoundError as e:
        raise NotFound("file not found") from e
    except OSError as e:
        raise StorageFailure(f"preview failed: {e}") from e

def download(db: Session, user_id: str, file_id: int) -> FileRecord:
    f = get_file(db, user_id, file_id)
    if not Path(f.filepath).is_file():
        raise NotFound("file not found")
    return f
