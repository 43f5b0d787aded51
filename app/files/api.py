from pathlib import PurePosixPath

from fastapi import APIRouter, Depends, Path, Query, UploadFile, File as Upload
from fastapi.responses import FileResponse, PlainTextResponse
from sqlalchemy.orm import Session

from app.shared.auth import get_current_user_id
from app.shared.db import get_db
from app.files.schemas import FileOut
from app.files import service

router = APIRouter(prefix="/api", tags=["Files"])

# ids are SQLite INTEGERs; anything wider is a bad request, not a lookup
MAX_ID = 2**63 - 1

@router.post("/upload", status_code=201)
def upload_file(
    file: UploadFile = Upload(...),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    try:
        service.upload(db, user_id, file.filename or "", file.file)
    finally:
        file.file.close()
    return {"status": "uploaded"}

@router.get("/files", response_model=list[FileOut])
def list_files(user_id: str = Depends(get_current_user_id), db: Session = Depends(get_db)):
    return service.list_files(db, user_id)

@router.get("/preview", response_class=PlainTextResponse)
def preview_file(
    file_id: int = Query(..., ge=-MAX_ID - 1, le=MAX_ID),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    return PlainTextResponse(service.preview(db, user_id, file_id))

@router.get("/download/{file_id}")
def download_file(
    file_id: int = Path(ge=-MAX_ID - 1, le=MAX_ID),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    f = service.download(db, user_id, file_id)
    return FileResponse(
        path=f.filepath,
        media_type="application/octet-stream",
        filename=PurePosixPath(f.filename).name or "download",
    )
