from sqlalchemy import String, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column
from app.shared.db import Base

class FileRecord(Base):
    __tablename__ = "files"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(80), index=True)

    filename: Mapped[str] = mapped_column(String(255))  # as uploaded, for display
    filepath: Mapped[str] = mapped_column(Text)         # absolute path on disk
