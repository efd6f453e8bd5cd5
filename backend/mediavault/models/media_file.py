"""Media file model: one locally stored recording, import or thumbnail."""

from typing import Optional

from sqlalchemy import BigInteger, Float, Integer, LargeBinary, String
from sqlalchemy.orm import Mapped, mapped_column

from mediavault.models.base import Base


class MediaFile(Base):
    __tablename__ = "media_files"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    name: Mapped[str] = mapped_column(String(500), nullable=False, index=True)
    type: Mapped[str] = mapped_column(String(20), nullable=False)  # audio | video | thumbnail
    mime_type: Mapped[str] = mapped_column(String(200), nullable=False)
    size: Mapped[int] = mapped_column(Integer, nullable=False)
    duration: Mapped[float] = mapped_column(Float, default=0)
    created: Mapped[int] = mapped_column(BigInteger, nullable=False)  # epoch ms
    content: Mapped[Optional[bytes]] = mapped_column(LargeBinary, nullable=True)

    def __repr__(self) -> str:
        return f"<MediaFile(id={self.id}, name='{self.name}', type={self.type})>"
