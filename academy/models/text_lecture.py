# academy/models/text_lecture.py
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.sql import func

from academy.core.database import Base


class TextLecture(Base):
    __tablename__ = "text_lectures"

    id = Column(Integer, primary_key=True, index=True)

    chapter_id = Column(Integer, ForeignKey("chapters.id"), nullable=False, index=True)
    course_id = Column(Integer, ForeignKey("courses.id"), nullable=False, index=True)

    title = Column(String(255), nullable=False)
    file_path = Column(Text, nullable=True)
    file_name = Column(String(255), nullable=True)
    upload_type = Column(String(10), default="url", nullable=False)  # 'file', 'url'

    order = Column(Integer, default=0, nullable=False)

    created_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    def __repr__(self):
        return f"<TextLecture(id={self.id}, title='{self.title}', chapter_id={self.chapter_id})>"
