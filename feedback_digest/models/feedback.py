from sqlalchemy import Column, Integer, String, Text, DateTime
from sqlalchemy.sql import func
from .database import Base

class Feedback(Base):
    __tablename__ = "feedback"

    id = Column(Integer, primary_key=True, index=True)
    content = Column(Text, nullable=False)
    source = Column(String(100), nullable=True)  # github, discord, support, ...
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    def to_item(self) -> dict:
        return {"content": self.content, "source": self.source}

    def __repr__(self):
        return f"<Feedback(id={self.id}, source='{self.source}')>"
