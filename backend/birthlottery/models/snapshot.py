from sqlalchemy import Column, Integer, Text, DateTime
from datetime import datetime
from birthlottery.core.database import Base


class DatasetSnapshot(Base):
    """The single cached copy of the merged and distributed dataset."""
    __tablename__ = "dataset_snapshots"

    id = Column(Integer, primary_key=True, index=True)
    payload = Column(Text, nullable=False)  # JSON output payload
    written_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    def __repr__(self):
        return f"<DatasetSnapshot(id={self.id}, written_at={self.written_at})>"
