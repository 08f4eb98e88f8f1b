from sqlalchemy import JSON, Column, Integer, Text
from jobmarket.database import Base


class KvEntry(Base):
    __tablename__ = "kv_store"

    key = Column(Text, primary_key=True)
    value = Column(JSON, nullable=False)
    version = Column(Integer, nullable=False)
    updated_at = Column(Text, nullable=False)

    # UPDATEs carry "WHERE version = <read version>"; a concurrent writer
    # makes the flush raise StaleDataError instead of silently losing data.
    __mapper_args__ = {"version_id_col": version}
