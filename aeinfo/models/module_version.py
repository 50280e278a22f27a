from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, UniqueConstraint

from aeinfo.database.connection import Base


class ModuleVersion(Base):
    __tablename__ = "module_versions"
    __table_args__ = (UniqueConstraint("module", "version", name="uq_module_version"),)

    id = Column(Integer, primary_key=True, index=True)
    module = Column(String, nullable=False, index=True)  # e.g. default, worker
    version = Column(String, nullable=False)  # e.g. v1, 20261019t101500
    deployed_at = Column(DateTime, default=datetime.utcnow)
