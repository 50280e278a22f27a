from datetime import datetime
from sqlalchemy import Column, Integer, String, Float, DateTime

from aeinfo.core.constants import DEFAULT_QUEUE_RATE
from aeinfo.database.connection import Base


class TaskQueue(Base):
    __tablename__ = "task_queues"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, index=True, nullable=False)
    rate = Column(Float, nullable=False, default=DEFAULT_QUEUE_RATE)  # tasks per second


class Task(Base):
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, index=True)
    task_name = Column(String, unique=True, index=True)  # e.g. TASK_1A2B3C4D
    queue_name = Column(String, nullable=False, index=True)
    payload = Column(String, nullable=True)
    eta = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    status = Column(String, default="pending", index=True)  # pending / leased / done
    leased_at = Column(DateTime, nullable=True)
    finished_at = Column(DateTime, nullable=True, index=True)
