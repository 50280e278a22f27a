import asyncio
import uuid
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional, Sequence

from sqlalchemy import func
from sqlalchemy.orm import Session

from aeinfo.core.constants import DEFAULT_QUEUE, DEFAULT_QUEUE_RATE
from aeinfo.models.task import Task, TaskQueue
from aeinfo.schemas.info import ZERO_TIME, QueueStats


def _generate_task_name() -> str:
    return f"TASK_{uuid.uuid4().hex[:10].upper()}"


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# ---------- QUEUES ----------

def set_queue_rate(db: Session, name: str, rate: float) -> TaskQueue:
    queue = db.query(TaskQueue).filter(TaskQueue.name == name).first()
    if not queue:
        queue = TaskQueue(name=name, rate=rate)
        db.add(queue)
    else:
        queue.rate = rate
    db.commit()
    db.refresh(queue)
    return queue


# ---------- TASKS ----------

def add_task(
    db: Session,
    queue_name: str = DEFAULT_QUEUE,
    payload: Optional[str] = None,
    eta: Optional[datetime] = None,
    task_name: Optional[str] = None,
) -> Task:
    task = Task(
        task_name=task_name or _generate_task_name(),
        queue_name=queue_name,
        payload=payload,
        eta=eta or datetime.utcnow(),
        status="pending",
    )
    db.add(task)
    db.commit()
    db.refresh(task)
    return task


def lease_tasks(
    db: Session,
    queue_name: str = DEFAULT_QUEUE,
    limit: int = 1,
    now: Optional[datetime] = None,
) -> List[Task]:
    """Move up to `limit` due tasks, earliest ETA first, to the leased state."""
    now = now or datetime.utcnow()
    tasks: List[Task] = (
        db.query(Task)
        .filter(
            Task.queue_name == queue_name,
            Task.status == "pending",
            Task.eta <= now,
        )
        .order_by(Task.eta)
        .limit(limit)
        .all()
    )
    for task in tasks:
        task.status = "leased"
        task.leased_at = now
    db.commit()
    return tasks


def complete_task(db: Session, task_name: str, now: Optional[datetime] = None) -> Optional[Task]:
    task = db.query(Task).filter(Task.task_name == task_name).first()
    if not task:
        return None
    task.status = "done"
    task.finished_at = now or datetime.utcnow()
    db.commit()
    db.refresh(task)
    return task


# ---------- STATS ----------

def get_queue_stats(db: Session, names: Sequence[str], now: Optional[datetime] = None) -> List[QueueStats]:
    """
    Statistics for each requested queue that exists.
    The default queue always exists; other queues exist once configured or
    once a task was added to them. Unknown names are left out of the result.
    """
    now = now or datetime.utcnow()
    minute_ago = now - timedelta(minutes=1)
    result: List[QueueStats] = []

    for name in names:
        queue = db.query(TaskQueue).filter(TaskQueue.name == name).first()
        has_tasks = db.query(Task.id).filter(Task.queue_name == name).first() is not None
        if not queue and not has_tasks and name != DEFAULT_QUEUE:
            continue

        pending, oldest_eta = (
            db.query(func.count(Task.id), func.min(Task.eta))
            .filter(Task.queue_name == name, Task.status == "pending")
            .one()
        )
        in_flight = (
            db.query(func.count(Task.id))
            .filter(Task.queue_name == name, Task.status == "leased")
            .scalar()
        ) or 0
        executed = (
            db.query(func.count(Task.id))
            .filter(
                Task.queue_name == name,
                Task.status == "done",
                Task.finished_at > minute_ago,
            )
            .scalar()
        ) or 0

        result.append(
            QueueStats(
                name=name,
                tasks=int(pending or 0),
                oldest_eta=_as_utc(oldest_eta) or ZERO_TIME,
                executed_1_minute=int(executed),
                in_flight=int(in_flight),
                enforced_rate=float(queue.rate) if queue else DEFAULT_QUEUE_RATE,
            )
        )
    return result


class SqlTaskQueue:
    """QueueStatsProvider backed by the tasks tables."""

    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory

    def _queue_stats(self, names: Sequence[str]) -> List[QueueStats]:
        db = self._session_factory()
        try:
            return get_queue_stats(db, names)
        finally:
            db.close()

    async def queue_stats(self, names: Sequence[str]) -> List[QueueStats]:
        return await asyncio.to_thread(self._queue_stats, names)
