import asyncio
from typing import Callable, List

from sqlalchemy.orm import Session

from aeinfo.models.module_version import ModuleVersion


def register_version(db: Session, module: str, version: str) -> ModuleVersion:
    existing = (
        db.query(ModuleVersion)
        .filter(ModuleVersion.module == module, ModuleVersion.version == version)
        .first()
    )
    if existing:
        return existing

    entry = ModuleVersion(module=module, version=version)
    db.add(entry)
    db.commit()
    db.refresh(entry)
    return entry


def remove_version(db: Session, module: str, version: str) -> bool:
    entry = (
        db.query(ModuleVersion)
        .filter(ModuleVersion.module == module, ModuleVersion.version == version)
        .first()
    )
    if not entry:
        return False
    db.delete(entry)
    db.commit()
    return True


def list_modules(db: Session) -> List[str]:
    rows = db.query(ModuleVersion.module).distinct().order_by(ModuleVersion.module).all()
    return [r[0] for r in rows]


def list_versions(db: Session, module: str) -> List[str]:
    rows = (
        db.query(ModuleVersion.version)
        .filter(ModuleVersion.module == module)
        .order_by(ModuleVersion.deployed_at, ModuleVersion.id)
        .all()
    )
    return [r[0] for r in rows]


class SqlModuleRegistry:
    """ModuleRegistry backed by the module_versions table."""

    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory

    def _list_modules(self) -> List[str]:
        db = self._session_factory()
        try:
            return list_modules(db)
        finally:
            db.close()

    def _versions(self, module: str) -> List[str]:
        db = self._session_factory()
        try:
            return list_versions(db, module)
        finally:
            db.close()

    async def list_modules(self) -> List[str]:
        return await asyncio.to_thread(self._list_modules)

    async def versions(self, module: str) -> List[str]:
        return await asyncio.to_thread(self._versions, module)
