"""Persistent, append-only record of job applications already attempted."""

import json
from pathlib import Path
from typing import Iterator, List, Optional, Set, Tuple

from pydantic import ValidationError
from sqlalchemy import Boolean, Column, Integer, String, create_engine, delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from linkedin_apply.interfaces.services import ILedgerStore
from linkedin_apply.model.types import AppliedJobRecord
from linkedin_apply.utils.logging_config import get_logger


class LedgerPersistenceError(Exception):
    """The ledger could not be read or written. Always fatal for a run."""


class JsonLedgerStore(ILedgerStore):
    """Ledger stored as a flat JSON list, rewritten in full on every save."""

    def __init__(self, path: str):
        self.path = Path(path)

    def load(self) -> List[AppliedJobRecord]:
        if not self.path.exists():
            return []

        try:
            raw = json.loads(self.path.read_text(encoding="utf-8") or "[]")
        except (OSError, json.JSONDecodeError) as e:
            raise LedgerPersistenceError(f"Cannot read ledger {self.path}: {e}") from e

        if not isinstance(raw, list):
            raise LedgerPersistenceError(f"Ledger {self.path} is not a JSON list")

        try:
            return [AppliedJobRecord.model_validate(item) for item in raw]
        except ValidationError as e:
            raise LedgerPersistenceError(f"Malformed record in {self.path}: {e}") from e

    def save(self, records: List[AppliedJobRecord]) -> None:
        payload = [record.model_dump(by_alias=True) for record in records]
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(payload, ensure_ascii=False), encoding="utf-8")
            tmp_path.replace(self.path)
        except OSError as e:
            raise LedgerPersistenceError(f"Cannot write ledger {self.path}: {e}") from e


class Base(DeclarativeBase):
    pass


class AppliedJobRow(Base):
    __tablename__ = "applied_jobs"

    position = Column(Integer, primary_key=True)
    title = Column(String, nullable=False)
    company = Column(String, nullable=False, index=True)
    applied_successfully = Column(Boolean, nullable=False)


class SqlLedgerStore(ILedgerStore):
    """Ledger stored in a SQL table; each save rewrites the table in one transaction."""

    def __init__(self, url: str):
        connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
        if url.startswith("sqlite:///"):
            db_file = url[len("sqlite:///"):]
            if db_file and db_file != ":memory:":
                Path(db_file).parent.mkdir(parents=True, exist_ok=True)
        try:
            self._engine = create_engine(url, connect_args=connect_args)
            Base.metadata.create_all(self._engine)
        except SQLAlchemyError as e:
            raise LedgerPersistenceError(f"Cannot open ledger database {url}: {e}") from e
        self._session_factory = sessionmaker(bind=self._engine)

    def load(self) -> List[AppliedJobRecord]:
        try:
            with self._session_factory() as session:
                rows = session.scalars(
                    select(AppliedJobRow).order_by(AppliedJobRow.position)
                ).all()
                return [
                    AppliedJobRecord(
                        title=row.title,
                        company=row.company,
                        applied_successfully=row.applied_successfully,
                    )
                    for row in rows
                ]
        except SQLAlchemyError as e:
            raise LedgerPersistenceError(f"Cannot read ledger database: {e}") from e

    def save(self, records: List[AppliedJobRecord]) -> None:
        try:
            with self._session_factory() as session, session.begin():
                self._replace_rows(session, records)
        except SQLAlchemyError as e:
            raise LedgerPersistenceError(f"Cannot write ledger database: {e}") from e

    @staticmethod
    def _replace_rows(session: Session, records: List[AppliedJobRecord]) -> None:
        session.execute(delete(AppliedJobRow))
        session.add_all(
            AppliedJobRow(
                position=position,
                title=record.title,
                company=record.company,
                applied_successfully=record.applied_successfully,
            )
            for position, record in enumerate(records)
        )


class AppliedJobLedger:
    """In-memory mirror of the ledger store.

    Records are only ever appended. ``append`` updates the mirror first and
    then persists the full list, so a crash between the two simply re-attempts
    that one application on the next run.
    """

    def __init__(self, store: ILedgerStore, trace_id: Optional[str] = None):
        self.store = store
        self.logger = get_logger(trace_id)
        self._records: List[AppliedJobRecord] = []
        self._keys: Set[Tuple[str, str]] = set()
        self._loaded = False

    def load(self) -> List[AppliedJobRecord]:
        records = self.store.load()
        if not records:
            self.logger.info("Ledger is empty, starting fresh", store=type(self.store).__name__)
        self._records = list(records)
        self._keys = {record.key for record in self._records}
        self._loaded = True
        self.logger.info("Ledger loaded", records=len(self._records))
        return list(self._records)

    def append(self, record: AppliedJobRecord) -> None:
        if not self._loaded:
            raise RuntimeError("Ledger must be loaded before appending")

        self._records.append(record)
        self._keys.add(record.key)
        self.store.save(list(self._records))
        self.logger.info(
            "Ledger record appended",
            title=record.title,
            company=record.company,
            applied_successfully=record.applied_successfully,
            records=len(self._records),
        )

    def contains(self, title: str, company: str) -> bool:
        return (title, company) in self._keys

    def find(self, title: str, company: str) -> Optional[AppliedJobRecord]:
        for record in self._records:
            if record.key == (title, company):
                return record
        return None

    @property
    def records(self) -> List[AppliedJobRecord]:
        return list(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[AppliedJobRecord]:
        return iter(list(self._records))


def create_ledger_store(backend: str, path: str, db_url: str) -> ILedgerStore:
    if backend == "json":
        return JsonLedgerStore(path)
    if backend == "sqlite":
        return SqlLedgerStore(db_url)
    raise ValueError(f"Unknown ledger backend: {backend}")
