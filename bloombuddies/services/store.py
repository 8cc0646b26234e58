"""Candidate store contract and the SQL implementation.

The store is the system of record for candidates. Every method returns plain
``CandidateRecord`` values so callers never hold ORM objects or raw Airtable
payloads.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, fields
from datetime import datetime
from typing import Optional

from sqlalchemy import or_, update
from sqlalchemy.exc import SQLAlchemyError

from ..errors import RecordNotFound, UpstreamFailure
from .window import as_utc, parse_timestamp

STATUSES = ("scheduled", "pending", "accepted", "rejected", "cancelled", "rescheduled")
INTERVIEWED = "interviewed"


@dataclass
class CandidateRecord:
    id: str
    token: Optional[str] = None
    management_token: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    appointment_time: Optional[datetime] = None
    status: Optional[str] = None
    action: Optional[str] = None
    interview_completed: bool = False
    call_attempts: int = 0
    call_started_at: Optional[datetime] = None
    call_ended_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    overall_score: Optional[int] = None
    communication: Optional[int] = None
    enthusiasm: Optional[int] = None
    professionalism: Optional[int] = None
    recommendation: Optional[str] = None
    summary: Optional[str] = None
    analysis: Optional[str] = None
    transcript: Optional[str] = None
    interview_length: Optional[int] = None
    availability: Optional[str] = None
    next_action: Optional[str] = None
    recording_url: Optional[str] = None
    ended_reason: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def interview_started(self) -> bool:
        return bool(self.interview_completed) or self.action == INTERVIEWED

    @property
    def is_cancelled(self) -> bool:
        return (self.status or "").lower() == "cancelled"


RECORD_FIELDS = tuple(f.name for f in fields(CandidateRecord))
WRITABLE_FIELDS = frozenset(RECORD_FIELDS) - {"id", "created_at"}
DATETIME_FIELDS = frozenset({"appointment_time", "call_started_at", "call_ended_at", "cancelled_at", "created_at"})


def check_writable(values: dict):
    unknown = set(values) - WRITABLE_FIELDS
    if unknown:
        raise ValueError(f"unknown candidate fields: {sorted(unknown)}")


class CandidateStore(ABC):
    """Key-record store with secondary unique indexes on the two tokens."""

    # True when mark_started is a compare-and-set on the backing store
    atomic_mark_started = False

    @abstractmethod
    def get(self, record_id: str) -> Optional[CandidateRecord]: ...

    @abstractmethod
    def find_by_token(self, token: str) -> Optional[CandidateRecord]: ...

    @abstractmethod
    def find_by_management_token(self, token: str) -> Optional[CandidateRecord]: ...

    @abstractmethod
    def list(self, status: Optional[str] = None) -> list: ...

    @abstractmethod
    def create(self, values: dict) -> CandidateRecord: ...

    @abstractmethod
    def update(self, record_id: str, values: dict) -> CandidateRecord: ...

    @abstractmethod
    def delete(self, record_id: str) -> bool: ...

    def mark_started(self, record: CandidateRecord, call_attempts: int,
                     started_at: datetime) -> Optional[CandidateRecord]:
        """Commit an admission in one update.

        Returns None when the store detects the record changed since ``record``
        was read.
        """
        return self.update(record.id, started_fields(call_attempts, started_at))


def started_fields(call_attempts, started_at):
    return {
        "action": INTERVIEWED,
        "interview_completed": True,
        "status": "pending",
        "call_attempts": call_attempts,
        "call_started_at": started_at,
    }


def _to_naive_utc(value):
    if isinstance(value, str):
        value = parse_timestamp(value)
    if isinstance(value, datetime):
        return as_utc(value).replace(tzinfo=None)
    return value


def _column_values(values):
    """Values as stored in SQL: datetime fields become naive UTC, the rest pass through."""
    return {k: _to_naive_utc(v) if k in DATETIME_FIELDS else v for k, v in values.items()}


class SqlCandidateStore(CandidateStore):
    atomic_mark_started = True

    def __init__(self, db):
        self.db = db

    @property
    def model(self):
        from ..models.candidate import Candidate
        return Candidate

    @staticmethod
    def _pk(record_id):
        try:
            return int(record_id)
        except (TypeError, ValueError):
            return None

    def _to_record(self, row) -> Optional[CandidateRecord]:
        if row is None:
            return None
        values = {}
        for name in RECORD_FIELDS:
            if name == "id":
                continue
            value = getattr(row, name, None)
            if name in DATETIME_FIELDS and value is not None:
                value = as_utc(value)
            values[name] = value
        values["interview_completed"] = bool(values.get("interview_completed"))
        values["call_attempts"] = int(values.get("call_attempts") or 0)
        return CandidateRecord(id=str(row.id), **values)

    def _first(self, **criteria):
        try:
            return self._to_record(self.model.query.filter_by(**criteria).first())
        except SQLAlchemyError as e:
            self.db.session.rollback()
            raise UpstreamFailure(f"candidate lookup failed: {e}") from e

    def _commit(self, what):
        try:
            self.db.session.commit()
        except SQLAlchemyError as e:
            self.db.session.rollback()
            raise UpstreamFailure(f"candidate {what} failed: {e}") from e

    def get(self, record_id):
        pk = self._pk(record_id)
        if pk is None:
            return None
        return self._first(id=pk)

    def find_by_token(self, token):
        if not token:
            return None
        return self._first(token=token)

    def find_by_management_token(self, token):
        if not token:
            return None
        return self._first(management_token=token)

    def list(self, status=None):
        Candidate = self.model
        query = Candidate.query
        if status:
            query = query.filter(Candidate.status == status)
        try:
            rows = query.order_by(Candidate.appointment_time.desc(), Candidate.id.desc()).all()
        except SQLAlchemyError as e:
            self.db.session.rollback()
            raise UpstreamFailure(f"candidate list failed: {e}") from e
        return [self._to_record(r) for r in rows]

    def create(self, values):
        check_writable(values)
        row = self.model(**_column_values(values))
        self.db.session.add(row)
        self._commit("create")
        return self._to_record(row)

    def update(self, record_id, values):
        check_writable(values)
        pk = self._pk(record_id)
        row = self.db.session.get(self.model, pk) if pk is not None else None
        if row is None:
            raise RecordNotFound(record_id)
        for k, v in _column_values(values).items():
            setattr(row, k, v)
        self._commit("update")
        return self._to_record(row)

    def delete(self, record_id):
        pk = self._pk(record_id)
        row = self.db.session.get(self.model, pk) if pk is not None else None
        if row is None:
            return False
        self.db.session.delete(row)
        self._commit("delete")
        return True

    def mark_started(self, record, call_attempts, started_at):
        Candidate = self.model
        values = _column_values(started_fields(call_attempts, started_at))
        stmt = (
            update(Candidate)
            .where(
                Candidate.id == self._pk(record.id),
                Candidate.interview_completed.is_(False),
                or_(Candidate.action.is_(None), Candidate.action != "interviewed"),
                Candidate.call_attempts == record.call_attempts,
                or_(Candidate.status.is_(None), Candidate.status != "cancelled"),
            )
            .values(**values)
        )
        try:
            result = self.db.session.execute(stmt)
            self.db.session.commit()
        except SQLAlchemyError as e:
            self.db.session.rollback()
            raise UpstreamFailure(f"candidate admission commit failed: {e}") from e
        if result.rowcount != 1:
            return None
        return self.get(record.id)


def build_store(config, db):
    backend = (config.get("CANDIDATE_STORE") or "sql").lower()
    if backend == "airtable":
        from .airtable import AirtableCandidateStore
        return AirtableCandidateStore(
            api_key=config.get("AIRTABLE_API_KEY"),
            base_id=config.get("AIRTABLE_BASE_ID"),
            table_name=config.get("AIRTABLE_TABLE_NAME", "Candidates"),
            api_url=config.get("AIRTABLE_API_URL", "https://api.airtable.com/v0"),
            timeout=config.get("AIRTABLE_TIMEOUT", 10),
        )
    if backend == "sql":
        return SqlCandidateStore(db)
    raise ValueError(f"unknown CANDIDATE_STORE {backend!r}")
