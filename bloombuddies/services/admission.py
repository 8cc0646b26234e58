"""Admission control for the live interview.

``validate_access`` is a read-only check a client may poll. ``consume_access``
spends the token's single attempt. The two are kept apart so that checking
status never burns the attempt.
"""
from dataclasses import dataclass
from enum import Enum
import logging
from typing import Callable, Optional

from .locks import TokenLocks
from .store import CandidateRecord, CandidateStore
from .window import DEFAULT_POLICY, WindowPolicy, WindowResult, check_window, utcnow

logger = logging.getLogger(__name__)


class DenialReason(str, Enum):
    NOT_FOUND = "not_found"
    ALREADY_USED = "already_used"
    OUT_OF_WINDOW = "out_of_window"
    ALREADY_STARTED = "already_started"


@dataclass
class Decision:
    granted: bool
    reason: Optional[DenialReason] = None
    candidate: Optional[CandidateRecord] = None
    window: Optional[WindowResult] = None
    call_attempts: Optional[int] = None

    @classmethod
    def grant(cls, **kwargs):
        return cls(True, **kwargs)

    @classmethod
    def deny(cls, reason, **kwargs):
        return cls(False, reason, **kwargs)


def _short(token):
    return f"{token[:6]}..." if token else "<empty>"


class AdmissionControl:
    def __init__(self, store: CandidateStore, policy: WindowPolicy = DEFAULT_POLICY,
                 locks: Optional[TokenLocks] = None, clock: Callable = utcnow):
        self.store = store
        self.policy = policy
        self.locks = locks or TokenLocks()
        self.clock = clock

    def validate_access(self, token: str, now=None) -> Decision:
        record = self.store.find_by_token(token)
        if record is None:
            return Decision.deny(DenialReason.NOT_FOUND)
        if record.interview_started:
            return Decision.deny(DenialReason.ALREADY_USED, candidate=record)
        if record.is_cancelled:
            return Decision.deny(DenialReason.OUT_OF_WINDOW, candidate=record)
        if record.appointment_time is None:
            # nothing booked yet, so there is no window to be inside of
            logger.warning("token %s has no appointment time", _short(token))
            return Decision.deny(DenialReason.OUT_OF_WINDOW, candidate=record)

        window = check_window(now or self.clock(), record.appointment_time, self.policy)
        if not window.valid:
            return Decision.deny(DenialReason.OUT_OF_WINDOW, candidate=record, window=window)
        return Decision.grant(candidate=record, window=window)

    def consume_access(self, token: str, now=None) -> Decision:
        if not token:
            return Decision.deny(DenialReason.NOT_FOUND)
        with self.locks.hold(token):
            record = self.store.find_by_token(token)
            if record is None:
                return Decision.deny(DenialReason.NOT_FOUND)
            if record.is_cancelled and not record.interview_started:
                # a cancelled booking has no window left to enter
                return Decision.deny(DenialReason.OUT_OF_WINDOW, candidate=record,
                                     call_attempts=record.call_attempts)

            call_attempts = record.call_attempts + 1
            if record.interview_started or call_attempts > 1:
                logger.info("duplicate interview start for %s (attempt %d)", _short(token), call_attempts)
                return Decision.deny(DenialReason.ALREADY_STARTED, candidate=record,
                                     call_attempts=record.call_attempts)

            committed = self.store.mark_started(record, call_attempts, now or self.clock())
            if committed is None:
                logger.info("lost admission race for %s", _short(token))
                return Decision.deny(DenialReason.ALREADY_STARTED, candidate=record)

        logger.info("interview started for record %s", committed.id)
        return Decision.grant(candidate=committed, call_attempts=call_attempts)
