"""Withdrawal request: a producer asking to be paid out."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from mycomarket.domain.exceptions import AlreadyProcessed, ValidationError
from mycomarket.domain.model.value_objects import Money


class WithdrawalStatus(Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    REJECTED = "REJECTED"


@dataclass
class Withdrawal:
    id: int | None
    wallet_id: int
    amount: Money
    status: WithdrawalStatus = WithdrawalStatus.PENDING
    bank_details: bytes = b""
    requested_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    processed_at: datetime | None = None
    processor_note: str | None = None

    def resolve(self, outcome: WithdrawalStatus, note: str | None, now: datetime) -> None:
        """Record the administrator's decision.

        A rejection must say why; the producer sees the note.
        """
        if self.status != WithdrawalStatus.PENDING:
            raise AlreadyProcessed(
                f"Withdrawal #{self.id} was already processed ({self.status.value})"
            )
        if outcome == WithdrawalStatus.PENDING:
            raise ValidationError("A withdrawal can only be resolved to COMPLETED or REJECTED")
        if outcome == WithdrawalStatus.REJECTED and not (note and note.strip()):
            raise ValidationError("A rejection reason is required")
        self.status = outcome
        self.processor_note = note.strip() if note else None
        self.processed_at = now
