"""Shared test fixtures and helpers."""

from datetime import datetime, timedelta, timezone
from typing import Optional, Sequence

import pytest

from order_support.conversation.interaction_tracker import InteractionTracker
from order_support.conversation.response_cache import ResponseCache
from order_support.conversation.state_machine import SessionStateMachine
from order_support.conversation.task_detector import TaskCompletionDetector
from order_support.schemas.session_schema import ChatMessage
from order_support.tools.audit_log import MemoryAuditLogger
from order_support.tools.model_client import ModelCallError, SamplingParams

INTRO_REPLY = "Welcome! I'm your virtual assistant. Options: Order A, Order B, Order C"

TRACK_A_REPLY = (
    "Order A is currently in transit and is expected to arrive on September 16th, 2024. "
    "What would you like to do next? "
    "Options: Track, Modify, Cancel, Return, Back to Order Selection"
)

MODIFY_B_REPLY = (
    "Done! The delivery address for Order B has been updated to Musterstrasse 123, 12345 Berlin. "
    "Is there anything else you'd like to do? "
    "Options: Track, Modify, Cancel, Return, Back to Order Selection"
)

RETURN_C_REPLY = (
    "It seems there was an issue generating the return label for this order due to a "
    "temporary system error from our external shipment provider. "
    "Options: Contact Human Representative, Back to Order Operations, Back to Order Selection"
)

GENERIC_REPLY = (
    "Happy to help with that. How can I assist you further? "
    "Options: Track, Modify, Cancel, Return, Back to Order Selection"
)


class FakeModelClient:
    """Records calls and answers from a message -> reply table."""

    def __init__(
        self,
        replies: Optional[dict[str, str]] = None,
        default: str = GENERIC_REPLY,
        intro: str = INTRO_REPLY,
    ) -> None:
        self.replies = replies or {}
        self.default = default
        self.intro = intro
        self.error: Optional[Exception] = None
        self.calls: list[tuple[list[ChatMessage], SamplingParams]] = []

    async def complete(self, messages: Sequence[ChatMessage], params: SamplingParams) -> str:
        self.calls.append((list(messages), params))
        if self.error is not None:
            raise self.error
        last = messages[-1].content
        if last == "Start":
            return self.intro
        return self.replies.get(last, self.default)

    def fail_with(self, error: Exception = ModelCallError("connection reset")) -> None:
        self.error = error

    def recover(self) -> None:
        self.error = None

    @property
    def menu_calls(self) -> list[tuple[list[ChatMessage], SamplingParams]]:
        return [c for c in self.calls if c[0][-1].content != "Start"]


class FailingAuditLogger:
    """Audit backend that always raises."""

    def __init__(self) -> None:
        self.attempts = 0

    async def append(self, user_id, role, text, group, session_start=False, session_end=False):
        self.attempts += 1
        raise RuntimeError("bucket unavailable")


class SteppingClock:
    """Deterministic clock advancing by a fixed step on every read."""

    def __init__(self, start: Optional[datetime] = None, step: timedelta = timedelta(0)) -> None:
        self.now = start or datetime(2024, 9, 12, 10, 0, tzinfo=timezone.utc)
        self.step = step

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + self.step
        return current

    def advance(self, delta: timedelta) -> None:
        self.now = self.now + delta


@pytest.fixture
def model():
    return FakeModelClient(
        replies={
            "Track": TRACK_A_REPLY,
            "Musterstrasse 123, 12345 Berlin": MODIFY_B_REPLY,
            "Return": RETURN_C_REPLY,
        }
    )


@pytest.fixture
def audit():
    return MemoryAuditLogger()


@pytest.fixture
def clock():
    return SteppingClock()


@pytest.fixture
def machine(model, audit, clock):
    return SessionStateMachine(model_client=model, audit_logger=audit, clock=clock)


@pytest.fixture
def tracker():
    return InteractionTracker()


@pytest.fixture
def detector():
    return TaskCompletionDetector()


@pytest.fixture
def cache():
    return ResponseCache()


async def advance_to_menu(machine: SessionStateMachine, user_id: str, order: str = "Order A") -> None:
    """Drive a new session through intro, customer number and order selection."""
    await machine.handle_turn(user_id, "")
    await machine.handle_turn(user_id, "Understood")
    await machine.handle_turn(user_id, "123-456-7890")
    await machine.handle_turn(user_id, order)


def messages_for(audit: MemoryAuditLogger, user_id: str, role: Optional[str] = None) -> list[str]:
    return [r.text for r in audit.for_user(user_id) if role is None or r.role == role]
