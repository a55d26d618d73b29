"""Per-user conversation state."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel

from order_support.schemas.order_schema import Order


class Role(str, Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class SessionPhase(str, Enum):
    """Position of a session in the fixed conversational script."""

    AWAITING_INTRO_ACK = "awaiting_intro_ack"
    AWAITING_CUSTOMER_NUMBER = "awaiting_customer_number"
    AWAITING_ORDER_SELECTION = "awaiting_order_selection"
    ORDER_MENU = "order_menu"


class ChatMessage(BaseModel):
    """A single role-tagged message of the model prompt context."""

    role: Role
    content: str

    def to_dict(self) -> dict[str, str]:
        return {"role": self.role.value, "content": self.content}


@dataclass
class TaskFlags:
    """Completion flags of the three hidden tasks. Bits only ever go True."""

    track_order_a: bool = False
    modify_order_b: bool = False
    return_order_c: bool = False

    def mark(self, flag: str) -> bool:
        """Set a flag. Returns True if it was newly set."""
        if flag not in self.__dataclass_fields__:
            raise ValueError(f"Unknown task flag: {flag}")
        if getattr(self, flag):
            return False
        setattr(self, flag, True)
        return True

    def all_completed(self) -> bool:
        return self.track_order_a and self.modify_order_b and self.return_order_c

    def to_dict(self) -> dict[str, bool]:
        return {
            "track_order_a": self.track_order_a,
            "modify_order_b": self.modify_order_b,
            "return_order_c": self.return_order_c,
        }


@dataclass
class SessionData:
    """
    Durable per-user state spanning the whole scripted conversation.

    ``history`` is append-only and is never empty once the session has
    been created. ``interactions`` keeps, per order id, the option labels
    the user has invoked in first-use order.
    """

    user_id: str
    history: list[ChatMessage] = field(default_factory=list)
    phase: SessionPhase = SessionPhase.AWAITING_INTRO_ACK
    selected_order: Optional[Order] = None
    customer_number: Optional[str] = None
    interactions: dict[str, list[str]] = field(default_factory=dict)
    task_flags: TaskFlags = field(default_factory=TaskFlags)
    group: str = "experiment"
    customer_name: str = ""
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def append(self, role: Role, content: str) -> None:
        self.history.append(ChatMessage(role=role, content=content))

    def interactions_for(self, order_id: str) -> list[str]:
        return self.interactions.setdefault(order_id, [])
