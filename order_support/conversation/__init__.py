from order_support.conversation.interaction_tracker import InteractionTracker
from order_support.conversation.option_extractor import extract_options
from order_support.conversation.response_cache import ResponseCache
from order_support.conversation.session_store import (
    InMemorySessionStore,
    SessionNotFoundError,
    SessionStore,
)
from order_support.conversation.state_machine import (
    InvalidPhaseError,
    SessionStateMachine,
)
from order_support.conversation.task_detector import TaskCompletionDetector

__all__ = [
    "SessionStateMachine",
    "InvalidPhaseError",
    "SessionStore",
    "InMemorySessionStore",
    "SessionNotFoundError",
    "ResponseCache",
    "InteractionTracker",
    "TaskCompletionDetector",
    "extract_options",
]
