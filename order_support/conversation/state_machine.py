"""
Session state machine for the scripted order-support conversation.

Every session sits in exactly one of four named phases. A single
dispatch table maps (phase, input shape) to a transition handler; the
first matching rule wins. Only the general order-menu turn calls the
external model, everything else is a deterministic canned reply.

Usage:
    machine = SessionStateMachine(model_client=OpenAIModelClient(), audit_logger=logger)
    result = await machine.handle_turn("participant-1", "")
    result = await machine.handle_turn("participant-1", "Understood")
"""

import asyncio
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Optional

from order_support.config import ScriptConfig, settings
from order_support.conversation.interaction_tracker import InteractionTracker
from order_support.conversation.option_extractor import extract_options
from order_support.conversation.response_cache import ResponseCache
from order_support.conversation.session_store import InMemorySessionStore, SessionStore
from order_support.conversation.task_detector import TaskCompletionDetector
from order_support.logging_context import get_session_logger, set_user_id
from order_support.prompts import prompt_templates as templates
from order_support.prompts.system_prompts import ASSISTANT_SYSTEM_PROMPT, INTRO_TRIGGER
from order_support.schemas.session_schema import ChatMessage, Role, SessionData, SessionPhase
from order_support.schemas.turn_schema import EndSessionResult, TurnResult
from order_support.tools.audit_log import AuditLogger
from order_support.tools.model_client import ModelCallError, ModelClient, intro_sampling, menu_sampling
from order_support.tools.orders import match_order
from order_support.utils import format_duration, normalize_message

logger = get_session_logger(__name__)


class InputShape(str, Enum):
    """Shapes of user input a phase rule can require."""

    ANY = "any"
    CUSTOMER_NUMBER = "customer_number"
    ORDER_REFERENCE = "order_reference"
    ORDER_SELECTION_REQUEST = "order_selection_request"


@dataclass(frozen=True)
class PhaseRule:
    """One row of the dispatch table."""

    phase: SessionPhase
    input_shape: InputShape
    handler: str
    calls_model: bool = False


class InvalidPhaseError(Exception):
    """Raised when no rule handles the session's current phase."""


class SessionStateMachine:
    """
    Orchestrates per-user sessions around calls to the external model.

    Turns of one user are serialized with a per-user lock. The session
    store and response cache are shared across users.
    """

    RULES: list[PhaseRule] = [
        # --- Introduction ---
        PhaseRule(SessionPhase.AWAITING_INTRO_ACK, InputShape.ANY, "_acknowledge_intro"),

        # --- Customer number gate ---
        PhaseRule(SessionPhase.AWAITING_CUSTOMER_NUMBER, InputShape.CUSTOMER_NUMBER,
                  "_accept_customer_number"),
        PhaseRule(SessionPhase.AWAITING_CUSTOMER_NUMBER, InputShape.ANY,
                  "_reject_customer_number"),

        # --- Order selection ---
        PhaseRule(SessionPhase.AWAITING_ORDER_SELECTION, InputShape.ORDER_REFERENCE,
                  "_select_order"),
        PhaseRule(SessionPhase.AWAITING_ORDER_SELECTION, InputShape.ANY,
                  "_reprompt_order_selection"),

        # --- Order menu ---
        PhaseRule(SessionPhase.ORDER_MENU, InputShape.ORDER_SELECTION_REQUEST,
                  "_return_to_order_selection"),
        PhaseRule(SessionPhase.ORDER_MENU, InputShape.ANY, "_handle_menu_turn",
                  calls_model=True),
    ]

    def __init__(
        self,
        model_client: ModelClient,
        audit_logger: AuditLogger,
        store: Optional[SessionStore] = None,
        cache: Optional[ResponseCache] = None,
        tracker: Optional[InteractionTracker] = None,
        detector: Optional[TaskCompletionDetector] = None,
        config: ScriptConfig = settings.script,
        system_prompt: str = ASSISTANT_SYSTEM_PROMPT,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self._model = model_client
        self._audit_logger = audit_logger
        self.store = store if store is not None else InMemorySessionStore()
        self.cache = cache if cache is not None else ResponseCache()
        self._tracker = tracker or InteractionTracker()
        self._detector = detector or TaskCompletionDetector()
        self._config = config
        self._customer_number = re.compile(config.customer_number_pattern)
        self._system_prompt = system_prompt
        self._clock = clock
        self._locks: dict[str, asyncio.Lock] = {}

    # ------------------------------------------------------------------ #
    # Public boundary
    # ------------------------------------------------------------------ #

    async def handle_turn(self, user_id: str, message: str) -> TurnResult:
        """
        Process one user turn.

        Raises:
            ModelCallError: If the model fails during an order-menu turn.
                The session is left exactly as it was before the turn.
        """
        set_user_id(user_id)
        async with self._lock_for(user_id):
            session = self.store.get(user_id)
            if session is None:
                return await self._start_session(user_id)

            await self._audit(session, Role.USER, message)
            return await self._dispatch(session, message)

    async def end_session(self, user_id: str) -> EndSessionResult:
        """
        Emit the elapsed-time summary for a session.

        Raises:
            SessionNotFoundError: If the user has no session.
        """
        set_user_id(user_id)
        async with self._lock_for(user_id):
            session = self.store.get_or_raise(user_id)
            elapsed = (self._clock() - session.started_at).total_seconds()
            summary = templates.build_session_summary(format_duration(elapsed))
            await self._audit(session, Role.SYSTEM, summary, session_end=True)
            logger.info("Session ended after %.1fs", elapsed)
            return EndSessionResult(user_id=user_id, duration_seconds=elapsed, summary=summary)

    def get_session(self, user_id: str) -> Optional[SessionData]:
        return self.store.get(user_id)

    # ------------------------------------------------------------------ #
    # Dispatch
    # ------------------------------------------------------------------ #

    def _lock_for(self, user_id: str) -> asyncio.Lock:
        return self._locks.setdefault(user_id, asyncio.Lock())

    def _shape_matches(self, shape: InputShape, message: str) -> bool:
        if shape == InputShape.ANY:
            return True
        if shape == InputShape.CUSTOMER_NUMBER:
            return self._customer_number.search(message) is not None
        if shape == InputShape.ORDER_REFERENCE:
            return match_order(message) is not None
        if shape == InputShape.ORDER_SELECTION_REQUEST:
            return templates.BACK_TO_ORDER_SELECTION.lower() in normalize_message(message)
        return False

    def find_rule(self, phase: SessionPhase, message: str) -> PhaseRule:
        """Return the first rule for ``phase`` whose input shape matches."""
        for rule in self.RULES:
            if rule.phase == phase and self._shape_matches(rule.input_shape, message):
                return rule
        raise InvalidPhaseError(f"No rule handles phase '{phase.value}'")

    async def _dispatch(self, session: SessionData, message: str) -> TurnResult:
        rule = self.find_rule(session.phase, message)
        old_phase = session.phase
        handler = getattr(self, rule.handler)

        if rule.calls_model:
            result = await handler(session, message)
        else:
            result = handler(session, message)
            session.append(Role.USER, message)
            session.append(Role.ASSISTANT, result.reply)
            await self._audit(session, Role.ASSISTANT, result.reply)

        if session.phase != old_phase:
            logger.debug("Phase transition: %s -> %s", old_phase.value, session.phase.value)
        return result

    # ------------------------------------------------------------------ #
    # Session creation
    # ------------------------------------------------------------------ #

    async def _start_session(self, user_id: str) -> TurnResult:
        session = SessionData(
            user_id=user_id,
            group=self._config.group,
            customer_name=self._config.customer_name,
            started_at=self._clock(),
        )
        session.append(Role.SYSTEM, self._system_prompt)
        session.append(Role.USER, INTRO_TRIGGER)

        try:
            intro = await self._model.complete(list(session.history), intro_sampling())
        except ModelCallError as exc:
            logger.error("Error generating introduction: %s", exc)
            intro = templates.INTRO_FALLBACK_REPLY

        session.append(Role.ASSISTANT, intro)
        session.phase = SessionPhase.AWAITING_INTRO_ACK
        self.store.create(session)
        logger.info("Session created (group=%s)", session.group)

        await self._audit(session, Role.ASSISTANT, intro, session_start=True)
        return TurnResult(reply=intro, options=[templates.ACKNOWLEDGE_OPTION])

    # ------------------------------------------------------------------ #
    # Scripted transitions (no model call)
    # ------------------------------------------------------------------ #

    def _acknowledge_intro(self, session: SessionData, message: str) -> TurnResult:
        session.phase = SessionPhase.AWAITING_CUSTOMER_NUMBER
        return TurnResult(reply=templates.ASK_CUSTOMER_NUMBER_REPLY, show_progress_bar=False)

    def _accept_customer_number(self, session: SessionData, message: str) -> TurnResult:
        match = self._customer_number.search(message)
        session.customer_number = match.group(0) if match else message
        session.phase = SessionPhase.AWAITING_ORDER_SELECTION
        return TurnResult(
            reply=templates.build_welcome_reply(session.customer_name),
            options=templates.order_options(),
            show_progress_bar=True,
        )

    def _reject_customer_number(self, session: SessionData, message: str) -> TurnResult:
        logger.debug("Customer number rejected: %r", message)
        return TurnResult(reply=templates.INVALID_CUSTOMER_NUMBER_REPLY, show_progress_bar=True)

    def _select_order(self, session: SessionData, message: str) -> TurnResult:
        order = match_order(message)
        session.selected_order = order
        session.phase = SessionPhase.ORDER_MENU
        return TurnResult(
            reply=templates.build_order_selected_reply(order.id),
            options=list(templates.OPERATION_OPTIONS),
            tasks_completed=session.task_flags.all_completed(),
        )

    def _reprompt_order_selection(self, session: SessionData, message: str) -> TurnResult:
        return TurnResult(
            reply=templates.SELECT_ORDER_REPLY,
            options=templates.order_options(),
            tasks_completed=session.task_flags.all_completed(),
        )

    def _return_to_order_selection(self, session: SessionData, message: str) -> TurnResult:
        session.selected_order = None
        session.phase = SessionPhase.AWAITING_ORDER_SELECTION
        return TurnResult(
            reply=templates.BACK_TO_SELECTION_REPLY,
            options=templates.order_options(),
            tasks_completed=session.task_flags.all_completed(),
        )

    # ------------------------------------------------------------------ #
    # Order menu turn (model call)
    # ------------------------------------------------------------------ #

    async def _handle_menu_turn(self, session: SessionData, message: str) -> TurnResult:
        order = session.selected_order
        if order is None:
            raise InvalidPhaseError("Order menu reached without a selected order")

        prompt = [*session.history, ChatMessage(role=Role.USER, content=message)]
        cache_key = ResponseCache.make_key(prompt)
        reply = self.cache.get(cache_key)

        if reply is not None:
            logger.info("Using cached response for order %s", order.id)
        else:
            reply = await self._model.complete(prompt, menu_sampling())
            self.cache.put(cache_key, reply)

        # The model call succeeded or was served from cache; commit the turn.
        session.append(Role.USER, message)
        session.append(Role.ASSISTANT, reply)
        self._tracker.record(session.interactions, order.id, message)
        await self._audit(session, Role.ASSISTANT, reply)

        await self._update_task_flags(session, order.id, reply)
        all_done = session.task_flags.all_completed()
        if all_done:
            await self._audit(session, Role.SYSTEM, "All tasks completed, prompt for questionnaire")

        options = self._tracker.annotate(extract_options(reply), session.interactions_for(order.id))
        return TurnResult(reply=reply, options=options, tasks_completed=all_done)

    async def _update_task_flags(self, session: SessionData, order_id: str, reply: str) -> None:
        if self._detector.detect(order_id, reply):
            signature = self._detector.get_signature(order_id)
            if session.task_flags.mark(signature.flag):
                await self._audit(session, Role.SYSTEM, signature.message)
        await self._audit(session, Role.SYSTEM, f"Task Flags: {session.task_flags.to_dict()}")

    # ------------------------------------------------------------------ #
    # Audit
    # ------------------------------------------------------------------ #

    async def _audit(
        self,
        session: SessionData,
        role: Role,
        text: str,
        session_start: bool = False,
        session_end: bool = False,
    ) -> None:
        """Write an audit record. Failures are logged and never fail the turn."""
        try:
            await self._audit_logger.append(
                session.user_id, role.value, text, session.group, session_start, session_end
            )
        except Exception:
            logger.exception("Failed to log conversation")
