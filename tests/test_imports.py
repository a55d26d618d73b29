"""Tests for import chains and module integrity.

Ensures all public modules can be imported without errors and
that re-exports from __init__.py files work correctly.
"""


class TestSchemaImports:
    def test_import_session_schema(self):
        from order_support.schemas.session_schema import ChatMessage, Role, SessionData, SessionPhase
        session = SessionData(user_id="u1")
        assert session.phase == SessionPhase.AWAITING_INTRO_ACK
        assert Role.ASSISTANT == "assistant"
        assert ChatMessage(role=Role.USER, content="hi").to_dict() == {"role": "user", "content": "hi"}

    def test_import_order_schema(self):
        from order_support.schemas.order_schema import Order, OrderStatus
        assert OrderStatus.DELIVERED == "Delivered"
        assert Order is not None

    def test_import_turn_schema(self):
        from order_support.schemas.turn_schema import TurnResult
        result = TurnResult(reply="hi")
        assert result.model_dump(by_alias=True)["showProgressBar"] is False


class TestConversationImports:
    def test_import_conversation_package(self):
        from order_support.conversation import (
            InMemorySessionStore,
            InteractionTracker,
            ResponseCache,
            SessionStateMachine,
            TaskCompletionDetector,
            extract_options,
        )
        assert len(TaskCompletionDetector.SIGNATURES) == 3
        assert len(ResponseCache()) == 0
        assert len(InMemorySessionStore()) == 0
        assert extract_options("Options: A, B") == ["A", "B"]
        assert InteractionTracker is not None
        assert SessionStateMachine is not None

    def test_state_machine_rules_cover_every_phase(self):
        from order_support.conversation.state_machine import SessionStateMachine
        from order_support.schemas.session_schema import SessionPhase
        covered = {rule.phase for rule in SessionStateMachine.RULES}
        assert covered == set(SessionPhase)


class TestToolImports:
    def test_import_orders(self):
        from order_support.tools.orders import ORDER_CATALOG, match_order
        assert len(ORDER_CATALOG) == 3
        assert callable(match_order)

    def test_import_model_client(self):
        from order_support.tools.model_client import ModelCallError, OpenAIModelClient
        assert issubclass(ModelCallError, Exception)
        assert OpenAIModelClient is not None

    def test_import_audit_log(self):
        from order_support.tools.audit_log import build_audit_logger
        assert callable(build_audit_logger)


class TestPromptImports:
    def test_import_system_prompts(self):
        from order_support.prompts.system_prompts import ASSISTANT_SYSTEM_PROMPT, INTRO_TRIGGER
        assert "Order A" in ASSISTANT_SYSTEM_PROMPT
        assert INTRO_TRIGGER == "Start"

    def test_import_prompt_templates(self):
        from order_support.prompts.prompt_templates import OPERATION_OPTIONS, build_session_summary
        assert OPERATION_OPTIONS[-1] == "Back to Order Selection"
        assert "SESSION COMPLETED" in build_session_summary("1 minutes and 0 seconds")


class TestConfigImport:
    def test_import_config(self):
        from order_support.config import settings
        assert settings.model.llm_model
        assert settings.script.customer_name
        assert settings.server.port >= 1


class TestEntryPoints:
    def test_api_package(self):
        from order_support.api import create_app
        assert callable(create_app)

    def test_console_session_imports(self):
        from console_demo import ConsoleSession, OfflineModelClient
        session = ConsoleSession(OfflineModelClient())
        assert len(session.machine.store) == 0
        assert "tasks" in ConsoleSession.SCENARIOS
