"""
Console demo: chat with the order support assistant in the terminal.

Drives the real session state machine, option extraction, interaction
tracking, task detection and response cache. With --offline a canned
reply model stands in for the chat API, so no API keys are needed.

Usage:
    python console_demo.py
    python console_demo.py --offline
    python console_demo.py --offline --scenario tasks
"""

import argparse
import asyncio
import re
from typing import Optional, Sequence

from order_support.config import settings
from order_support.conversation.state_machine import SessionStateMachine
from order_support.schemas.session_schema import ChatMessage, Role
from order_support.schemas.turn_schema import TurnResult
from order_support.tools.audit_log import MemoryAuditLogger, build_audit_logger
from order_support.tools.model_client import (
    ModelCallError,
    ModelClient,
    OpenAIModelClient,
    SamplingParams,
)

BLUE = "\033[94m"
GREEN = "\033[92m"
YELLOW = "\033[93m"
RED = "\033[91m"
DIM = "\033[2m"
RESET = "\033[0m"
BOLD = "\033[1m"

MENU_OPTIONS = "Options: Track, Modify, Cancel, Return, Back to Order Selection"
_SELECTED_ORDER = re.compile(r"You've selected Order ([A-Z])")
_ADDRESS = re.compile(r"\b[^\W\d_]+\s+\d+[a-zA-Z]?\s*,?\s*\d+\s+[^\W\d_]+\b")


class OfflineModelClient:
    """Canned replies keyed on the selected order and the last user message."""

    INTRO = (
        "Welcome! I'm your virtual assistant, here to help you with your recent orders. "
        "I can track orders, modify or cancel them and handle returns. You can use the "
        "option buttons or simply type. Go ahead, try it."
    )

    TRACK = {
        "A": "Order A is currently in transit and is expected to arrive on September 16th, 2024.",
        "B": "Order B is still processing; it should arrive around September 20th, 2024.",
        "C": "Order C was delivered on July 20th, 2024.",
    }

    async def complete(self, messages: Sequence[ChatMessage], params: SamplingParams) -> str:
        last = messages[-1].content
        if last == "Start":
            return self.INTRO
        order_id = self._selected_order(messages) or "A"
        lower = last.lower()

        if "track" in lower:
            return f"{self.TRACK[order_id]} What would you like to do next? {MENU_OPTIONS}"
        if _ADDRESS.search(last):
            return (
                f"Done! The delivery address for Order {order_id} has been updated to {last}. "
                f"Is there anything else you'd like to do? {MENU_OPTIONS}"
            )
        if "modify" in lower:
            return (
                f"Sure, please type the new delivery address for Order {order_id}. "
                "Options: Modify Delivery Address, Add Gift Message, "
                "Back to Order Operations, Back to Order Selection"
            )
        if "return" in lower and order_id == "C":
            return (
                "It seems there was an issue generating the return label for this order due to "
                "a temporary system error from our external shipment provider. Would you like to "
                "resolve this with a human representative? Options: Contact Human Representative, "
                "Back to Order Operations, Back to Order Selection"
            )
        if "cancel" in lower:
            return f"Order {order_id} can no longer be cancelled. How can I assist you further? {MENU_OPTIONS}"
        return f"Happy to help with Order {order_id}. What would you like to do next? {MENU_OPTIONS}"

    @staticmethod
    def _selected_order(messages: Sequence[ChatMessage]) -> Optional[str]:
        for message in reversed(messages):
            if message.role == Role.ASSISTANT:
                match = _SELECTED_ORDER.search(message.content)
                if match:
                    return match.group(1)
        return None


class ConsoleSession:
    """Runs one participant's conversation in the terminal."""

    USER_ID = "console"
    MAX_INPUT_LENGTH = 500

    SCENARIOS: dict[str, list[str]] = {
        "tasks": [
            "Understood",
            "abcdef",
            "my number is 123-456-7890",
            "Order A",
            "Track",
            "Back to Order Selection",
            "Order B",
            "Modify",
            "Musterstrasse 123, 12345 Berlin",
            "Back to Order Selection",
            "order c",
            "Return",
        ],
    }

    def __init__(self, model_client: ModelClient, audit_logger=None) -> None:
        self.audit = audit_logger or MemoryAuditLogger()
        self.machine = SessionStateMachine(model_client=model_client, audit_logger=self.audit)

    def agent_say(self, result: TurnResult) -> None:
        print(f"{GREEN}{BOLD}[Assistant]{RESET} {GREEN}{result.reply}{RESET}")
        if result.options:
            print(f"{YELLOW}  [{' | '.join(result.options)}]{RESET}")

    def system_log(self, text: str) -> None:
        print(f"{DIM}  >> {text}{RESET}")

    async def send(self, text: str) -> Optional[TurnResult]:
        try:
            result = await self.machine.handle_turn(self.USER_ID, text)
        except ModelCallError as exc:
            print(f"{RED}Model call failed, please retry: {exc}{RESET}")
            return None
        self.agent_say(result)
        session = self.machine.get_session(self.USER_ID)
        self.system_log(f"Phase: {session.phase.value}  Tasks: {session.task_flags.to_dict()}")
        if result.tasks_completed:
            self.system_log("All tasks completed")
        return result

    async def run_scenario(self, scenario: str) -> None:
        steps = self.SCENARIOS.get(scenario)
        if not steps:
            print(f"{RED}Unknown scenario: {scenario}{RESET}")
            return

        self._banner(f"Scenario: {scenario}")
        await self.send("")
        for step in steps:
            print(f"\n{BLUE}[User] {RESET}{step}")
            await self.send(step)
        await self._finish()

    async def run(self) -> None:
        self._banner("Type 'quit' to exit")
        await self.send("")
        loop = asyncio.get_running_loop()
        while True:
            user_input = (await loop.run_in_executor(None, input, f"\n{BLUE}[User] {RESET}")).strip()
            if not user_input:
                continue
            if user_input.lower() in ("quit", "exit", "q"):
                break
            if len(user_input) > self.MAX_INPUT_LENGTH:
                print(f"{RED}Please keep messages under {self.MAX_INPUT_LENGTH} characters.{RESET}")
                continue
            await self.send(user_input)
        await self._finish()

    async def _finish(self) -> None:
        result = await self.machine.end_session(self.USER_ID)
        print(f"\n{BOLD}{'=' * 60}{RESET}")
        print(f"{DIM}{result.summary.strip()}{RESET}")
        print(f"{DIM}  Cached replies: {len(self.machine.cache)}{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")

    def _banner(self, subtitle: str) -> None:
        print()
        print(f"{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  ORDER SUPPORT ASSISTANT - Console Demo{RESET}")
        print(f"{BOLD}  Model: {settings.model.llm_model}  Customer: {settings.script.customer_name}{RESET}")
        print(f"{BOLD}  {subtitle}{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Order support assistant console demo")
    parser.add_argument("--offline", action="store_true", help="use canned replies instead of the chat API")
    parser.add_argument("--scenario", choices=sorted(ConsoleSession.SCENARIOS), help="auto-play a scenario")
    args = parser.parse_args(argv)

    if args.offline:
        session = ConsoleSession(OfflineModelClient())
    else:
        session = ConsoleSession(OpenAIModelClient(settings.model), build_audit_logger(settings.audit))

    if args.scenario:
        asyncio.run(session.run_scenario(args.scenario))
    else:
        asyncio.run(session.run())


if __name__ == "__main__":
    main()
