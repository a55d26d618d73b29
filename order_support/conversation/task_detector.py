"""
Detection of the three hidden experimental tasks.

Each order has exactly one text signature. A signature is a set of
phrase groups that must all appear somewhere in the model reply, in any
order, case-insensitively. This is a best-effort heuristic over free-form
model output, not a verified contract.
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TaskSignature:
    """Completion rule for one order's hidden task."""

    order_id: str
    flag: str
    message: str
    phrase_groups: tuple[str, ...]

    def matches(self, reply: str) -> bool:
        return all(
            re.search(group, reply, re.IGNORECASE | re.DOTALL) for group in self.phrase_groups
        )


class TaskCompletionDetector:
    """Evaluates the current order's task signature against a reply."""

    SIGNATURES: list[TaskSignature] = [
        TaskSignature(
            order_id="A",
            flag="track_order_a",
            message="Track Order A Completed",
            phrase_groups=(r"in transit", r"expected|estimated|should arrive"),
        ),
        TaskSignature(
            order_id="B",
            flag="modify_order_b",
            message="Modify Order B Completed",
            phrase_groups=(r"updated|modified", r"delivery\s*address"),
        ),
        TaskSignature(
            order_id="C",
            flag="return_order_c",
            message="Return Order C Completed",
            phrase_groups=(r"system error", r"return label", r"generating"),
        ),
    ]

    def get_signature(self, order_id: str) -> Optional[TaskSignature]:
        for signature in self.SIGNATURES:
            if signature.order_id == order_id:
                return signature
        return None

    def detect(self, order_id: str, reply: str) -> bool:
        """Return True if the reply completes ``order_id``'s task."""
        signature = self.get_signature(order_id)
        if signature is None:
            return False
        matched = signature.matches(reply)
        if matched:
            logger.info("Task signature matched: %s", signature.message)
        return matched
