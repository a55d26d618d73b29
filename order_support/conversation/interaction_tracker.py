"""Per-order option history and the cosmetic "Previously Selected" marker."""

import logging

from order_support.prompts.prompt_templates import BACK_TO_ORDER_OPERATIONS, BACK_TO_ORDER_SELECTION
from order_support.tools.orders import order_option_labels

logger = logging.getLogger(__name__)

PREVIOUSLY_SELECTED_SUFFIX = " (Previously Selected)"


class InteractionTracker:
    """
    Records which options a session invoked for each order and annotates
    extracted options accordingly.

    Annotation never removes or disables an option. Order-selection and
    navigation labels are never annotated.
    """

    def __init__(self) -> None:
        self.exempt_labels: frozenset[str] = frozenset(
            [*order_option_labels(), BACK_TO_ORDER_OPERATIONS, BACK_TO_ORDER_SELECTION]
        )

    def record(self, interactions: dict[str, list[str]], order_id: str, label: str) -> bool:
        """Remember ``label`` for ``order_id``. Returns False if already known."""
        used = interactions.setdefault(order_id, [])
        if label in used:
            return False
        used.append(label)
        logger.debug("Order %s interaction recorded: %r", order_id, label)
        return True

    def annotate(self, options: list[str], interactions_for_order: list[str]) -> list[str]:
        """Suffix options the user already picked for this order."""
        used = set(interactions_for_order)
        return [self._annotate_one(option, used) for option in options]

    def _annotate_one(self, option: str, used: set[str]) -> str:
        if (
            option in used
            and option not in self.exempt_labels
            and PREVIOUSLY_SELECTED_SUFFIX.strip() not in option
        ):
            return option + PREVIOUSLY_SELECTED_SUFFIX
        return option
