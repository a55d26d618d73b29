"""Canned replies and option lists for the scripted, model-free turns."""

from order_support.tools.orders import order_option_labels

ACKNOWLEDGE_OPTION = "Understood"
BACK_TO_ORDER_SELECTION = "Back to Order Selection"
BACK_TO_ORDER_OPERATIONS = "Back to Order Operations"

OPERATION_OPTIONS: list[str] = ["Track", "Modify", "Cancel", "Return", BACK_TO_ORDER_SELECTION]

INTRO_FALLBACK_REPLY = (
    "It seems we are encountering some connectivity issues. "
    "Please try again in a few minutes."
)

ASK_CUSTOMER_NUMBER_REPLY = (
    "Thanks for confirming! Whenever you're ready, please provide your "
    "customer number to proceed."
)

INVALID_CUSTOMER_NUMBER_REPLY = (
    "It seems like the customer number you entered is incorrect. You can find "
    "your customer number in the confirmation E-Mail from your last purchase "
    "with us (Button with ? icon)."
)

SELECT_ORDER_REPLY = "Please select an order to manage."

BACK_TO_SELECTION_REPLY = "Sure! Which order can I help you with?"


def order_options() -> list[str]:
    return order_option_labels()


def build_welcome_reply(customer_name: str) -> str:
    """Reply after a valid customer number."""
    return (
        f"Welcome back {customer_name}! I'm ready to assist you with your orders. "
        f"Which one would you like to manage?"
    )


def build_order_selected_reply(order_id: str) -> str:
    """Reply after the user picks an order."""
    return f"Got it! You've selected Order {order_id}. How can I assist you with this order?"


def build_session_summary(duration: str) -> str:
    """Summary record written when a participant leaves for the questionnaire."""
    return (
        "\n===== SESSION COMPLETED =====\n"
        "User proceeded to the questionnaire.\n"
        f"Total time to complete tasks: {duration}\n"
        "=============================\n"
    )
