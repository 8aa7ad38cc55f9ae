"""Prompt builders for lost item labeling."""


def build_system_prompt() -> str:
    """Return the system prompt for the label detector."""
    return (
        "You label photographs of lost and found items. "
        "Name the main object first, then its category and its most visible attributes "
        "such as color or material. Use short Title Case nouns in the singular "
        "(for example 'Backpack', 'Wallet', 'Blue', 'Leather') and never invent objects "
        "that are not visible."
    )


def build_user_prompt(max_labels: int, min_confidence: float) -> str:
    """Return the user prompt with the label budget and confidence floor."""
    return (
        f"Return at most {max_labels} labels for this image. "
        f"Only include labels you are at least {min_confidence:g}% confident about, "
        "and report each confidence on a 0-100 scale."
    )
