MAX_PROMPT_CHARS = 1000

PROMPT_TYPES = ("insight", "prayer")

_TEMPLATES = {
    "prayer": (
        "Write a short, heartfelt, 1-2 sentence prayer based on the following. "
        "The prayer should help the user apply this verse to their daily life. "
        'Start with "Lord" or "Heavenly Father". Context: {context}'
    ),
    "insight": (
        "Provide a brief, 2-sentence theological insight or practical application for the following. "
        "Keep it encouraging and simple for a general Christian audience. Context: {context}"
    ),
}


def normalize_prompt_type(kind: str | None) -> str:
    return "prayer" if (kind or "").strip().lower() == "prayer" else "insight"


def sanitize_prompt(prompt: str) -> str:
    return prompt[:MAX_PROMPT_CHARS]


def build_prompt(prompt: str, kind: str | None = None) -> str:
    return _TEMPLATES[normalize_prompt_type(kind)].format(context=sanitize_prompt(prompt))
