import os
import uuid


def new_id() -> str:
    """Random 128-bit identifier in canonical hyphenated form (36 chars)."""
    return str(uuid.uuid4())


def is_identifier(value: str) -> bool:
    """True only for canonical lower-case UUID strings."""
    if not value or len(value) != 36:
        return False
    try:
        return str(uuid.UUID(value)) == value
    except ValueError:
        return False


def stored_filename(original_name: str) -> str:
    # Original stem is discarded, only the extension survives
    return new_id() + os.path.splitext(original_name or "")[1]
