"""Entity identifiers."""

import uuid


def new_id() -> uuid.UUID:
    """Return a fresh random identifier."""
    return uuid.uuid4()


def parse_id(text: str) -> uuid.UUID:
    """Parse ``text`` as an identifier; raise ``ValueError`` if it is not one."""
    try:
        return uuid.UUID(text)
    except (TypeError, AttributeError, ValueError) as exc:
        raise ValueError(f"invalid UUID: {text!r}") from exc