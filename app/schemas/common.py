from typing import Any


def envelope(data: Any = None, message: str = "") -> dict:
    """Wrap a payload in the ``{success, message, data}`` shape every endpoint returns."""
    return {
        "success": True,
        "message": message,
        "data": {} if data is None else data,
    }
