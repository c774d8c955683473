"""
Identifier helpers.
"""

import uuid


def generate_request_id() -> str:
    """Generate a short opaque request id."""
    return f"req_{uuid.uuid4().hex[:16]}"
