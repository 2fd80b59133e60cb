"""
Time-ordered identifier generation (UUID version 7)
"""
from uuid6 import uuid7


def generate_id() -> str:
    """Generate a UUIDv7 string; ids from one process sort in creation order"""
    return str(uuid7())
