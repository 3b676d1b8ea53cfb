"""Opaque record identifiers."""

import uuid


def make_id(prefix: str = "") -> str:
    """Random UUID4 string, optionally prefixed (e.g. ``n_``, ``local_case_``)."""
    return f"{prefix}{uuid.uuid4()}"
