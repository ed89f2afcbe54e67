"""Shared normalization helpers for identity lookup keys."""

from __future__ import annotations


def normalize_identity_email(*, email: str) -> str:
    """Normalize one lookup email; blank input normalizes to an empty string."""

    return email.strip().lower()
