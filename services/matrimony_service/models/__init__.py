"""Matrimony Service models package."""

from services.matrimony_service.models.profile import MatrimonyProfile  # noqa: F401

__all__ = ["MatrimonyProfile"]
