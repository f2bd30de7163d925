"""Read-only reports over the persisted ladder."""

from .standings import standings_delta
from .weekly import weekly_summary

__all__ = ["standings_delta", "weekly_summary"]
