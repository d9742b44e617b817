"""Shared helpers for rulewrite."""

from rulewrite.utils.logger import get_logger

__all__ = ["get_logger"]
