# src/lead_takip/errors.py
from __future__ import annotations


class LeadTakipError(Exception):
    """Base class for all domain errors of the app."""


class UnsupportedFileError(LeadTakipError, ValueError):
    """Upload has a file type the importer cannot read."""


class LeadValidationError(LeadTakipError, ValueError):
    """Lead, sales rep or setting payload failed validation."""


class LLMServiceError(LeadTakipError, RuntimeError):
    """Ollama unreachable or returned something unusable."""


class UnsafeQueryError(LeadTakipError, ValueError):
    """Generated SQL is not a single read-only statement."""
