"""
Prompt templates for LLM operations in campsite ingestion.

Modules:
    type_classification: Campsite type classification prompts
"""

from . import type_classification

__all__ = ["type_classification"]
