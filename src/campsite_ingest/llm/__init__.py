"""LLM integration for campsite type classification."""

__all__ = ["prompts"]
