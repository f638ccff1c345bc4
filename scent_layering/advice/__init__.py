"""Text-generation layering advice."""

from .service import AdviceResult, LayeringAdvisor, PairingSuggestion, fallback_advice

__all__ = ["AdviceResult", "LayeringAdvisor", "PairingSuggestion", "fallback_advice"]
