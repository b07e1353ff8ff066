"""
Collector Type Resolution

Maps caller-facing provider keys ("chatgpt", "google_aio", ...) to the raw
labels stored in `collector_type`. A provider may have been recorded
under several historical names; all of them are returned.
"""
from typing import Dict, Iterable, List, Optional


DEFAULT_COLLECTOR_LABELS: Dict[str, List[str]] = {
    "chatgpt": ["ChatGPT"],
    "perplexity": ["Perplexity"],
    "claude": ["Claude"],
    "google_aio": ["Google AIO", "Google SGE"],
    "google_ai_mode": ["Google AI Mode"],
    "copilot": ["Bing Copilot", "Copilot"],
    "bing_copilot": ["Bing Copilot", "Copilot"],
    "meta": ["Meta AI", "Llama"],
    "gemini": ["Gemini"],
    "grok": ["Grok"],
    "deepseek": ["DeepSeek"],
    "mistral": ["Mistral"],
}


class CollectorTypeResolver:
    """
    Pure lookup from provider key to stored labels.

    Unknown keys resolve fail-open to the trimmed key itself, so an
    unrecognized filter still behaves as an exact match.

    Usage:
        resolver = CollectorTypeResolver()
        resolver.resolve(" Google_AIO ")   # ["Google AIO", "Google SGE"]
        resolver.resolve("Brave")          # ["Brave"]
    """

    def __init__(self, labels: Optional[Dict[str, List[str]]] = None):
        source = labels if labels is not None else DEFAULT_COLLECTOR_LABELS
        self._labels = {key.strip().lower(): list(values) for key, values in source.items()}

    def resolve(self, key: str) -> List[str]:
        """Stored labels for one provider key, in declaration order."""
        trimmed = key.strip()
        if not trimmed:
            return []
        return list(self._labels.get(trimmed.lower(), [trimmed]))

    def resolve_many(self, keys: Optional[Iterable[str]]) -> List[str]:
        """
        Resolve several keys into one ordered, de-duplicated label list.

        Returns:
            Empty list when no keys are given (meaning: no provider filter)
        """
        resolved: Dict[str, None] = {}
        for key in keys or []:
            for label in self.resolve(key):
                resolved.setdefault(label, None)
        return list(resolved)
