"""Payroll provider detection by keyword."""

import logging

from .patterns import GENERIC_PROVIDER

logger = logging.getLogger(__name__)

# Order matters: the first provider with any keyword hit wins.
PROVIDER_INDICATORS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("ADP", ("adp", "automatic data processing", "adp.com", "adp workforce")),
    ("Paychex", ("paychex", "paychex.com", "paychex flex")),
    ("Workday", ("workday", "workday.com", "powered by workday")),
    ("Gusto", ("gusto", "gusto.com", "gustohq")),
    ("Paylocity", ("paylocity", "paylocity.com")),
    ("Paycor", ("paycor", "paycor.com")),
)


class ProviderClassifier:
    """Detects the payroll vendor that generated a document.

    Detection is a plain substring search over the lower-cased text, so a
    document that mentions two vendors resolves to whichever appears first in
    the indicator table.
    """

    def __init__(
        self,
        indicators: tuple[tuple[str, tuple[str, ...]], ...] = PROVIDER_INDICATORS,
    ):
        self.indicators = indicators

    def detect(self, text: str) -> str:
        """Return the provider name for the text, or "Generic"."""
        text_lower = text.lower()
        for provider, keywords in self.indicators:
            for keyword in keywords:
                if keyword in text_lower:
                    logger.debug(f"🔍 Detected provider {provider} via '{keyword}'")
                    return provider
        return GENERIC_PROVIDER
