"""
Exceptions raised by the quotation engine.
"""

from typing import Sequence


class QuoteEngineError(Exception):
    """Base exception for quotation engine errors"""
    pass


class InvalidConfigurationError(QuoteEngineError):
    pass


class MatrixError(QuoteEngineError):
    pass


class ReconciliationError(QuoteEngineError):
    pass


class ConversionRateRequiredError(ReconciliationError):
    """Raised when foreign-currency pricing is applied without a confirmed rate."""

    def __init__(self, currency: str, home_currency: str):
        self.currency = currency
        self.home_currency = home_currency
        super().__init__(
            f"Pricing is in {currency}; a conversion rate to {home_currency} must be confirmed"
        )


class ClarificationPendingError(ReconciliationError):
    """Raised when pricing that still carries questions is applied."""

    def __init__(self, questions: Sequence[str]):
        self.questions = tuple(questions)
        super().__init__(f"Vendor pricing has {len(self.questions)} unanswered question(s)")


class ProcessingFailedError(QuoteEngineError):
    """The upstream extraction call failed; nothing was changed."""
    pass
