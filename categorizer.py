"""
Keyword-based transaction type classification, scoped per message source.
"""
import re
import logging
from typing import List, NamedTuple, Pattern, Tuple

logger = logging.getLogger(__name__)


class ClassifierProfile(NamedTuple):
    """Ordered keyword groups for one source and the label used when none match."""
    name: str
    groups: List[Tuple[str, Pattern]]
    fallback: str


def _group(label: str, pattern: str) -> Tuple[str, Pattern]:
    return label, re.compile(pattern, re.IGNORECASE)


MPESA = _group('M-PESA', r'M-PESA|MPESA')
REMITTANCE = _group('Remittance', r'worldremit|remitly|wise|xoom|money ?gram')
GENERIC_BANK = _group('Bank Transfer', r'bank|transfer|deposit|swift|wire')

# Chat messages name the Kenyan banks rather than the transfer rails
WHATSAPP = ClassifierProfile(
    name='whatsapp',
    groups=[
        MPESA,
        _group('Bank Transfer', r'Equity|KCB|Co-op|Bank|I&M'),
        _group('Remittance', r'WorldRemit|Remitly|Wise'),
        _group('Cash', r'\bcash\b|hand|given'),
    ],
    fallback='Other',
)

GENERIC = ClassifierProfile(
    name='generic',
    groups=[
        MPESA,
        GENERIC_BANK,
        REMITTANCE,
        _group('Card Transaction', r'card|credit'),
        _group('Cheque', r'cheque'),
    ],
    fallback='Other',
)

# Used where the type is guessed from a subject line alone
INFERENCE = GENERIC._replace(name='inference', fallback='Transaction')

TELEGRAM = ClassifierProfile(
    name='telegram',
    groups=[
        MPESA,
        GENERIC_BANK,
        REMITTANCE,
        _group('Cash', r'\bcash\b'),
        _group('Sent', r'\bsent\b'),
        _group('Received', r'\breceived\b'),
    ],
    fallback='Other',
)

CUSTOM = ClassifierProfile(name='custom', groups=[], fallback='Custom')


class TransactionCategorizer:
    """Maps keyword presence to a single transaction type."""

    def __init__(self, profile: ClassifierProfile = GENERIC):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.profile = profile

    def classify(self, text: str) -> str:
        """
        Return the first matching category for the text.

        Args:
            text: Message, line or subject to classify

        Returns:
            Category label, or the profile's fallback label
        """
        if text:
            for label, pattern in self.profile.groups:
                if pattern.search(text):
                    return label

        self.logger.debug(f"No {self.profile.name} keywords matched, using {self.profile.fallback}")
        return self.profile.fallback
