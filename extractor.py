"""
Field extraction primitives shared by the source parsers: amounts, reference codes,
payer/payee names and purpose text.
"""
import re
import math
import logging
from typing import Iterable, Optional, Tuple

logger = logging.getLogger(__name__)

CURRENCIES = r'Ksh|KES|USD|GBP|EUR|UGX|TZS'
NUMBER = r'\d{1,3}(?:,\d{3})+(?:\.\d+)?|\d+(?:\.\d+)?'

# A spelled-out amount between a verb and its direction word, e.g. "Sent Ksh 2,000 to"
AMOUNT_PHRASE = rf'(?:(?:{CURRENCIES})\.?\s*)?\d[\d,]*(?:\.\d+)?\s*(?:[kK]\b|/-|Ksh\b|KES\b)?\s*'

# Honorifics and initials keep their period as part of the name
NAME_PREFIX = r'(?:(?:Mrs|Mr|Ms|Dr|Prof|Eng|Rev)\.\s*|[A-Z]\.\s*)*'

# Names stop before commas, sentence periods, digits, "on <date>", "for <purpose>" or the end
NAME_END = r'(?=\s*[,.]|\s+\d|\s+(?:on|for)\b|\s*$)'


def _anchor(verb: str, direction: str) -> re.Pattern:
    return re.compile(
        rf'\b{verb}\s+(?:{AMOUNT_PHRASE})?{direction}\s+({NAME_PREFIX}[A-Za-z\s]+?){NAME_END}',
        re.IGNORECASE,
    )


class FieldExtractor:
    """Extracts individual transaction fields from a cleaned text fragment."""

    DEFAULT_ORDER = ('shorthand', 'prefix', 'suffix')
    CURRENCY_FIRST = ('prefix', 'suffix', 'shorthand')

    MANUAL_REFERENCE = 'MANUAL'
    PURPOSE_FALLBACK = 'General / See Reference'
    MAX_NOTE_LENGTH = 150

    def __init__(self):
        self.logger = logging.getLogger(self.__class__.__name__)

        self.amount_patterns = {
            # "90k", "10.5K"; never inside a token such as "AB20K9"
            'shorthand': re.compile(r'(?:\b|\s|^)(\d+(?:\.\d+)?)[kK](?:\b|\s|$)'),
            'prefix': re.compile(rf'\b(?:{CURRENCIES})\.?\s*({NUMBER})', re.IGNORECASE),
            'suffix': re.compile(rf'({NUMBER})\s*(?:Ksh|KES|/-|KSH)', re.IGNORECASE),
        }
        self.amount_multipliers = {'shorthand': 1000}

        self.code_pattern = re.compile(r'\b([A-Z0-9]{8,12})\b')

        self.bill_payment_pattern = re.compile(
            r'(?:Bill payment to|sent to|paid to)\s*([A-Z0-9\s&]+?(?:LIMITED|STORE|BANK|ACCOUNT)?)'
            r'\s*(?:for account|account number|for acc\b\.?)\s*([A-Z0-9]+)',
            re.IGNORECASE,
        )
        self.paybill_number_pattern = re.compile(
            r'paid to\s*([A-Z0-9\s&]+?)\s*,\s*(\d+)\s*for account number\s*([A-Z0-9]+)',
            re.IGNORECASE,
        )

        # Applied in order; later matches overwrite earlier ones
        self.entity_anchors = [
            ('paid_to', _anchor('sent', 'to')),
            ('paid_by', _anchor('received', 'from')),
            ('paid_to', _anchor('paid', 'to')),
            ('paid_to', _anchor('given', 'to')),
        ]

        self.for_clause = re.compile(r'\bfor\s+(.+?)(?:\.(?!\d)|$)', re.IGNORECASE)
        self.transaction_hint = re.compile(r'sent to|paid to|received|Ksh|KES', re.IGNORECASE)
        self.purpose_keywords = re.compile(
            r'labour|labor|material|cement|sand|transport|fee|deposit|allowance|fuel|hives',
            re.IGNORECASE,
        )

    def parse_number(self, raw: str) -> Optional[float]:
        """Convert a number with optional thousands separators to a finite float."""
        try:
            value = float(raw.replace(',', '').strip())
        except (ValueError, AttributeError):
            return None
        return value if math.isfinite(value) else None

    def extract_amount(self, text: str, order: Iterable[str] = DEFAULT_ORDER) -> Optional[float]:
        """
        Find and normalize a monetary amount.

        Args:
            text: Cleaned text fragment
            order: Rule names to try, first positive match wins

        Returns:
            Amount as float, or None when no rule produced a positive value
        """
        if not text:
            return None

        for rule in order:
            match = self.amount_patterns[rule].search(text)
            if not match:
                continue
            value = self.parse_number(match.group(1))
            if value is None:
                continue
            value *= self.amount_multipliers.get(rule, 1)
            if 0 < value < math.inf:
                return value

        return None

    def extract_code(self, text: str) -> Optional[str]:
        """First standalone 8-12 character uppercase/digit token."""
        if not text:
            return None
        match = self.code_pattern.search(text)
        return match.group(1) if match else None

    def extract_paybill_destination(self, text: str) -> Optional[Tuple[str, str]]:
        """Return (destination, account) for paybill and bank-account payments."""
        match = self.bill_payment_pattern.search(text)
        if match:
            destination, account = match.group(1), match.group(2)
        else:
            match = self.paybill_number_pattern.search(text)
            if not match:
                return None
            destination, account = match.group(1), match.group(3)

        destination = re.sub(r'Paybill Account', '', destination, count=1, flags=re.IGNORECASE)
        destination = re.sub(r'Paybill', '', destination, count=1, flags=re.IGNORECASE)
        return self._clean_name(destination), account.strip()

    def extract_entities(self, text: str, sender: str) -> Tuple[str, str]:
        """
        Resolve payer and payee for a message.

        Args:
            text: Cleaned message content
            sender: Known author of the message

        Returns:
            (paid_by, paid_to); paid_by defaults to the sender, paid_to to ""
        """
        paybill = self.extract_paybill_destination(text)
        if paybill:
            destination, account = paybill
            return self._clean_name(sender), f"{destination} - Account No: {account}"

        found = {'paid_by': sender, 'paid_to': ''}
        for field, pattern in self.entity_anchors:
            match = pattern.search(text)
            if match:
                found[field] = match.group(1)

        return self._clean_name(found['paid_by']), self._clean_name(found['paid_to'])

    def extract_purpose(self, text: str, next_text: Optional[str] = None) -> str:
        """
        Describe what a payment was for.

        Looks for a "for <purpose>" clause first, then treats a short, non-transaction
        follow-up message as the purpose label.

        Args:
            text: Cleaned content of the transaction message
            next_text: Content of the message that follows it, if any

        Returns:
            Purpose text, or the placeholder pointing at the reference
        """
        match = self.for_clause.search(text or '')
        if match and len(match.group(1)) > 3:
            return match.group(1).strip()

        if next_text:
            note = next_text.strip()
            looks_like_transaction = bool(self.transaction_hint.search(note))
            is_short = len(note) < self.MAX_NOTE_LENGTH
            has_keywords = bool(self.purpose_keywords.search(note))
            if note and not looks_like_transaction and (is_short or has_keywords):
                return note

        return self.PURPOSE_FALLBACK

    def _clean_name(self, name: str) -> str:
        return re.sub(r'\s+', ' ', name or '').strip()
