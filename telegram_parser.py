"""
Transaction extraction from Telegram chat exports (plain text or JSON).
"""
import re
import logging
from typing import Dict, List, Optional

from categorizer import TransactionCategorizer, TELEGRAM
from extractor import FieldExtractor
from schema import TransactionRecord
from segmenter import MessageSegmenter

logger = logging.getLogger(__name__)


class TelegramParser:
    """Line-oriented parser that carries the most recent timestamp forward."""

    DATE_TIME = re.compile(r'(\d{1,2}/\d{1,2}/\d{4}|\d{4}-\d{1,2}-\d{1,2}).+?(\d{1,2}):(\d{2})')
    KEYWORDS = re.compile(r'amount|ksh|usd|transfer|sent|received|paid|cash', re.IGNORECASE)
    USER_NAME = re.compile(r'(?:From|User|@)?\s*([A-Za-z][A-Za-z\s]*?)(?:\s*[\d:]+|$)')

    DEFAULT_REFERENCE = 'TG'
    DEFAULT_USER = 'Telegram User'

    def __init__(self):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.segmenter = MessageSegmenter()
        self.extractor = FieldExtractor()
        self.categorizer = TransactionCategorizer(TELEGRAM)

    def parse(self, text: str) -> List[TransactionRecord]:
        """
        Extract transactions from a Telegram export.

        A line produces a record only when it carries transaction keywords, an
        amount, and a date has been seen on that line or an earlier one.

        Args:
            text: Raw export, either the text format or Telegram Desktop JSON

        Returns:
            Records in export order
        """
        lines = self.segmenter.telegram_lines(text)
        full_text = '\n'.join(lines)

        records = []
        current_date_raw = ''
        current_date = ''
        users: Dict[str, str] = {}

        for line in lines:
            if not line.strip() or line.startswith('Telegram export') or line.startswith('='):
                continue

            date_match = self.DATE_TIME.search(line)
            if date_match:
                current_date_raw = date_match.group(0)
                current_date = self._normalize(*date_match.groups())

            if not self.KEYWORDS.search(line):
                continue

            amount = self.extractor.extract_amount(line, order=FieldExtractor.CURRENCY_FIRST)
            if amount is None or not current_date:
                continue

            if current_date_raw not in users:
                users[current_date_raw] = self._find_user(full_text, current_date_raw) or self.DEFAULT_USER
            paid_by = users[current_date_raw]
            _, paid_to = self.extractor.extract_entities(line, paid_by)

            records.append(TransactionRecord(
                date=current_date,
                amount=amount,
                type=self.categorizer.classify(line),
                reference=self.extractor.extract_code(line) or self.DEFAULT_REFERENCE,
                paid_by=paid_by,
                paid_to=paid_to,
                purpose=line.strip(),
            ))

        self.logger.info(f"Extracted {len(records)} transactions from {len(lines)} lines")
        return records

    def _normalize(self, date_str: str, hour: str, minute: str) -> str:
        """D/M/YYYY or YYYY-M-D plus H:MM to YYYY-MM-DD HH:MM."""
        if '/' in date_str:
            day, month, year = date_str.split('/')
        else:
            year, month, day = date_str.split('-')
        return f"{year}-{month.zfill(2)}-{day.zfill(2)} {hour.zfill(2)}:{minute}"

    def _find_user(self, text: str, date_raw: str) -> Optional[str]:
        """Loose name capture from the first line that carries the given timestamp."""
        for line in text.split('\n'):
            if date_raw not in line:
                continue
            match = self.USER_NAME.search(line)
            if match and match.group(1).strip():
                return match.group(1).strip()
        return None
