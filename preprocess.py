"""
Preprocessing utilities for cleaning message text and normalizing dates.
"""
import re
import logging
from datetime import datetime, timezone
from typing import Optional
from dateutil import parser

logger = logging.getLogger(__name__)

EPOCH = datetime(1970, 1, 1)


class DataPreprocessor:
    """Handles text cleanup and date normalization shared by the source parsers."""

    # Zero-width and bidi formatting characters found in chat exports
    FORMATTING_CHARS = re.compile('[\u200b\u200e\u200f\ufeff]')

    # WhatsApp exports spell out the period of day in some locales
    COLLOQUIAL_TIME_MARKERS = [
        (re.compile(r'in the morning', re.IGNORECASE), 'AM'),
        (re.compile(r'in the afternoon', re.IGNORECASE), 'PM'),
        (re.compile(r'in the evening', re.IGNORECASE), 'PM'),
        (re.compile(r'at night', re.IGNORECASE), 'PM'),
    ]

    TIME_FORMATS = ['%I:%M %p', '%H:%M', '%I:%M%p']

    def __init__(self):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.time_pattern = re.compile(r'\d{1,2}:\d{2}')
        self.year_first = re.compile(r'\s*\d{4}[-/.]')

    def clean_message(self, text: str) -> str:
        """Strip formatting characters and collapse runs of whitespace."""
        if not text:
            return ""
        text = self.FORMATTING_CHARS.sub('', text)
        return re.sub(r'\s+', ' ', text).strip()

    def format_chat_datetime(self, date_str: str, time_str: str) -> str:
        """
        Normalize a WhatsApp header date and time to YYYY-MM-DD HH:MM.

        Args:
            date_str: Day-first date, e.g. 12/5/2024 or 12/5/24
            time_str: Time with optional AM/PM or colloquial markers

        Returns:
            Normalized timestamp, or the cleaned source text when not derivable
        """
        clean_time = time_str
        for pattern, marker in self.COLLOQUIAL_TIME_MARKERS:
            clean_time = pattern.sub(marker, clean_time)
        clean_time = re.sub(r'[\s-]+', ' ', clean_time).strip()
        clean_time = self._to_24_hour(clean_time)

        parts = re.split(r'[/-]', date_str.strip())
        if len(parts) != 3:
            return f"{date_str} {clean_time}".strip()

        day, month, year = parts
        if len(year) == 2:
            year = f"20{year}"
        return f"{year}-{month.zfill(2)}-{day.zfill(2)} {clean_time}".strip()

    def _to_24_hour(self, time_str: str) -> str:
        """Convert a clock time to HH:MM; leave anything unrecognized as is."""
        candidate = time_str.replace('.', '').upper()
        for fmt in self.TIME_FORMATS:
            try:
                return datetime.strptime(candidate, fmt).strftime('%H:%M')
            except ValueError:
                continue
        return time_str

    def normalize_date(self, date_str: str, dayfirst: bool = True) -> Optional[str]:
        """
        Normalize a free-form date to YYYY-MM-DD, or YYYY-MM-DD HH:MM when a time is present.

        Args:
            date_str: Date string in any format dateutil understands
            dayfirst: Interpret ambiguous numeric dates as day/month

        Returns:
            Normalized string, or None when the value cannot be parsed
        """
        if not date_str or not date_str.strip():
            return None

        # dateutil reads year-first strings as Y-D-M when dayfirst is set
        if self.year_first.match(date_str):
            dayfirst = False

        try:
            parsed = parser.parse(date_str, dayfirst=dayfirst)
        except (ValueError, OverflowError):
            self.logger.debug(f"Could not normalize date: {date_str}")
            return None

        if self.time_pattern.search(date_str):
            return parsed.strftime('%Y-%m-%d %H:%M')
        return parsed.strftime('%Y-%m-%d')

    def sort_key(self, date_value) -> datetime:
        """Best-effort datetime for ordering records; unparseable values sort as the epoch."""
        text = str(date_value or '').strip()
        if not text:
            return EPOCH
        try:
            parsed = parser.parse(text, dayfirst=not self.year_first.match(text))
        except (ValueError, OverflowError):
            return EPOCH
        if parsed.tzinfo is not None:
            parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
        return parsed

    def printable_ascii(self, data: bytes) -> str:
        """Keep printable ASCII plus CR/LF; a crude text view of a binary document."""
        return data.translate(None, _NON_PRINTABLE).decode('ascii')

    def decode_text(self, data: bytes) -> str:
        """Decode uploaded text, tolerating a BOM and invalid sequences."""
        return data.decode('utf-8-sig', errors='replace')


_NON_PRINTABLE = bytes(b for b in range(256) if not (32 <= b <= 126 or b in (10, 13)))
