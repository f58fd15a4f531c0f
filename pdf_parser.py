"""
Transaction extraction from PDF statements read as raw bytes.

No document structure is parsed: the byte stream is reduced to printable ASCII and
scanned line by line for a date next to an amount.
"""
import re
import logging
from typing import List, Optional

from extractor import FieldExtractor
from preprocess import DataPreprocessor
from schema import TransactionRecord
from segmenter import MessageSegmenter

logger = logging.getLogger(__name__)


class PdfParser:
    """Statement-line heuristics over byte-scraped PDF text."""

    DATE = re.compile(r'\b(\d{1,2}/\d{1,2}/\d{4}|\d{1,2}-\d{1,2}-\d{4})\b')
    AMOUNT = re.compile(r'\b(\d{1,3}(?:,?\d{3})*(?:\.\d{2})?)\b')

    TYPE = 'Bank Statement'
    PAID_BY = 'Bank'
    DEFAULT_REFERENCE = 'PDF'
    DEFAULT_PURPOSE = 'Bank Transaction'

    def __init__(self):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.preprocessor = DataPreprocessor()
        self.segmenter = MessageSegmenter(self.preprocessor)
        self.extractor = FieldExtractor()

    def parse(self, data: bytes) -> List[TransactionRecord]:
        """
        Extract statement lines from PDF bytes.

        Args:
            data: Raw file content

        Returns:
            One record per line holding both a date and a positive amount
        """
        text = self.preprocessor.printable_ascii(data)
        lines = self.segmenter.pdf_lines(text)

        records = []
        for line in lines:
            record = self._extract_from_line(line.strip())
            if record:
                records.append(record)

        self.logger.info(f"Extracted {len(records)} transactions from {len(lines)} PDF lines")
        return records

    def _extract_from_line(self, line: str) -> Optional[TransactionRecord]:
        if not line:
            return None

        date_match = self.DATE.search(line)
        if not date_match:
            return None

        # Blank out the date so its digits are not read as amounts
        start, end = date_match.span()
        masked = line[:start] + ' ' * (end - start) + line[end:]

        amount_matches = list(self.AMOUNT.finditer(masked))
        if not amount_matches:
            return None

        # The trailing figure is usually the transaction total rather than a balance
        last = amount_matches[-1]
        amount = self.extractor.parse_number(last.group(1))
        if not amount or amount <= 0:
            return None

        description = masked[:last.start()] + masked[last.end():]
        description = re.sub(r'\s+', ' ', description).strip()

        date_str = date_match.group(1)
        return TransactionRecord(
            date=self.preprocessor.normalize_date(date_str) or date_str,
            amount=amount,
            type=self.TYPE,
            reference=self.extractor.extract_code(line) or self.DEFAULT_REFERENCE,
            paid_by=self.PAID_BY,
            paid_to='',
            purpose=description or self.DEFAULT_PURPOSE,
        )
