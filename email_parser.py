"""
Transaction extraction from plain-text email notifications.
"""
import re
import logging
from datetime import datetime
from typing import Callable, Dict, List, Optional

from accumulator import PendingRecord
from categorizer import TransactionCategorizer, GENERIC, INFERENCE
from extractor import FieldExtractor, NUMBER
from preprocess import DataPreprocessor
from schema import TransactionRecord
from segmenter import MessageSegmenter

logger = logging.getLogger(__name__)


def _email_record_complete(fields: Dict, sender: str = '') -> bool:
    return bool(fields.get('amount') and fields.get('reference')
                and (fields.get('paid_to') or fields.get('paid_by') or sender))


class EmailParser:
    """Accumulates labelled fields from an email body into one or more transactions."""

    HEADERS = ('Subject:', 'From:', 'Date:')

    FIELD_PATTERNS = {
        'amount': re.compile(
            r'\b(?:Amount|Transferred|Credited|Debited)[:=\s]+(?:Ksh|KES|USD|EUR|GBP|K)?\.?\s*(\d[\d,]*(?:\.\d+)?)',
            re.IGNORECASE,
        ),
        'reference': re.compile(
            r'\b(?:Reference|Code|Transaction ID|Confirmation)(?:\s*(?:No\.?|Number|#))?[:=\s]+(?-i:([A-Z0-9]{6,12}))\b',
            re.IGNORECASE,
        ),
        # "to" and "from" are everyday words, so they only count as labels with a colon
        'paid_to': re.compile(r'\b(?:To\s*[:=]|(?:Recipient|Payee)[:=\s]+)\s*([A-Za-z][A-Za-z\s]*)', re.IGNORECASE),
        'paid_by': re.compile(r'\b(?:From\s*[:=]|(?:Sender|Account)[:=\s]+)\s*([A-Za-z0-9][A-Za-z0-9\s]*)', re.IGNORECASE),
        'status': re.compile(r'\bStatus[:=\s]+(Success|Completed|Pending|Failed)\b', re.IGNORECASE),
    }

    BARE_NUMBER = re.compile(NUMBER)

    DEFAULT_REFERENCE = 'EMAIL'
    DEFAULT_STATUS = 'Completed'

    def __init__(self, clock: Callable[[], datetime] = datetime.now):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.clock = clock
        self.preprocessor = DataPreprocessor()
        self.segmenter = MessageSegmenter(self.preprocessor)
        self.extractor = FieldExtractor()
        self.categorizer = TransactionCategorizer(GENERIC)
        self.subject_categorizer = TransactionCategorizer(INFERENCE)

    def parse(self, text: str) -> List[TransactionRecord]:
        """
        Extract transactions from an email.

        The leading header block (up to the first blank or non-header line) provides
        context, first occurrence winning. Labelled body fields accumulate until
        amount, reference and a party are known, at which point a record is
        emitted and accumulation starts over. A record that has amount and
        reference but never names a party is settled with the From header as
        payer once the next amount starts or the text ends. When nothing
        completes, the subject line gets one last attempt.

        Args:
            text: Raw email, headers followed by the body

        Returns:
            Records in the order they completed
        """
        headers = {'Subject:': '', 'From:': '', 'Date:': ''}
        pending = PendingRecord(_email_record_complete)
        records = []
        in_headers = True

        for line in self.segmenter.email_lines(text):
            if in_headers:
                header = next((h for h in self.HEADERS if line.startswith(h)), None)
                if header:
                    if not headers[header]:
                        headers[header] = line[len(header):].strip()
                    continue
                # Body starts at the first blank or unrecognised line
                in_headers = False
                if not line.strip():
                    continue

            found = self._match_fields(line)
            if 'amount' in found:
                self._settle(pending, headers, records)
            pending.update(**found)

            completed = pending.flush()
            if completed:
                records.append(self._build_record(completed, headers))

        self._settle(pending, headers, records)

        if not records and headers['Subject:']:
            record = self._record_from_subject(headers)
            if record:
                records.append(record)

        self.logger.info(f"Extracted {len(records)} transactions from email")
        return records

    def _settle(self, pending: PendingRecord, headers: Dict[str, str], records: List[TransactionRecord]) -> None:
        """Emit the open record when the From header can stand in for its missing party."""
        def sender_complete(fields: Dict) -> bool:
            return _email_record_complete(fields, headers['From:'])

        completed = pending.flush(sender_complete)
        if completed:
            records.append(self._build_record(completed, headers))

    def _match_fields(self, line: str) -> Dict[str, object]:
        found = {}
        for name, pattern in self.FIELD_PATTERNS.items():
            match = pattern.search(line)
            if not match:
                continue
            value = match.group(1).strip()
            if name == 'amount':
                amount = self.extractor.parse_number(value)
                if amount and amount > 0:
                    found[name] = amount
            elif value:
                found[name] = value
        return found

    def _build_record(self, fields: Dict, headers: Dict[str, str]) -> TransactionRecord:
        subject = headers['Subject:']
        return TransactionRecord(
            date=self._date(headers),
            amount=fields['amount'],
            type=self.categorizer.classify(subject),
            reference=fields.get('reference') or self.DEFAULT_REFERENCE,
            paid_by=fields.get('paid_by') or headers['From:'],
            paid_to=fields.get('paid_to', ''),
            purpose=subject,
            status=fields.get('status') or self.DEFAULT_STATUS,
        )

    def _record_from_subject(self, headers: Dict[str, str]) -> Optional[TransactionRecord]:
        subject = headers['Subject:']
        amount = self.extractor.extract_amount(subject, order=FieldExtractor.CURRENCY_FIRST)
        if amount is None:
            for match in self.BARE_NUMBER.finditer(subject):
                value = self.extractor.parse_number(match.group(0))
                if value and value > 0:
                    amount = value
                    break
        if amount is None:
            self.logger.debug(f"No amount in subject: {subject}")
            return None

        return TransactionRecord(
            date=self._date(headers),
            amount=amount,
            type=self.subject_categorizer.classify(subject),
            reference=self.extractor.extract_code(subject) or self.DEFAULT_REFERENCE,
            paid_by=headers['From:'],
            paid_to='',
            purpose=subject,
            status=self.DEFAULT_STATUS,
        )

    def _date(self, headers: Dict[str, str]) -> str:
        raw = headers['Date:']
        if raw:
            return self.preprocessor.normalize_date(raw) or raw
        return self.clock().strftime('%Y-%m-%d %H:%M')
