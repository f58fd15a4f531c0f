"""
Transaction extraction driven by a user-supplied custom template.
"""
import re
import math
import logging
from datetime import datetime
from typing import Callable, Dict, List, Optional, Pattern

from accumulator import PendingRecord
from categorizer import TransactionCategorizer, CUSTOM
from schema import CustomTemplate, TransactionRecord

logger = logging.getLogger(__name__)


def _template_record_complete(fields: Dict) -> bool:
    return bool(fields.get('Amount') and (fields.get('Date') or fields.get('Reference')))


class TemplateParser:
    """Applies the template's optional patterns line by line and assembles records."""

    def __init__(self, template: CustomTemplate, clock: Callable[[], datetime] = datetime.now):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.template = template
        self.clock = clock
        self.categorizer = TransactionCategorizer(CUSTOM)
        self.patterns = self._compile_patterns()

    def _compile_patterns(self) -> Dict[str, Pattern]:
        """Compile each configured pattern; a malformed one disables only its field."""
        compiled = {}
        for field, source in self.template.patterns().items():
            if not source:
                continue
            try:
                compiled[field] = re.compile(source, re.IGNORECASE)
            except re.error as e:
                self.logger.error(f"{field} pattern error in template '{self.template.name}': {e}")
        return compiled

    def parse(self, text: str) -> List[TransactionRecord]:
        """
        Extract transactions using the template.

        Fields accumulate across lines until an amount plus a date or reference are
        known; the line that completes the set becomes the purpose.

        Args:
            text: Raw document text

        Returns:
            Records in the order they completed
        """
        pending = PendingRecord(_template_record_complete)
        records = []

        for line in text.splitlines():
            if not line.strip():
                continue

            pending.update(**self._match_fields(line))

            completed = pending.flush()
            if completed:
                records.append(self._build_record(completed, line))

        self.logger.info(f"Extracted {len(records)} transactions with template '{self.template.name}'")
        return records

    def _match_fields(self, line: str) -> Dict[str, object]:
        found = {}
        for field, pattern in self.patterns.items():
            match = pattern.search(line)
            if not match:
                continue
            if field == 'Date':
                found[field] = match.group(0)
            elif field == 'Amount':
                amount = self._parse_amount(self._captured(match))
                if amount is not None:
                    found[field] = amount
            else:
                found[field] = self._captured(match).strip()
        return found

    def _captured(self, match: re.Match) -> str:
        """First capture group when the pattern has one and it matched, else the whole match."""
        if match.re.groups and match.group(1):
            return match.group(1)
        return match.group(0)

    def _parse_amount(self, raw: str) -> Optional[float]:
        cleaned = re.sub(r'[^\d.]', '', raw)
        try:
            amount = float(cleaned)
        except ValueError:
            self.logger.debug(f"Could not parse amount: {raw}")
            return None
        return amount if 0 < amount < math.inf else None

    def _build_record(self, fields: Dict, line: str) -> TransactionRecord:
        return TransactionRecord(
            date=fields.get('Date') or self.clock().strftime('%Y-%m-%d %H:%M'),
            amount=fields['Amount'],
            type=self.categorizer.classify(line),
            reference=fields.get('Reference') or self.template.name,
            paid_by=fields.get('Paid By', ''),
            paid_to=fields.get('Paid To', ''),
            purpose=line.strip(),
        )
