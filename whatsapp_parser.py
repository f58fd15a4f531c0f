"""
Transaction extraction from WhatsApp chat exports.
"""
import re
import logging
from typing import List, Optional

from categorizer import TransactionCategorizer, WHATSAPP
from extractor import FieldExtractor
from preprocess import DataPreprocessor
from schema import ChatMessage, TransactionRecord
from segmenter import MessageSegmenter

logger = logging.getLogger(__name__)


class WhatsAppParser:
    """Turns chat messages that mention a money movement into transaction records."""

    # A message must mention money or a transfer before any field is extracted
    GATEKEEPER = re.compile(
        r'Ksh|KES|USD|\d+[kK]\b|sent to|paid to|received from|deposited to|Confirmed\.|given to',
        re.IGNORECASE,
    )

    def __init__(self):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.preprocessor = DataPreprocessor()
        self.segmenter = MessageSegmenter(self.preprocessor)
        self.extractor = FieldExtractor()
        self.categorizer = TransactionCategorizer(WHATSAPP)

    def parse(self, text: str) -> List[TransactionRecord]:
        """
        Extract transactions from a WhatsApp export.

        Args:
            text: Raw chat export

        Returns:
            One record per qualifying message, in chat order
        """
        messages = self.segmenter.whatsapp_messages(text)

        records = []
        for idx, message in enumerate(messages):
            next_message = messages[idx + 1] if idx + 1 < len(messages) else None
            record = self._extract_from_message(message, next_message)
            if record:
                records.append(record)

        self.logger.info(f"Extracted {len(records)} transactions from {len(messages)} messages")
        return records

    def _extract_from_message(self, message: ChatMessage,
                              next_message: Optional[ChatMessage]) -> Optional[TransactionRecord]:
        content = self.preprocessor.clean_message(message.content)

        if not self.GATEKEEPER.search(content):
            return None

        amount = self.extractor.extract_amount(content)
        if amount is None:
            self.logger.debug(f"No amount in candidate message: {message.original_string}")
            return None

        reference = self.extractor.extract_code(content) or self.extractor.MANUAL_REFERENCE
        paid_by, paid_to = self.extractor.extract_entities(content, message.sender)

        next_content = self.preprocessor.clean_message(next_message.content) if next_message else None
        purpose = self.extractor.extract_purpose(content, next_content)

        return TransactionRecord(
            date=message.date,
            amount=amount,
            type=self.categorizer.classify(content),
            reference=reference,
            paid_by=paid_by,
            paid_to=paid_to,
            purpose=purpose,
        )
