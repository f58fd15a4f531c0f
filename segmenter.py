"""
Splits raw exports into units of analysis: chat messages for WhatsApp, lines for
Telegram, email and PDF text.
"""
import re
import json
import logging
from typing import Any, Dict, List, Optional

from preprocess import DataPreprocessor
from schema import ChatMessage

logger = logging.getLogger(__name__)


class MessageSegmenter:
    """Segments source text into messages or lines."""

    # "12/5/2024, 10:30 - Alice: text" including "1:22 in the afternoon" style times
    CHAT_HEADER = re.compile(r'^(\d{1,2}/\d{1,2}/\d{2,4}),\s*(\d{1,2}:\d{2}.*?)\s*-\s*(.*?):\s*')

    def __init__(self, preprocessor: Optional[DataPreprocessor] = None):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.preprocessor = preprocessor or DataPreprocessor()

    def whatsapp_messages(self, text: str) -> List[ChatMessage]:
        """
        Group WhatsApp export lines into messages.

        A header line opens a new message and flushes the previous one; any other
        line is a continuation of the open message. Lines before the first header
        are dropped.

        Args:
            text: Raw chat export

        Returns:
            Messages in export order
        """
        messages = []
        current = None
        buffer = []

        for line in text.splitlines():
            header_line = line.lstrip('\ufeff\u200e')
            match = self.CHAT_HEADER.match(header_line)
            if match:
                if current is not None:
                    messages.append(self._flush(current, buffer))

                date_str, time_str, sender = match.groups()
                current = {
                    'date': self.preprocessor.format_chat_datetime(date_str, time_str),
                    'sender': sender.strip(),
                    'original_string': line,
                }
                buffer = [header_line[match.end():]]
            elif current is not None:
                buffer.append(line)

        if current is not None:
            messages.append(self._flush(current, buffer))

        self.logger.info(f"Segmented {len(messages)} chat messages")
        return messages

    def _flush(self, header: Dict[str, str], buffer: List[str]) -> ChatMessage:
        return ChatMessage(content='\n'.join(buffer), **header)

    def telegram_lines(self, text: str) -> List[str]:
        """Lines of a Telegram text export; JSON exports are flattened to one line per message."""
        stripped = text.lstrip()
        if stripped.startswith('{'):
            try:
                data = json.loads(stripped)
            except json.JSONDecodeError:
                self.logger.warning("Telegram export looks like JSON but could not be decoded, reading as text")
                return text.splitlines()

            if isinstance(data, dict) and isinstance(data.get('messages'), list):
                lines = [self._telegram_json_line(message) for message in data['messages']]
                return [line for line in lines if line]

        return text.splitlines()

    def _telegram_json_line(self, message: Any) -> str:
        """Render one exported Telegram message as "YYYY-MM-DD HH:MM Sender: text"."""
        if not isinstance(message, dict):
            return ''

        body = message.get('text', '')
        if isinstance(body, list):
            # Rich text arrives as a mix of plain strings and entity objects
            body = ''.join(part if isinstance(part, str) else str(part.get('text', ''))
                           for part in body if isinstance(part, (str, dict)))
        body = re.sub(r'\s+', ' ', str(body)).strip()
        if not body:
            return ''

        date = str(message.get('date', '')).replace('T', ' ')[:16]
        sender = message.get('from') or message.get('actor') or ''
        return f"{date} {sender}: {body}".strip()

    def email_lines(self, text: str) -> List[str]:
        return text.splitlines()

    def pdf_lines(self, text: str) -> List[str]:
        """Split on either line terminator; scraped PDF streams mix both."""
        return re.split(r'[\r\n]', text)
