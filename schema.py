"""
Pydantic schemas for extracted transaction records, chat messages and custom templates.
"""
from typing import Dict, List, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, field_validator

RecordValue = Union[str, float]


class TransactionRecord(BaseModel):
    """Single extracted transaction, serialized under its canonical field names."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    date: str = Field('', alias='Date', description="Transaction date, YYYY-MM-DD HH:MM when derivable")
    amount: float = Field(..., alias='Amount', gt=0, allow_inf_nan=False, description="Resolved monetary amount")
    type: str = Field('Other', alias='Type', description="Transaction category")
    reference: str = Field('', alias='Reference', description="Reference code or source placeholder")
    paid_by: str = Field('', alias='Paid By', description="Payer")
    paid_to: str = Field('', alias='Paid To', description="Payee")
    purpose: str = Field('', alias='Purpose', description="Free-text description")
    status: Optional[str] = Field(None, alias='Status', description="Delivery status (email only)")

    @field_validator('amount', mode='before')
    @classmethod
    def clean_amount(cls, v):
        """Accept numeric strings with thousands separators."""
        if isinstance(v, str):
            return v.replace(',', '').strip()
        return v

    def to_dict(self) -> Dict[str, RecordValue]:
        """Flat mapping keyed by the canonical field names; unset Status is omitted."""
        return self.model_dump(by_alias=True, exclude_none=True)


class ChatMessage(BaseModel):
    """One logical WhatsApp message, possibly spanning several raw lines."""
    date: str
    sender: str
    content: str = ''
    original_string: str = ''


class CustomTemplate(BaseModel):
    """User-supplied regular expressions that replace the built-in extraction logic."""
    model_config = ConfigDict(populate_by_name=True)

    id: str = ''
    name: str = 'Custom Template'
    description: Optional[str] = None
    date_pattern: Optional[str] = Field(None, alias='datePattern')
    amount_pattern: Optional[str] = Field(None, alias='amountPattern')
    reference_pattern: Optional[str] = Field(None, alias='referencePattern')
    paid_by_pattern: Optional[str] = Field(None, alias='paidByPattern')
    paid_to_pattern: Optional[str] = Field(None, alias='paidToPattern')

    @field_validator('date_pattern', 'amount_pattern', 'reference_pattern',
                     'paid_by_pattern', 'paid_to_pattern', mode='before')
    @classmethod
    def blank_to_none(cls, v):
        """An empty pattern disables the field."""
        if v is None:
            return None
        v = str(v)
        return v if v.strip() else None

    def patterns(self) -> Dict[str, Optional[str]]:
        """Pattern source strings keyed by the record field they populate."""
        return {
            'Date': self.date_pattern,
            'Amount': self.amount_pattern,
            'Reference': self.reference_pattern,
            'Paid By': self.paid_by_pattern,
            'Paid To': self.paid_to_pattern,
        }


class ExtractionResult(BaseModel):
    """Records extracted from one file or a merged batch of files."""
    transactions: List[Dict[str, RecordValue]]
    total_count: int = Field(..., description="Total number of transactions")
    processing_metadata: Optional[dict] = Field(None, description="Processing information")

    @field_validator('total_count')
    @classmethod
    def validate_count(cls, v, info):
        """Ensure count matches actual transaction list length."""
        transactions = info.data.get('transactions')
        if transactions is not None and v != len(transactions):
            return len(transactions)
        return v
