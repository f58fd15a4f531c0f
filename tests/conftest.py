"""Shared fixtures: small, realistic exports for each supported source."""

from __future__ import annotations

from datetime import datetime

import pytest


@pytest.fixture
def fixed_clock():
    """Deterministic replacement for ``datetime.now`` in timestamp fallbacks."""
    return lambda: datetime(2024, 3, 1, 12, 0)


@pytest.fixture
def whatsapp_chat() -> str:
    return "\n".join([
        "12/5/2024, 10:29 - Messages and calls are end-to-end encrypted.",
        "12/5/2024, 10:30 - Alice: Sent Ksh 2,000 to Bob for school fees",
        "12/5/2024, 10:31 - Bob: Thanks!",
        "15/5/2024, 9:15 in the morning - Alice: QAB1CD2EF3 Confirmed. Ksh1,500.00 sent to "
        "JANE WANJIKU 0712345678 on 15/5/24 at 9:14 AM. New M-PESA balance is Ksh10,000.00.",
        "15/5/2024, 9:16 in the morning - Alice: Cement and sand",
        "16/5/2024, 2:05 in the afternoon - Alice: Paid 90k",
        "to the fundi for labour",
        "16/5/2024, 2:06 in the afternoon - Bob: Hi, how are you?",
    ])


@pytest.fixture
def email_text() -> str:
    return "\n".join([
        "Subject: Payment confirmation",
        "From: alerts@bank.co.ke",
        "Date: Mon, 15 Jan 2024 10:30:00 +0300",
        "",
        "Dear customer,",
        "Amount: Ksh 5,000",
        "Reference: ABC12345",
        "To: John Doe",
        "Status: Completed",
    ])
