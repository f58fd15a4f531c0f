"""
Built-in custom templates and template loading.
"""
import json
import logging
from pathlib import Path
from typing import Dict, Union

from pydantic import ValidationError

from schema import CustomTemplate

logger = logging.getLogger(__name__)

BUILTIN_TEMPLATES: Dict[str, CustomTemplate] = {
    'mpesa': CustomTemplate(
        id='mpesa',
        name='M-PESA',
        description='M-PESA transaction pattern',
        datePattern=r'\d{1,2}/\d{1,2}/\d{4}',
        amountPattern=r'(?:Ksh|KES)\s*([0-9,]+(?:\.\d+)?)',
        referencePattern=r'\b([A-Z0-9]{8,12})\b',
        paidByPattern=r'sent\s+by\s+([^on]+)',
        paidToPattern=r'sent\s+to\s+([^on]+)',
    ),
    'bank': CustomTemplate(
        id='bank',
        name='Bank Transfer',
        description='Generic bank transfer pattern',
        datePattern=r'\d{2}-\d{2}-\d{4}',
        amountPattern=r'(?:Amount|Credited?)\s*(?:Ksh|KES|USD)?\s*([0-9,]+(?:\.\d+)?)',
        referencePattern=r'(?:Reference|Code):\s*([A-Z0-9]{6,12})',
        paidByPattern=r'(?:From|Sender):\s*([A-Za-z\s]+)',
        paidToPattern=r'(?:To|Recipient):\s*([A-Za-z\s]+)',
    ),
}


def load_template(template: Union[str, Path, dict, CustomTemplate]) -> CustomTemplate:
    """
    Resolve a template from a built-in id, a JSON file, or a mapping.

    Args:
        template: Built-in id ("mpesa", "bank"), path to a JSON template file,
            a dict with the template keys, or a CustomTemplate

    Returns:
        CustomTemplate instance
    """
    if isinstance(template, CustomTemplate):
        return template

    if isinstance(template, dict):
        try:
            return CustomTemplate.model_validate(template)
        except ValidationError as e:
            raise ValueError(f"Invalid template: {e}") from e

    key = str(template)
    if key.lower() in BUILTIN_TEMPLATES:
        return BUILTIN_TEMPLATES[key.lower()]

    path = Path(key)
    if not path.exists():
        raise FileNotFoundError(f"Template not found: {key}")

    logger.info(f"Loading template from {path}")
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Template file is not valid JSON: {path}") from e

    if not isinstance(data, dict):
        raise ValueError(f"Template file must hold a JSON object: {path}")
    return load_template(data)
