"""Prompt construction for transaction categorisation.

This module builds:
- The outbound item list (``index, payee, notes, transactionType``). Only the
  masked description, scrubbed notes and resolved transaction type are
  included; ``original_pii`` and ``original_description`` never are.
- The system instructions and the JSON user prompt.
- The strict ``response_format`` (JSON Schema) object for the OpenAI
  Responses API.
"""

from __future__ import annotations

import json
from collections.abc import Sequence

from openai.types.responses.response_format_text_json_schema_config_param import (
    ResponseFormatTextJSONSchemaConfigParam,
)

from .models import ClassifierItem, Transaction

SYSTEM_INSTRUCTION: str = (
    "You are an expert financial categoriser for personal expenses in Singapore.\n"
    "Your job is to assign each transaction exactly one category from the user's "
    "provided list.\n"
    "\n"
    "Rules:\n"
    '1. Pay attention to the "transactionType" to understand if it\'s a purchase, '
    "transfer, or fee.\n"
    '2. Consider "notes" which might contain user-provided context or FAST purpose '
    "codes.\n"
    "3. If it looks like a person-to-person transfer (e.g., PayNow to a generic name) "
    'and no context is provided, default to "Transfers".\n'
    "4. Output strict JSON only."
)


def build_items(transactions: Sequence[Transaction]) -> list[ClassifierItem]:
    """Project transactions onto the classifier wire shape, indexed by position."""

    return [
        ClassifierItem(
            index=i,
            payee=tx.description,
            notes=tx.notes,
            transactionType=tx.transaction_code,
        )
        for i, tx in enumerate(transactions)
    ]


def build_prompt(transactions: Sequence[Transaction], categories: Sequence[str]) -> str:
    """Return the user prompt: allowed categories plus the whole batch as JSON.

    Transactions must already be anonymised.
    """

    payload = {
        "valid_categories": list(categories),
        "transactions": [item.model_dump() for item in build_items(transactions)],
    }
    return json.dumps(payload, ensure_ascii=False, indent=2)


def build_response_format(
    categories: Sequence[str],
) -> ResponseFormatTextJSONSchemaConfigParam:
    """Return the strict JSON Schema response format for ``categories``.

    Schema shape::

        {"results": [{"index": int, "category": <one of categories>}]}
    """

    allowed = [c for c in dict.fromkeys(c.strip() for c in categories) if c]
    if not allowed:
        raise ValueError("categories must contain at least one non-blank name")

    return {
        "type": "json_schema",
        "name": "transaction_categories",
        "schema": {
            "type": "object",
            "properties": {
                "results": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {
                            "index": {"type": "integer"},
                            "category": {"type": "string", "enum": allowed},
                        },
                        "required": ["index", "category"],
                        "additionalProperties": False,
                    },
                }
            },
            "required": ["results"],
            "additionalProperties": False,
        },
        "strict": True,
    }


__all__ = ["SYSTEM_INSTRUCTION", "build_items", "build_prompt", "build_response_format"]
