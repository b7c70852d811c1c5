from __future__ import annotations

import json
from typing import Type

from inventory_seeder.models import Record


SYSTEM_PROMPT = """You are a helpful assistant that generates furniture store item data.
You must return ONLY valid JSON.
Do not include explanations, markdown, or extra text.
"""


def build_format_instructions(schema: Type[Record] = Record) -> str:
    """
    Describe the expected output shape using the record's JSON schema.
    """
    item_schema = json.dumps(schema.model_json_schema(), indent=2)
    return f"""The output must be a JSON object of the form {{"items": [ ... ]}}.
Each element of "items" must conform to this JSON schema:

{item_schema}"""


def build_generation_prompt(count: int, schema: Type[Record] = Record) -> str:
    """
    Build a strict prompt asking the LLM for `count` records matching `schema`.
    """
    fields = ", ".join(schema.model_fields)
    return f"""
Generate {count} furniture store items. Each record should include the following fields: {fields}.
Ensure variety in the data and realistic values.

Rules:
- Output ONLY JSON
- No markdown
- No trailing text
- Exactly {count} items
- Prices are non-negative numbers, ratings are numbers from 1 to 5

{build_format_instructions(schema)}
""".strip()
