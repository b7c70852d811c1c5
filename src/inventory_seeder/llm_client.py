from __future__ import annotations

import logging
from typing import List, Optional, Type

from openai import OpenAI
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from inventory_seeder.config import Settings
from inventory_seeder.llm_parser import parse_llm_output
from inventory_seeder.models import Record
from inventory_seeder.prompts import SYSTEM_PROMPT, build_generation_prompt

log = logging.getLogger("inventory_seeder.llm")


class LLMClient:
    """
    Thin, safe wrapper around OpenAI for synthetic record generation.
    """

    def __init__(
        self,
        settings: Settings,
        schema: Type[Record] = Record,
        client: Optional[OpenAI] = None,
    ) -> None:
        self._client = client or OpenAI(api_key=settings.openai_api_key)
        self._model = settings.openai_model
        self._schema = schema

    @retry(
        retry=retry_if_exception_type(Exception),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        stop=stop_after_attempt(3),
        reraise=True,
    )
    def generate_records(self, count: int) -> List[Record]:
        """
        Ask the LLM for `count` records and return them validated.
        The whole response is rejected if any record is malformed.
        Retries on transient and parse failures.
        """
        prompt = build_generation_prompt(count, self._schema)
        log.debug("Sending generation prompt to LLM (%s chars)", len(prompt))

        response = self._client.responses.create(
            model=self._model,
            input=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            temperature=0.7,
            max_output_tokens=8000,
        )

        raw_text = getattr(response, "output_text", None)
        if not raw_text:
            raise RuntimeError("LLM response did not contain text output")

        log.debug("Raw LLM output: %s", raw_text)

        return parse_llm_output(raw_text, self._schema, expected_count=count)
