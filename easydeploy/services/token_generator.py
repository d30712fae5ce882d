#!/usr/bin/env python3
"""
Token specification generation with Gemini
"""

import json
import logging
import re
from typing import Any, Dict, Literal, Optional, Tuple

from google import genai
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from ..common.errors import UpstreamServiceError, ValidationError

logger = logging.getLogger(__name__)

PROMPT_TEMPLATE = """
You are an expert token designer. Given the user description, output STRICT JSON ONLY with keys:
{{
  "name": "<token name>",
  "symbol": "<SYMBOL>",
  "type": "ERC20"|"ERC721",
  "supply": <integer>,
  "decimals": <integer>,
  "features": {{ "mintable": true|false, "burnable": true|false, "pausable": true|false }},
  "description": "<1-2 sentence landing description>"
}}
User description: "{description}"
Return only JSON.
"""

_JSON_BLOCK = re.compile(r"\{[\s\S]*\}")


class TokenFeatures(BaseModel):
    mintable: bool = False
    burnable: bool = False
    pausable: bool = False


class TokenSpec(BaseModel):
    name: str = Field(min_length=1)
    symbol: str = Field(min_length=1)
    type: Literal["ERC20", "ERC721"] = "ERC20"
    supply: int = Field(default=1_000_000, ge=0)
    decimals: int = Field(default=18, ge=0, le=36)
    features: TokenFeatures = Field(default_factory=TokenFeatures)
    description: str = ""


def extract_json(raw_text: str) -> Dict[str, Any]:
    """Parse the model reply, falling back to the outermost {...} block"""
    text = raw_text.strip()
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        match = _JSON_BLOCK.search(text)
        if not match:
            raise UpstreamServiceError("LLM reply contained no JSON object", details=raw_text)
        try:
            return json.loads(match.group(0))
        except json.JSONDecodeError as e:
            raise UpstreamServiceError(f"LLM reply is not valid JSON: {e}", details=raw_text) from e


class TokenGenerator:
    def __init__(self, api_key: str, model: str = "gemini-2.5-flash", client: Optional[genai.Client] = None):
        self.model = model
        self.client = client or genai.Client(api_key=api_key)

    def generate(self, description: str) -> Tuple[TokenSpec, str]:
        """Return the validated token spec and the raw model text"""
        if not description or not description.strip():
            raise ValidationError("description required")

        try:
            response = self.client.models.generate_content(
                model=self.model,
                contents=PROMPT_TEMPLATE.format(description=description.strip()),
            )
        except Exception as e:
            raise UpstreamServiceError(f"LLM request failed: {e}") from e

        raw_text = getattr(response, "text", None)
        if not raw_text:
            raise UpstreamServiceError("no response from LLM")

        data = extract_json(raw_text)
        try:
            spec = TokenSpec.model_validate(data)
        except PydanticValidationError as e:
            raise UpstreamServiceError("LLM returned an invalid token spec", details=str(e)) from e

        logger.info(f"Generated token spec {spec.name} ({spec.symbol})")
        return spec, raw_text
