"""
Extraction prompt builder.

Composes the retailer-specific instruction sent to the external extraction
model. No I/O: the model call itself lives in `retailready.llm`.
"""

import logging
from typing import Optional

from pydantic import BaseModel

from .retailers import detect_retailer
from .schemas import RetailerProfile
from .settings import get_settings

logger = logging.getLogger(__name__)


SYSTEM_PROMPT = (
    "You are an expert at parsing retailer routing guides and compliance documents. "
    "You excel at extracting structured data about requirements, violations, fines, "
    "and operational guidelines. You can identify packing methods, violation matrices, "
    "specifications, timing requirements, and product-specific rules."
)

GENERIC_CODES_INSTRUCTION = (
    "- No known violation codes for this retailer: look for any violation or "
    "chargeback codes the document defines and report them in violation_code"
)

# Expected output shape; the normalizer enforces the `requirements` part.
OUTPUT_SHAPE = """{
  "requirements": [
    {
      "requirement": "specific requirement text from the document",
      "violation": "what constitutes a violation",
      "fine": "exact fine amount and structure from the document",
      "category": "workflow category (Pre-Packing, During Packing, Post-Packing, Pre-Shipment, EDI/Digital, Carrier/Routing, Labeling, Packaging, Delivery)",
      "severity": "High, Medium, or Low",
      "fine_amount": "numeric value if available",
      "fine_unit": "per carton, per item, per violation, flat fee",
      "additional_fees": "any additional fees or penalties",
      "prevention_method": "how to prevent this violation",
      "responsible_party": "who is responsible for prevention",
      "violation_code": "retailer violation code if the document gives one"
    }
  ],
  "order_types": [
    {"type": "", "description": "", "rules": [], "packing_method": "", "skus_per_carton": "", "special_requirements": []}
  ],
  "carton_specs": {
    "conveyable": {"length_min": "", "length_max": "", "width_min": "", "width_max": "", "height_min": "", "height_max": "", "weight_min": "", "weight_max": ""},
    "non_conveyable": ""
  },
  "label_placement": [
    {"requirement": "", "standard_position": "", "special_cases": [], "violation_fine": ""}
  ],
  "timing_requirements": [
    {"requirement": "", "deadline": "", "timeframe": "", "violation_fine": ""}
  ],
  "product_requirements": [
    {"category": "", "requirements": [], "special_rules": [], "violations": []}
  ]
}"""


class ExtractionRequest(BaseModel):
    profile: RetailerProfile
    system_prompt: str
    user_prompt: str
    truncated: bool = False


def truncate_text(text: str, max_chars: int) -> str:
    # str slicing works on code points, never inside a multibyte sequence
    return text[:max_chars]


def _codes_section(profile: RetailerProfile) -> str:
    if not profile.violation_codes:
        return GENERIC_CODES_INSTRUCTION
    lines = [f"- {code}" for code in profile.violation_codes]
    lines.append("- And any other violation codes mentioned in the document")
    return "\n".join(lines)


def build_prompt(profile: RetailerProfile, document_text: str, max_chars: Optional[int] = None) -> str:
    """Retailer-specific user prompt with the (truncated) document text appended."""
    if max_chars is None:
        max_chars = get_settings().max_text_length
    source = truncate_text(document_text, max_chars)

    guide = "retailer routing guide" if profile.is_generic else f"{profile.name} routing guide"

    return f"""Parse the following {guide} text and extract REAL compliance requirements with ACTUAL fine amounts from the document.

VIOLATION FOCUS:
{profile.violation_focus}

FINE STRUCTURE:
{profile.fine_structure}

VIOLATION CODES TO FIND:
{_codes_section(profile)}

Extract data in these categories:
1. ORDER TYPE REQUIREMENTS - packing methods and their rules
2. VIOLATION MATRIX - violation codes with ACTUAL fine amounts and triggers
3. CARTON SPECIFICATIONS - size, weight and dimensional requirements
4. LABEL PLACEMENT RULES - exact positioning requirements and special cases
5. TIMING REQUIREMENTS - deadlines for ASN, routing requests, etc.
6. PRODUCT-SPECIFIC REQUIREMENTS - category-specific rules

Return only a JSON object with this structure:

{OUTPUT_SHAPE}

EXTRACTION RULES:
- Keep the fine text as written, e.g. "$7.50 per carton + $250 service fee"
- Requirement text usually contains "must", "shall" or "required"
- Only extract requirements that are ACTUALLY in the document; never invent requirements or fine amounts

Text to parse:
{source}"""


def prepare_extraction(document_text: str, max_chars: Optional[int] = None) -> ExtractionRequest:
    """Detect the retailer and build the prompt pair for the extraction call."""
    if max_chars is None:
        max_chars = get_settings().max_text_length

    profile = detect_retailer(document_text)
    truncated = len(document_text) > max_chars
    if truncated:
        logger.info("Truncating document from %d to %d characters", len(document_text), max_chars)

    return ExtractionRequest(
        profile=profile,
        system_prompt=SYSTEM_PROMPT,
        user_prompt=build_prompt(profile, document_text, max_chars=max_chars),
        truncated=truncated,
    )
