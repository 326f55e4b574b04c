# retailready/retailers.py
# Known retailer profiles + detection from raw routing-guide text.
# - Plain substring matching (no tokenizing); a keyword that shows up in an
#   unrelated context is an accepted false positive
# - First profile in registry order with any keyword hit wins

import logging
from typing import Optional, Sequence

from .schemas import RetailerProfile

logger = logging.getLogger(__name__)

# PDF text usually carries typographic apostrophes ("DICK’S"); keywords use ASCII
_APOSTROPHES = str.maketrans({"\u2019": "'", "\u2018": "'", "\u02bc": "'", "`": "'"})


GENERIC_PROFILE = RetailerProfile(
    name="Generic",
    violation_focus=(
        "Look for any compliance requirement that carries a chargeback, penalty or fine, "
        "including labeling, packing, ASN/EDI, routing and delivery appointment rules."
    ),
    fine_structure=(
        "Fines may be flat per occurrence, per carton, per unit or per shipment, "
        "often combined with a fixed service or processing fee."
    ),
)

REGISTRY: Sequence[RetailerProfile] = (
    RetailerProfile(
        name="Dick's Sporting Goods",
        keywords=frozenset({"dick's sporting goods", "dicks sporting goods", "dsg vendor"}),
        violation_codes=("NL", "EA", "RP", "MC", "CO"),
        violation_focus=(
            "Look for the 'Violation Amount' matrix: UCC-128 label not on carton (NL), "
            "ASN violations (EA), retail price missing or inaccurate (RP), multiple UPCs "
            "mixed in one carton (MC) and POs received after the cancel date (CO)."
        ),
        fine_structure=(
            "Fines are usually per carton or per unit plus a $250 service fee "
            "(e.g. '$7.50 per carton + $250 service fee'), some are flat per occurrence."
        ),
    ),
    RetailerProfile(
        name="Walmart",
        keywords=frozenset({"walmart", "wal-mart", "retail link"}),
        violation_codes=("OTIF", "ASN", "GTIN"),
        violation_focus=(
            "Look for On-Time In-Full (OTIF) requirements, ASN accuracy, GS1-128 label "
            "and GTIN/case pack rules and appointment scheduling."
        ),
        fine_structure=(
            "OTIF fines are usually a percentage of cost of goods; label and ASN "
            "violations are per carton or per shipment."
        ),
    ),
    RetailerProfile(
        name="Target",
        keywords=frozenset({"target corporation", "target stores", "partners online"}),
        violation_codes=("ASN", "LBL", "CMP"),
        violation_focus=(
            "Look for vendor compliance chargebacks: late/early delivery, ASN mismatch, "
            "carton label placement and case pack compliance."
        ),
        fine_structure=(
            "Chargebacks are typically flat per PO or per occurrence with some "
            "per-carton processing fees."
        ),
    ),
    RetailerProfile(
        name="Amazon",
        keywords=frozenset({"amazon", "vendor central", "seller central"}),
        violation_codes=("PO-ON-TIME", "ASN-ACCURACY", "PREP"),
        violation_focus=(
            "Look for operational performance chargebacks: prep and labeling, "
            "ASN accuracy, PO on-time acceptance and carton content label rules."
        ),
        fine_structure=(
            "Chargebacks are usually per unit or per carton, sometimes a flat "
            "amount per purchase order."
        ),
    ),
    RetailerProfile(
        name="Best Buy",
        keywords=frozenset({"best buy", "bestbuy"}),
        violation_codes=("EDI", "RTG", "PKG"),
        violation_focus=(
            "Look for routing guide compliance (carrier selection), EDI 856/810 "
            "requirements and packaging/palletizing standards."
        ),
        fine_structure="Fines are typically flat per violation plus per-carton handling fees.",
    ),
)


def all_profiles(registry: Sequence[RetailerProfile] = REGISTRY) -> Sequence[RetailerProfile]:
    return tuple(registry) + (GENERIC_PROFILE,)


def get_profile(name: str, registry: Sequence[RetailerProfile] = REGISTRY) -> Optional[RetailerProfile]:
    """Look up a profile by name (case-insensitive); None when unknown."""
    wanted = (name or "").strip().lower()
    for profile in all_profiles(registry):
        if profile.name.lower() == wanted:
            return profile
    return None


def detect_retailer(document_text: str, registry: Sequence[RetailerProfile] = REGISTRY) -> RetailerProfile:
    """
    Pick the retailer profile whose keyword signature appears in the text.
    Always returns a profile; falls back to GENERIC_PROFILE.
    """
    if not isinstance(document_text, str) or not document_text:
        return GENERIC_PROFILE

    text = document_text.lower().translate(_APOSTROPHES)
    for profile in registry:
        if profile.is_generic:
            continue
        # sorted so the reported keyword is stable across runs
        for keyword in sorted(profile.keywords):
            if keyword.lower().translate(_APOSTROPHES) in text:
                logger.info("Detected retailer %s (keyword %r)", profile.name, keyword)
                return profile

    logger.info("No retailer signature found, using %s profile", GENERIC_PROFILE.name)
    return GENERIC_PROFILE
