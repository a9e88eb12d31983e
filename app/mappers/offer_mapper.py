# app/mappers/offer_mapper.py
"""
Extract the locally tracked flight fields from a provider flight-offer.

Only the fields a Flight record stores are read; the offer itself is kept
verbatim alongside them. Missing or malformed parts of an offer are skipped,
leaving the corresponding field unset so request validation can report it.
"""

import logging
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


def _date_part(dt_str: Optional[str]) -> Optional[str]:
    """'2025-12-01T10:30:00' -> '2025-12-01'."""
    if not dt_str or not isinstance(dt_str, str):
        return None
    return dt_str.split("T", 1)[0]


def flight_fields_from_offer(offer: Dict[str, Any]) -> Dict[str, Any]:
    if not isinstance(offer, dict):
        return {}

    fields: Dict[str, Any] = {}

    try:
        outbound = offer["itineraries"][0]["segments"]
        first_seg, last_seg = outbound[0], outbound[-1]
        fields["origin"] = first_seg["departure"]["iataCode"]
        fields["destination"] = last_seg["arrival"]["iataCode"]
        fields["departure_date"] = _date_part(first_seg["departure"].get("at"))
        fields["carrier_code"] = first_seg.get("carrierCode")
        if first_seg.get("number"):
            fields["flight_number"] = f"{first_seg.get('carrierCode', '')}{first_seg['number']}"
    except (KeyError, IndexError, TypeError) as e:
        logger.debug("Offer itinerary parse skipped: %s", e)

    try:
        inbound = offer["itineraries"][1]["segments"]
        fields["return_date"] = _date_part(inbound[0]["departure"].get("at"))
    except (KeyError, IndexError, TypeError):
        pass  # one-way

    try:
        price = offer["price"]
        fields["price"] = float(price["total"])
        fields["currency"] = price.get("currency")
    except (KeyError, TypeError, ValueError) as e:
        logger.debug("Offer price parse skipped: %s", e)

    return {k: v for k, v in fields.items() if v is not None}
