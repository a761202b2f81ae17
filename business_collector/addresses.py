"""Pull city, state and ZIP out of single-line US addresses."""

from __future__ import annotations

import re
from typing import Dict, Optional


US_STATE_CODES = (
    "AL|AK|AZ|AR|CA|CO|CT|DC|DE|FL|GA|HI|IA|ID|IL|IN|KS|KY|LA|MA|MD|ME|MI|MN|MO|MS|MT|"
    "NC|ND|NE|NH|NJ|NM|NV|NY|OH|OK|OR|PA|PR|RI|SC|SD|TN|TX|UT|VA|VI|VT|WA|WI|WV|WY"
)

_STATE = re.compile(rf"\b({US_STATE_CODES})\b", re.IGNORECASE)
_ZIP = re.compile(r"\b(\d{5})(?:-\d{4})?\b")


def extract_city(address: Optional[str]) -> Optional[str]:
    """City from a ``"123 Main St, City, ST 12345, USA"`` style address."""

    if not address:
        return None
    parts = [part.strip() for part in address.split(",")]
    if len(parts) >= 3:
        return parts[-3] or None
    return None


def extract_state(address: Optional[str]) -> Optional[str]:
    if not address:
        return None
    match = _STATE.search(address)
    return match.group(1).upper() if match else None


def extract_zip(address: Optional[str]) -> Optional[str]:
    if not address:
        return None
    match = _ZIP.search(address)
    return match.group(1) if match else None


def parse_address(address: Optional[str]) -> Dict[str, Optional[str]]:
    """Split a registered address into street, city, state and ZIP."""

    if not address:
        return {"street": None, "city": None, "state": None, "zip": None}

    state = extract_state(address)
    street: Optional[str] = None
    city: Optional[str] = None

    if state:
        before_state = re.split(rf"\b{state}\b", address, maxsplit=1, flags=re.IGNORECASE)[0]
        pieces = [piece.strip() for piece in before_state.split(",")]
        if len(pieces) >= 2:
            street, city = pieces[0], pieces[1]
        else:
            street = pieces[0]
    else:
        pieces = [piece.strip() for piece in address.split(",")]
        street = pieces[0] if pieces else None
        city = pieces[1] if len(pieces) > 1 else None

    return {"street": street or None, "city": city or None, "state": state, "zip": extract_zip(address)}
