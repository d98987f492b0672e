"""
Map the storefront's bilingual line-item labels onto the canonical meta keys
the reservation system reads.

Every canonical entry is written with ``key == display_key`` and
``value == display_value``.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

PLACEHOLDER_DATE = "1999-01-01"
TIME_FORMATS = (
    "%Y-%m-%d %H:%M %Z",
    "%Y-%m-%d %H:%M:%S %Z",
    "%Y-%m-%d %I:%M %p %Z",
    "%Y-%m-%d %I:%M:%S %p %Z",
)

COPY = "copy"
DATE = "date"
TIME = "time"

# canonical key -> (transform, display keys)
CANONICAL_FIELDS: Dict[str, Tuple[str, Tuple[str, ...]]] = {
    "_sku": (COPY, ("SKU",)),
    "_adults": (COPY, ("Adults", "Adultos")),
    "_kids": (COPY, ("Children", "Niños")),
    "_combo_description": (COPY, ("Description", "Descripción")),
    "_combo_quantity": (COPY, ("Quantity", "Cantidad")),
    "_need_transportation": (COPY, ("Pick-up Place", "Lugar de Reunión")),
    "_transportation_schedules": (TIME, ("Pick-up Schedule", "Hora de Salida")),
    # Lowercase "actividad" and "Activity Date" are labels from the first storefront build.
    "_tour_date": (DATE, ("Tour Date", "Fecha de la Actividad", "Activity Date", "Fecha de la actividad")),
    "_tour_schedule": (TIME, ("Tour Schedule", "Horario de la Actividad", "Horario de la actividad")),
    "_address": (COPY, ("Pick-up Address", "Domicilio")),
    "_location": (COPY, ("Pick-up Location", "Ubicación")),
}

DISPLAY_KEY_TABLE: Dict[str, Tuple[str, str]] = {
    display_key: (canonical_key, transform)
    for canonical_key, (transform, display_keys) in CANONICAL_FIELDS.items()
    for display_key in display_keys
}


def normalize_date(value: str) -> str:
    """
    Convert a ``DD/MM/YYYY`` storefront date into ``YYYY-MM-DD``.

    Raises ValueError for dates that do not exist on the calendar.
    """
    reordered = "-".join(reversed(value.strip().split("/")))
    return datetime.strptime(reordered, "%Y-%m-%d").date().isoformat()


def normalize_time(value: str) -> str:
    """
    Convert a storefront time into 24-hour ``HH:MM``.

    Accepts ``HH:MM`` and ``HH:MM:SS`` plus 12-hour ``h:MM AM``/``h:MM:SS pm``.
    The value is anchored to a fixed UTC date so only the clock portion
    survives. Raises ValueError for out-of-range times.
    """
    stamp = f"{PLACEHOLDER_DATE} {value.strip()} UTC"
    for fmt in TIME_FORMATS:
        try:
            parsed = datetime.strptime(stamp, fmt)
        except ValueError:
            continue
        return parsed.strftime("%H:%M")
    raise ValueError(f"time data {stamp!r} does not match HH:MM")


_TRANSFORMS: Dict[str, Callable[[str], str]] = {
    DATE: normalize_date,
    TIME: normalize_time,
}


def canonical_entry(key: str, value: Any) -> Dict[str, Any]:
    return {"key": key, "value": value, "display_key": key, "display_value": value}


def derive_entry(meta: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Build the canonical entry for one metadata entry, or None when it has no mapping."""
    display_key = meta.get("display_key")
    if not isinstance(display_key, str) or display_key not in DISPLAY_KEY_TABLE:
        return None

    canonical_key, transform = DISPLAY_KEY_TABLE[display_key]
    value = meta.get("value")
    if transform == COPY:
        return canonical_entry(canonical_key, value)

    try:
        return canonical_entry(canonical_key, _TRANSFORMS[transform](value))
    except ValueError:
        logger.warning("Invalid %s for %s <%s>.", transform, canonical_key, value)
    except (TypeError, AttributeError):
        logger.exception("Unexpected error normalizing %s <%r>.", canonical_key, value)
    return None


def is_derived_entry(meta: Any) -> bool:
    """True for a canonical entry written by an earlier normalization pass."""
    return (
        isinstance(meta, dict)
        and meta.get("key") in CANONICAL_FIELDS
        and meta.get("key") == meta.get("display_key")
        and meta.get("value") == meta.get("display_value")
    )


def normalize_line_item(line_item: Dict[str, Any]) -> List[Dict[str, Any]]:
    """
    Add canonical meta entries to a line item in place and return the entries applied.

    Entries are derived from a snapshot of the existing metadata and appended
    after the scan, one per matching source entry. Canonical entries left by a
    previous delivery of the same order are dropped first; storefront entries
    are never touched.
    """
    meta_data = line_item.get("meta_data")
    if not isinstance(meta_data, list):
        return []

    derived: List[Dict[str, Any]] = []
    for meta in list(meta_data):
        if not isinstance(meta, dict) or is_derived_entry(meta):
            continue
        entry = derive_entry(meta)
        if entry is not None:
            derived.append(entry)

    meta_data[:] = [meta for meta in meta_data if not is_derived_entry(meta)] + derived
    return derived
