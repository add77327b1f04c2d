"""Free-text customer markers.

Used when an export carries no structured label data at all. Contacts whose
remark or description marks them as customers receive a single synthetic
label. Pure functions, no database access.
"""

from __future__ import annotations

# Synthetic label assigned by the heuristic tier
CUSTOMER_LABEL = "客户"

# Substrings that mark a remark or description as a customer. Matched
# against the lowercased text, so "customer" also matches "Customer" and "CUSTOMER".
CUSTOMER_MARKERS: tuple[str, ...] = (
    "客户",
    "[客户]",
    "#客户",
    "customer",
)


def looks_like_customer(text: str | None) -> bool:
    """Check whether free text contains any customer marker.

    Args:
        text: Remark, description or other free text, possibly None.

    Returns:
        True if any entry of CUSTOMER_MARKERS occurs in the text.
    """
    if not text:
        return False
    normalized = text.strip().lower()
    if not normalized:
        return False
    return any(marker in normalized for marker in CUSTOMER_MARKERS)
