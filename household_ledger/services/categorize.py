"""
Keyword Categorization

Assigns a category to an ingested transaction from its description.
Rules are regex patterns checked against the uppercased description;
the longest (most specific) matching pattern wins.

Anything that matches nothing gets the default category, which the user
re-labels later in the transactions screen.
"""

import logging
import re

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY = "Uncategorized"

CATEGORY_PATTERNS = {
    r"SALARY|PAYROLL|DIRECT DEP": "Income",
    r"INTEREST PAID|DIVIDEND": "Income",
    r"REFUND": "Income",
    r"\bRENT\b|MORTGAGE|\bLEASE\b": "Housing",
    r"ELECTRIC|WATER BILL|INTERNET|COMCAST|VERIZON|AT&T": "Utilities",
    r"GROCER|SUPERMARKET|SAFEWAY|TRADER JOE|WHOLE FOODS|KROGER|ALDI|LIDL": "Groceries",
    r"COFFEE|STARBUCKS|CAFE|RESTAURANT|PIZZA|BURGER|DOORDASH|UBER EATS": "Dining",
    r"\bUBER\b|LYFT|TAXI|TRANSIT|METRO|PARKING|SHELL|CHEVRON|GAS STATION": "Transport",
    r"HOTEL|AIRBNB|AIRLINE|FLIGHT": "Travel",
    r"AMAZON|TARGET|WALMART|COSTCO|IKEA": "Shopping",
    r"NETFLIX|SPOTIFY|HULU|DISNEY\+|SUBSCRIPTION": "Subscriptions",
    r"PHARMACY|CVS|WALGREENS|DOCTOR|CLINIC|DENTAL": "Health",
    r"INSURANCE|GEICO|PROGRESSIVE": "Insurance",
    r"TRANSFER|ZELLE|VENMO": "Transfers",
    r"\bATM\b|\bFEES?\b|SERVICE CHARGE": "Fees",
}


def categorize_transaction(
    description: str,
    default: str = DEFAULT_CATEGORY,
) -> str:
    """Return the category for a description, or `default` if nothing matches."""
    desc_upper = (description or "").upper().strip()
    if not desc_upper:
        return default

    best_category = None
    best_match_len = 0

    for pattern, category in CATEGORY_PATTERNS.items():
        match = re.search(pattern, desc_upper)
        # Prefer the longest matched text (most specific)
        if match and len(match.group(0)) > best_match_len:
            best_category = category
            best_match_len = len(match.group(0))

    if best_category:
        logger.debug(f"Categorized: {description} -> {best_category}")
        return best_category

    return default
