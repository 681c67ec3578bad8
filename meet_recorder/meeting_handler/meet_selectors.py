"""
Google Meet-specific DOM selectors for the admission flow.

Every list is ordered by priority: the first entry is the most specific
selector, later entries are more permissive.

Note: the Meet pre-join UI is rendered client-side and its markup changes
often, so these selectors may need periodic maintenance.
"""

# =============================================================================
# DOM SELECTORS
# =============================================================================

MEET_SELECTORS = {
    # Guest display-name field on the pre-join screen
    "name_input": [
        'input[aria-label="Your name"]',
        'input[placeholder*="name"]',
        'input[placeholder*="Name"]',
        'input[type="text"]',
        'input[aria-label*="name"]',
        'input[aria-label*="Name"]',
    ],

    # Controls that only exist while still outside the meeting room
    "pre_join_markers": [
        '[data-promo-anchor-id="join-now"]',
        '[jsname="BOHaEe"]',  # "Ask to join"
        'button[aria-label*="Join"]',
        '.VfPpkd-LgbsSe[data-promo-anchor-id="join-now"]',
    ],

    # Join / ask-to-join controls
    "join_button": [
        'button[aria-label*="Join"], button[aria-label*="join"], button[jsname="BOHaEe"]',
    ],
}

# Accessible button names tried after the CSS join selectors
JOIN_BUTTON_NAMES = ["Ask to join", "Join now", "Join"]


def get_selectors_for(element_type: str) -> list:
    """
    Get list of selectors for a specific element type.

    Args:
        element_type: Key from MEET_SELECTORS dict

    Returns:
        List of CSS selectors to try
    """
    return MEET_SELECTORS.get(element_type, [])
