"""Input sanitization for user-supplied text embedded in outbound HTML."""

import nh3


def strip_html(value: str | None) -> str:
    """Remove every HTML tag from value (nh3 with an empty allowlist).

    Args:
        value: Raw string that may contain HTML (e.g. a display name).

    Returns:
        Text safe to interpolate into an HTML email body.
    """
    if not value:
        return ""
    return nh3.clean(value, tags=set(), attributes={})
