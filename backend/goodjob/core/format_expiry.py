"""Token expiry formatting for the verify endpoint."""


def format_remaining_lifetime(seconds: int) -> str:
    """Render remaining seconds as '6d 23h 59m'; zero units are omitted."""
    seconds = max(seconds, 0)
    days = seconds // 86400
    hours = (seconds % 86400) // 3600
    minutes = (seconds % 3600) // 60

    parts = []
    if days > 0:
        parts.append(f"{days}d")
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0:
        parts.append(f"{minutes}m")
    return " ".join(parts) or "Less than 1 minute"
