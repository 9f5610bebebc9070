"""
utils.py

Small helpers shared by the pipeline modules.
"""


def format_duration(seconds: float) -> str:
    """
    Format duration in seconds to human-readable string.

    Args:
        seconds: Duration in seconds

    Returns:
        str: Formatted duration (e.g., "2m 35s", "1h 15m 23s", "42s")
    """
    seconds = int(seconds)

    if seconds < 60:
        return f"{seconds}s"

    minutes = seconds // 60
    secs = seconds % 60

    if minutes < 60:
        return f"{minutes}m {secs}s"

    hours = minutes // 60
    mins = minutes % 60
    return f"{hours}h {mins}m {secs}s"


def banner(text: str) -> None:
    print()
    print("=" * 80)
    print(text)
    print("=" * 80)
