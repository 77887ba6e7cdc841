# Airline display names derived from the board's logo image paths.

from typing import Optional

OTHER_AIRLINE = "Other"


def resolve_airline_name(image_ref: Optional[str]) -> str:
    """Turn ``/images/air-india_logo.png`` into ``"air india"``.

    Missing or unreadable references, and references that reduce to an empty
    name, resolve to ``OTHER_AIRLINE``.
    """
    if not image_ref:
        return OTHER_AIRLINE
    try:
        filename = image_ref.split("/")[-1].split(".")[0]
        name = filename.split("_")[0].replace("-", " ")
    except (AttributeError, TypeError):
        return OTHER_AIRLINE
    return name or OTHER_AIRLINE
