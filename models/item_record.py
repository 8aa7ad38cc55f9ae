from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional


@dataclass
class ItemRecord:
    """In-memory representation of a row in the item table.

    Attributes:
        item_id: Primary key; equal to the reference image's filename.
        name: Short item name, e.g. "Blue Backpack".
        location: Where the item can be collected.
        description: Free-form description entered by the administrator.
        image_url: Public URL of the stored reference image.
        created_at: Unix timestamp (seconds) when the row was written.
    """

    item_id: str
    name: str
    location: str
    description: str
    image_url: Optional[str] = None
    created_at: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
