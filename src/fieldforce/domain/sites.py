"""Known destination sites."""

from dataclasses import dataclass

from fieldforce.domain.geo import Coordinate

SITE_CATEGORIES: tuple[str, ...] = ("Client Site", "Office", "Warehouse", "Field")


@dataclass(frozen=True)
class Site:
    """A named place a tour can end at."""

    id: str
    name: str
    category: str
    coordinate: Coordinate
