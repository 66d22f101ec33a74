"""Services for known destination sites."""

import uuid
from dataclasses import dataclass
from typing import Protocol

from fieldforce.domain.geo import Coordinate, distance_meters, is_unset
from fieldforce.domain.sites import SITE_CATEGORIES, Site


class SiteRepository(Protocol):
    """Persistence interface for known sites."""

    def list_sites(self) -> list[Site]:
        """Return sites, most recently defined first."""

    def add_site(self, site: Site) -> None:
        """Store a new site ahead of the existing ones."""


@dataclass
class SiteService:
    """Application service for site lookups and definitions."""

    repository: SiteRepository

    def list_sites(self) -> list[Site]:
        """Return all known sites."""
        return self.repository.list_sites()

    def define_site(self, name: str, category: str, coordinate: Coordinate) -> Site:
        """Register a destination that was not known before."""
        name = name.strip()
        if not name:
            raise ValueError("Site name is required")
        if category not in SITE_CATEGORIES:
            raise ValueError(f"Unknown site category: {category}")
        if is_unset(coordinate):
            raise ValueError("Site coordinate is required")
        site = Site(
            id=f"S-{uuid.uuid4().hex[:8]}",
            name=name,
            category=category,
            coordinate=coordinate,
        )
        self.repository.add_site(site)
        return site

    def nearest_site(
        self, coordinate: Coordinate, max_distance_meters: float | None = None
    ) -> tuple[Site, float] | None:
        """Return the closest site and its distance, if any is in range."""
        ranked = sorted(
            (
                (site, distance_meters(coordinate, site.coordinate))
                for site in self.repository.list_sites()
            ),
            key=lambda pair: pair[1],
        )
        if not ranked:
            return None
        site, distance = ranked[0]
        if max_distance_meters is not None and distance > max_distance_meters:
            return None
        return site, distance
