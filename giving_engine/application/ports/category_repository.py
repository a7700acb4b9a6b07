"""Port for donation category storage."""

from typing import Protocol

from giving_engine.domain.models import Category


class CategoryRepositoryPort(Protocol):
    """Port exposing keyed access to donation categories."""

    def add(self, category: Category) -> Category:
        """Store a new category and return it."""

    def get(self, category_id: str) -> Category | None:
        """Return a category by id, or None when unknown."""

    def save(self, category: Category) -> Category:
        """Replace an existing category and return it."""

    def find_by_name(self, name: str) -> Category | None:
        """Return the category with the exact name, if any."""

    def list_all(self) -> list[Category]:
        """Return all categories, active and inactive."""

    def list_active(self) -> list[Category]:
        """Return active categories ordered by display order."""


__all__ = ["CategoryRepositoryPort"]
