"""Use case administering donation categories."""

from collections.abc import Callable, Mapping
from dataclasses import replace
import uuid

from giving_engine.application.ports.category_repository import (
    CategoryRepositoryPort,
)
from giving_engine.application.ports.clock import ClockPort
from giving_engine.application.use_cases.update_category_statistics import (
    CategoryStatisticsUpdater,
)
from giving_engine.domain.constants import LineItem
from giving_engine.domain.errors import CategoryValidationError, NotFoundError
from giving_engine.domain.models import Category, CategoryDraft
from giving_engine.domain.services.compliance import validate_category_compliance
from giving_engine.domain.services.validation import (
    validate_category_draft,
    validate_currency_value,
)
from giving_engine.infrastructure.logging.logger import get_app_logger

DEFAULT_CATEGORIES = (
    CategoryDraft(
        name="Tithes",
        default_line_item=LineItem.CASH_CONTRIBUTIONS,
        is_tax_deductible=True,
        display_order=10,
        description="Regular tithes and offerings",
    ),
    CategoryDraft(
        name="Offerings",
        default_line_item=LineItem.CASH_CONTRIBUTIONS,
        is_tax_deductible=True,
        display_order=20,
        description="General offerings",
    ),
    CategoryDraft(
        name="Building Fund",
        default_line_item=LineItem.CASH_CONTRIBUTIONS,
        is_tax_deductible=True,
        display_order=30,
        description="Building and facilities fund",
    ),
    CategoryDraft(
        name="Missions",
        default_line_item=LineItem.CASH_CONTRIBUTIONS,
        is_tax_deductible=True,
        display_order=40,
        description="Missions and outreach",
    ),
    CategoryDraft(
        name="Benevolence",
        default_line_item=LineItem.CASH_CONTRIBUTIONS,
        is_tax_deductible=True,
        display_order=50,
        description="Benevolence and assistance",
    ),
)


def _new_category_id() -> str:
    return uuid.uuid4().hex


class ManageCategoriesUseCase:
    """Create, edit, order and deactivate donation categories.

    Categories are never deleted; deactivated ones stay available for
    historical reports. Edits go through the statistics updater so they
    never overwrite running totals.
    """

    def __init__(
        self,
        category_repository: CategoryRepositoryPort,
        statistics_updater: CategoryStatisticsUpdater,
        clock: ClockPort,
        logger=None,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        self._categories = category_repository
        self._updater = statistics_updater
        self._clock = clock
        self._logger = logger or get_app_logger()
        self._id_factory = id_factory or _new_category_id

    def create(
        self,
        draft: CategoryDraft,
        created_by: str | None = None,
    ) -> Category:
        """Validate and store a new category.

        Args:
            draft: Category attributes.
            created_by: Administrator creating the category.

        Returns:
            Category: The stored category with empty statistics.

        Raises:
            CategoryValidationError: If the name is taken or invalid, or the
                display order is already used.
            TaxonomyValidationError: If the line item cannot be deductible.
        """
        validate_category_draft(draft)
        name = draft.name.strip()
        if self._categories.find_by_name(name) is not None:
            raise CategoryValidationError(
                f"Category name already exists: {name}", field="name"
            )
        line_item = validate_category_compliance(
            draft.default_line_item, draft.is_tax_deductible
        )
        display_order = draft.display_order
        if display_order is None:
            display_order = self.next_display_order()
        elif draft.is_active and self._order_taken(display_order):
            raise CategoryValidationError(
                f"Display order {display_order} is already used",
                field="display_order",
            )
        now = self._clock.now()
        category = Category(
            id=self._id_factory(),
            name=name,
            default_line_item=line_item,
            is_tax_deductible=draft.is_tax_deductible,
            is_active=draft.is_active,
            display_order=display_order,
            description=draft.description,
            annual_goal=draft.annual_goal,
            include_in_reports=draft.include_in_reports,
            reporting_category=draft.reporting_category,
            created_by=created_by,
            created_at=now,
            updated_at=now,
        )
        stored = self._categories.add(category)
        self._logger.info(f"Category {stored.name} created ({stored.id})")
        return stored

    def update_details(
        self,
        category_id: str,
        *,
        description: str | None = None,
        annual_goal=None,
        include_in_reports: bool | None = None,
        reporting_category: str | None = None,
    ) -> Category:
        """Change descriptive attributes; unset arguments are kept."""
        if annual_goal is not None:
            validate_currency_value(annual_goal, "annual_goal")

        def mutate(category: Category) -> Category:
            return replace(
                category,
                description=(
                    description if description is not None else category.description
                ),
                annual_goal=(
                    annual_goal if annual_goal is not None else category.annual_goal
                ),
                include_in_reports=(
                    include_in_reports
                    if include_in_reports is not None
                    else category.include_in_reports
                ),
                reporting_category=(
                    reporting_category
                    if reporting_category is not None
                    else category.reporting_category
                ),
            )

        return self._updater.update_category(category_id, mutate)

    def change_compliance(
        self,
        category_id: str,
        default_line_item: LineItem | str,
        is_tax_deductible: bool,
    ) -> Category:
        """Change the default line item and deductibility together."""
        line_item = validate_category_compliance(default_line_item, is_tax_deductible)
        return self._updater.update_category(
            category_id,
            lambda category: replace(
                category,
                default_line_item=line_item,
                is_tax_deductible=is_tax_deductible,
            ),
        )

    def rename(self, category_id: str, new_name: str) -> Category:
        """Rename a category and the display copies on its donations."""
        return self._updater.rename_category(category_id, new_name)

    def deactivate(self, category_id: str) -> Category:
        """Hide a category from new donations; history is kept."""
        category = self._updater.update_category(
            category_id, lambda category: replace(category, is_active=False)
        )
        self._logger.info(f"Category {category.name} deactivated")
        return category

    def activate(self, category_id: str) -> Category:
        """Reactivate a category, moving it to the end when its order is taken."""
        current = self._require(category_id)
        order = current.display_order
        if order <= 0 or self._order_taken(order, exclude_id=category_id):
            order = self.next_display_order()
        category = self._updater.update_category(
            category_id,
            lambda category: replace(category, is_active=True, display_order=order),
        )
        self._logger.info(f"Category {category.name} activated")
        return category

    def reorder(self, orders: Mapping[str, int]) -> list[Category]:
        """Assign new display orders to active categories.

        Args:
            orders: Category id mapped to its new display order.

        Returns:
            list[Category]: Active categories in their new order.

        Raises:
            CategoryValidationError: If an order is not positive, an order is
                repeated, or the result would collide with another active
                category.
            NotFoundError: If a category does not exist.
        """
        values = list(orders.values())
        if any(value <= 0 for value in values):
            raise CategoryValidationError(
                "Display orders must be greater than 0", field="display_order"
            )
        if len(set(values)) != len(values):
            raise CategoryValidationError(
                "Display orders must be unique", field="display_order"
            )
        for category_id in orders:
            self._require(category_id)
        untouched = {
            category.display_order
            for category in self._categories.list_active()
            if category.id not in orders
        }
        clashes = untouched & set(values)
        if clashes:
            raise CategoryValidationError(
                f"Display orders already used: {sorted(clashes)}",
                field="display_order",
            )
        for category_id, order in orders.items():
            self._updater.update_category(
                category_id,
                lambda category, order=order: replace(category, display_order=order),
            )
        self._logger.info(f"Reordered {len(orders)} categories")
        return self._categories.list_active()

    def next_display_order(self) -> int:
        """Return one past the highest display order among active categories."""
        orders = [category.display_order for category in self._categories.list_active()]
        return max(orders, default=0) + 1

    def initialize_default_categories(
        self,
        created_by: str | None = None,
    ) -> list[Category]:
        """Create the standard categories when none exist yet."""
        if self._categories.list_all():
            self._logger.info("Categories already exist; defaults not created")
            return []
        created = [self.create(draft, created_by) for draft in DEFAULT_CATEGORIES]
        self._logger.info(f"Created {len(created)} default categories")
        return created

    def ensure_display_order_integrity(self) -> int:
        """Give every active category a unique positive display order.

        Returns:
            int: Number of categories that received a new order.
        """
        active = self._categories.list_active()
        seen: set[int] = set()
        broken: list[Category] = []
        for category in sorted(active, key=lambda c: (c.display_order, c.name)):
            if category.display_order <= 0 or category.display_order in seen:
                broken.append(category)
            else:
                seen.add(category.display_order)
        next_order = max(seen, default=0)
        for category in broken:
            next_order += 1
            self._updater.update_category(
                category.id,
                lambda current, order=next_order: replace(
                    current, display_order=order
                ),
            )
        if broken:
            self._logger.warning(
                f"Fixed display order for {len(broken)} categories"
            )
        return len(broken)

    def list_active(self) -> list[Category]:
        return self._categories.list_active()

    def _order_taken(self, order: int, exclude_id: str | None = None) -> bool:
        return any(
            category.display_order == order and category.id != exclude_id
            for category in self._categories.list_active()
        )

    def _require(self, category_id: str) -> Category:
        category = self._categories.get(category_id)
        if category is None:
            raise NotFoundError("Category", category_id)
        return category


__all__ = ["DEFAULT_CATEGORIES", "ManageCategoriesUseCase"]
