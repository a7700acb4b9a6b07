"""Tests for the composition root."""

from datetime import date
from decimal import Decimal
from unittest.mock import MagicMock

from giving_engine.domain.constants import Role
from giving_engine.domain.models import AccessContext
from giving_engine.infrastructure import container as container_module
from giving_engine.infrastructure.clock import FixedClock
from giving_engine.infrastructure.settings import GivingSettings
from tests.fakes import (
    NOW,
    InMemoryCategoryRepository,
    InMemoryDonationRepository,
    make_draft,
)


def test_build_database_adapter_uses_settings_url():
    """The adapter is bound to the configured ledger URL."""
    adapter = container_module.build_database_adapter(
        GivingSettings(ledger_db_url="sqlite://")
    )

    assert str(adapter.get_ledger_engine().url) == "sqlite://"


def test_build_engine_wires_sql_ledger_end_to_end():
    """Recording and verifying a gift updates statistics, cache and views."""
    engine = container_module.build_engine(
        settings=GivingSettings(ledger_db_url="sqlite://"),
        clock=FixedClock(NOW),
        logger=MagicMock(),
    )
    created = engine.category_admin.initialize_default_categories("admin")
    tithes = next(c for c in created if c.name == "Tithes")

    engine.cache.activate_subject("donor-1")
    donation = engine.ledger.create(make_draft("120.00", category_id=tithes.id))
    engine.ledger.verify(donation.id, "treasurer")

    stats = engine.categories.get(tithes.id).statistics
    assert stats.total_amount == Decimal("120.00")
    assert stats.donation_count == 1
    assert engine.cache.get_cached("donor-1").summary.total_amount == Decimal(
        "120.00"
    )
    records = engine.views.list_donations(AccessContext(Role.AGGREGATE_ACCESS))
    assert [record["id"] for record in records] == [donation.id]
    assert "donor_name" not in records[0]
    summary = engine.summaries.execute(date(2024, 1, 1), date(2024, 12, 31))
    assert summary.total_donations == Decimal("120.00")
    assert engine.statistics.reconcile_all() == []

    receipt = engine.statements.donation_receipt(
        AccessContext(Role.SELF_ACCESS, "donor-1"), donation.id
    )
    assert receipt["receipt_number"] == "R-2024-001"
    assert engine.donations.get(donation.id).receipt_number == "R-2024-001"


def test_build_engine_accepts_injected_repositories():
    """Injected repositories skip the SQL adapter."""
    donations = InMemoryDonationRepository()
    categories = InMemoryCategoryRepository()

    engine = container_module.build_engine(
        settings=GivingSettings(),
        donations=donations,
        categories=categories,
        clock=FixedClock(NOW),
        logger=MagicMock(),
    )

    assert engine.donations is donations
    assert engine.categories is categories
    assert engine.change_feed.subscriber_count() == 1
