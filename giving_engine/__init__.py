"""Donation aggregation and compliance-reporting engine."""
