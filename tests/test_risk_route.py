"""
Tests for planning route adjustment.

Tests:
- Status deltas (consented, refused, appealed, pending)
- Route overlays (PiP, pre-app, outline, full)
- Clamping of adjusted categories
- Inputs are left untouched
"""

import pytest

from site_engine.risk import (
    ImpactLevel,
    PlanningRoute,
    PlanningRouteInfo,
    PlanningStatus,
    RiskCategoryKey,
    adjust_for_planning_route,
    build_categories,
)
from site_engine.risk.fixtures import amber_input, green_input, red_input


# --- Test Data Fixtures ---

@pytest.fixture
def amber_categories():
    """Amber site categories: planning 58, deliverability 24."""
    return build_categories(amber_input())


def _route(route, status, reference=None):
    return PlanningRouteInfo(
        route=PlanningRoute(route),
        status=PlanningStatus(status),
        application_reference=reference,
    )


def _adjust(categories, route, status, reference=None):
    return adjust_for_planning_route(
        categories.planning,
        categories.deliverability,
        _route(route, status, reference),
    )


def _added_ids(before, after):
    return [f.id for f in after.factors[len(before.factors):]]


# --- Baseline ---

class TestBaseline:
    """Check the fixture the route tests build on."""

    def test_amber_baseline(self, amber_categories):
        assert amber_categories.planning.score == 58
        assert amber_categories.deliverability.score == 24
        assert [f.id for f in amber_categories.deliverability.factors] == [
            "programme-scale",
            "abnormals",
        ]


# --- Status Tests ---

class TestStatusDeltas:
    """Test status-driven adjustments."""

    def test_consented_lowers_planning(self, amber_categories):
        """Test consent reduces planning by 35 and records a factor."""
        planning, delivery = _adjust(amber_categories, "full", "consented")

        assert planning.score == 23
        assert delivery.score == 24
        consent = planning.factors[-1]
        assert consent.id == "planning-consent"
        assert consent.score == -35
        assert consent.impact == ImpactLevel.LOW
        assert consent.category == RiskCategoryKey.PLANNING

    def test_consented_floors_at_zero(self):
        categories = build_categories(green_input())
        planning, _ = _adjust(categories, "full", "consented")
        assert planning.score == 0
        assert [f.id for f in planning.factors] == ["planning-consent"]

    def test_refused(self, amber_categories):
        planning, delivery = _adjust(amber_categories, "full", "refused")
        assert planning.score == 58
        assert delivery.score == 24 + 45
        assert _added_ids(amber_categories.deliverability, delivery) == ["planning-refusal"]
        assert delivery.factors[-1].impact == ImpactLevel.CRITICAL

    def test_appealed(self, amber_categories):
        _, delivery = _adjust(amber_categories, "outline", "appealed")
        assert delivery.score == 24 + 40
        assert _added_ids(amber_categories.deliverability, delivery) == ["planning-appeal"]

    @pytest.mark.parametrize("route", ["outline", "full", "reserved-matters", "none"])
    def test_pending(self, amber_categories, route):
        """Test an in-progress application adds the pending factor."""
        _, delivery = _adjust(amber_categories, route, "in-progress")
        assert delivery.score == 24 + 20
        assert _added_ids(amber_categories.deliverability, delivery) == ["planning-pending"]

    def test_pre_app_in_progress_is_not_pending(self, amber_categories):
        _, delivery = _adjust(amber_categories, "pre-app", "in-progress")
        assert _added_ids(amber_categories.deliverability, delivery) == ["pre-app-no-consent"]
        assert delivery.score == 24 + 25

    def test_no_route_not_started_is_unchanged(self, amber_categories):
        planning, delivery = _adjust(amber_categories, "none", "not-started")
        assert planning.score == 58
        assert delivery.score == 24
        assert len(delivery.factors) == 2


# --- Overlay Tests ---

class TestRouteOverlays:
    """Test route-specific overlays."""

    def test_pip_consented(self, amber_categories):
        """Test PiP consent still needs Technical Details Consent."""
        planning, delivery = _adjust(amber_categories, "pip", "consented")
        assert planning.score == 23
        assert delivery.score == 24 + 18
        assert _added_ids(amber_categories.deliverability, delivery) == ["pip-tdc-required"]

    def test_pip_not_started(self, amber_categories):
        _, delivery = _adjust(amber_categories, "pip", "not-started")
        assert delivery.score == 24 + 15
        assert _added_ids(amber_categories.deliverability, delivery) == ["pip-two-stage"]

    def test_pip_in_progress_stacks_pending_then_overlay(self, amber_categories):
        _, delivery = _adjust(amber_categories, "pip", "in-progress")
        assert delivery.score == 24 + 20 + 15
        assert _added_ids(amber_categories.deliverability, delivery) == [
            "planning-pending",
            "pip-two-stage",
        ]

    def test_pip_refused_has_no_overlay(self, amber_categories):
        _, delivery = _adjust(amber_categories, "pip", "refused")
        assert _added_ids(amber_categories.deliverability, delivery) == ["planning-refusal"]

    @pytest.mark.parametrize("status", ["not-started", "consented", "refused"])
    def test_pre_app_always_overlaid(self, amber_categories, status):
        _, delivery = _adjust(amber_categories, "pre-app", status)
        assert "pre-app-no-consent" in _added_ids(amber_categories.deliverability, delivery)

    def test_outline_consented(self, amber_categories):
        _, delivery = _adjust(amber_categories, "outline", "consented")
        assert delivery.score == 24 + 15
        assert _added_ids(amber_categories.deliverability, delivery) == ["outline-reserved-matters"]

    def test_outline_not_started_has_no_overlay(self, amber_categories):
        _, delivery = _adjust(amber_categories, "outline", "not-started")
        assert delivery.score == 24

    def test_full_not_started(self, amber_categories):
        _, delivery = _adjust(amber_categories, "full", "not-started")
        assert delivery.score == 24 + 10
        assert _added_ids(amber_categories.deliverability, delivery) == [
            "full-application-commitment"
        ]

    def test_reserved_matters_consented(self, amber_categories):
        planning, delivery = _adjust(amber_categories, "reserved-matters", "consented")
        assert planning.score == 23
        assert delivery.score == 24


# --- Clamping and Purity ---

class TestAdjustmentBounds:
    """Test clamping and that inputs are not modified."""

    def test_deliverability_clamped(self):
        """Test red deliverability (63) plus refusal caps at 100."""
        categories = build_categories(red_input())
        assert categories.deliverability.score == 63
        _, delivery = _adjust(categories, "full", "refused")
        assert delivery.score == 100
        assert delivery.factors[-1].score == 45

    def test_inputs_unchanged(self, amber_categories):
        planning_before = amber_categories.planning
        delivery_before = amber_categories.deliverability
        planning_factor_ids = [f.id for f in planning_before.factors]
        delivery_factor_ids = [f.id for f in delivery_before.factors]

        planning, delivery = _adjust(amber_categories, "pip", "consented")

        assert planning is not planning_before
        assert delivery is not delivery_before
        assert planning_before.score == 58
        assert delivery_before.score == 24
        assert [f.id for f in planning_before.factors] == planning_factor_ids
        assert [f.id for f in delivery_before.factors] == delivery_factor_ids

    def test_weights_and_names_preserved(self, amber_categories):
        planning, delivery = _adjust(amber_categories, "full", "refused")
        assert planning.name == amber_categories.planning.name
        assert planning.weight == 0.35
        assert delivery.weight == 0.20
        assert delivery.max_possible_score == 100


# --- Text ---

class TestReferenceText:
    """Test application references in factor text."""

    def test_reference_in_description_and_evidence(self, amber_categories):
        _, delivery = _adjust(amber_categories, "full", "refused", reference="23/01234/FUL")
        factor = delivery.factors[-1]
        assert factor.description.startswith(
            "Full planning application refused (Ref: 23/01234/FUL)."
        )
        assert factor.evidence == "23/01234/FUL"

    def test_default_evidence_without_reference(self, amber_categories):
        _, delivery = _adjust(amber_categories, "outline", "appealed")
        assert delivery.factors[-1].evidence == "Planning appeal in progress"
        assert "(Ref:" not in delivery.factors[-1].description

    def test_consent_description_uses_route_name(self, amber_categories):
        planning, _ = _adjust(amber_categories, "pip", "consented")
        assert planning.factors[-1].description.startswith(
            "Permission in Principle consent granted."
        )
