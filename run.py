#!/usr/bin/env python3
"""
Site Risk Engine - Demo and CLI

Scores the reference sites (green / amber / red), or a site supplied as a
JSON file, and prints the risk level, category scores and top flags.

Usage:
    python run.py
    python run.py --route pip --status consented
    python run.py --input site.json [--json]

The JSON file holds a RiskAssessmentInput in camelCase wire format,
optionally wrapped as {"input": {...}, "planningRoute": {...}}.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Optional

from site_engine.log import configure_logging, get_logger
from site_engine.risk import (
    PlanningRoute,
    PlanningRouteInfo,
    PlanningStatus,
    RiskAssessmentInput,
    RiskProfile,
    calculate_risk_profile,
    tag_value,
    validate_assessment_input,
)
from site_engine.risk.fixtures import REFERENCE_INPUTS


logger = get_logger("run")


def print_profile(name: str, profile: RiskProfile, top: int = 3) -> None:
    """Print a compact view of a risk profile."""
    categories = profile.categories
    print(f"\n=== {name} ===")
    print(f"Level: {profile.risk_level.value} | Score: {profile.overall_risk_score}")
    print(
        f"Planning {categories.planning.score}, "
        f"Financial {categories.financial.score}, "
        f"Deliverability {categories.deliverability.score}, "
        f"Market {categories.market.score}"
    )
    print(
        "Top flags: "
        + " | ".join(f"{f.level.value}: {f.title}" for f in profile.flags[:top])
    )
    print(f"Summary: {profile.summary}")


def load_input(path: Path) -> tuple[RiskAssessmentInput, Optional[PlanningRouteInfo]]:
    """Load an assessment (and optional planning route) from a JSON file."""
    with open(path, "r") as f:
        data = json.load(f)

    route = None
    if "input" in data:
        if data.get("planningRoute"):
            route = PlanningRouteInfo.from_dict(data["planningRoute"])
        data = data["input"]

    return RiskAssessmentInput.from_dict(data), route


def demo_reference_sites(route: Optional[PlanningRouteInfo]) -> None:
    """Score each reference site."""
    print("\n" + "=" * 60)
    print("  SITE RISK ENGINE - REFERENCE SITES")
    if route:
        print(f"  Planning route: {route.display_name} ({tag_value(route.status)})")
    print("=" * 60)

    for name, build in REFERENCE_INPUTS.items():
        profile = calculate_risk_profile(build(), route)
        print_profile(name.upper(), profile)
    print()


def main():
    parser = argparse.ArgumentParser(description="Site Risk Engine - Demo and CLI")
    parser.add_argument("--input", "-i", type=Path, help="JSON file with a site to score")
    parser.add_argument(
        "--route",
        choices=[r.value for r in PlanningRoute],
        help="Planning route (overrides any route in the input file)",
    )
    parser.add_argument(
        "--status",
        choices=[s.value for s in PlanningStatus],
        default=PlanningStatus.NOT_STARTED.value,
        help="Planning status (default: not-started)",
    )
    parser.add_argument("--reference", help="Planning application reference")
    parser.add_argument("--json", action="store_true", help="Print the full profile as JSON")
    args = parser.parse_args()

    configure_logging()

    route = None
    if args.route:
        route = PlanningRouteInfo(
            route=PlanningRoute(args.route),
            status=PlanningStatus(args.status),
            application_reference=args.reference,
        )

    if not args.input:
        demo_reference_sites(route)
        return 0

    try:
        assessment, file_route = load_input(args.input)
    except (OSError, ValueError, TypeError) as e:
        logger.error("input_load_failed", path=str(args.input), error=str(e))
        return 1

    route = route or file_route
    result = validate_assessment_input(assessment, route)
    for warning in result.warnings:
        logger.warning("input_warning", warning=warning)
    if not result:
        for error in result.errors:
            logger.error("input_invalid", field=error.field, message=error.message)
        return 1

    profile = calculate_risk_profile(assessment, route)

    if args.json:
        print(json.dumps(profile.to_dict(), indent=2))
    else:
        print_profile(args.input.name, profile, top=len(profile.flags))

    return 0


if __name__ == "__main__":
    sys.exit(main())
