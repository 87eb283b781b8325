"""
Site Engine

Deliverability risk assessment for UK property development sites.

Modules:
  risk    Deterministic risk-scoring engine (pure computation)
  config  Environment-driven settings for the API and CLI
  log     Structured logging helpers

Usage:
    from site_engine.risk import RiskAssessmentInput, calculate_risk_profile
"""

__version__ = "0.3.0"
