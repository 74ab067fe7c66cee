"""Availability and booking orchestration for HealthAssist consultations."""

__version__ = "0.1.0"
