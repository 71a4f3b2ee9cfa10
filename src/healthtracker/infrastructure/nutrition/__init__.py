"""Nutrition data infrastructure package."""

from healthtracker.infrastructure.nutrition.usda_client import UsdaApiError, UsdaClient

__all__ = ["UsdaApiError", "UsdaClient"]
