"""Core package for the school resource-booking dashboard."""
