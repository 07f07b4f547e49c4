"""Shared utility helpers used across services."""
