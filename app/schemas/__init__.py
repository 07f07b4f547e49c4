"""
schemas/ — Pydantic request/response models for the Pipeline Tracker API

Provides input validation, auto-generated OpenAPI docs, and the camelCase
wire format the dashboard consumes.
"""
