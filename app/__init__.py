"""Pipeline Tracker — sales opportunity tracking and dashboard analytics."""
