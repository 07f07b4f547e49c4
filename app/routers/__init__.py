"""
routers/ — FastAPI route modules.

opportunities.py is the CRUD surface, dashboard.py serves the metrics.
Both are thin: they parse input, call services, return responses.
"""
