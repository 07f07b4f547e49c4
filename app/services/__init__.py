"""
services/ — Business logic.

pipeline_metrics and pipeline_breakdowns are pure functions over an
opportunity snapshot; the rest wire them to the store and the API.
"""
