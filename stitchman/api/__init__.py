"""
Stitchman REST API.

Provides DRF ViewSets for:
- Order (read-only + lifecycle actions)
- Sewer (list/create + activate/deactivate)
- Metrics (summary, daily breakdown, dashboard, per-sewer overview)
"""
