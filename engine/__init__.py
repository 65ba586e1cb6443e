"""Dashboard state engine (UI-agnostic).

This package contains:
- time-range windowing over timestamped records
- view registries and the widget catalog
- chart/card selection state and the reducers that change it
- summary card derivation and pagination
- a seeded mock data source
- chart helpers (Altair -> Vega-Lite spec dict)
"""
