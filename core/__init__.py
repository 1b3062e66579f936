"""Core (UI-agnostic) sales productivity dashboard logic.

This package contains:
- data loading (Google Sheets CSV -> pandas) and numeric coercion
- filter selection and the shared filter predicate
- cascading filter options
- page compute functions (JSON-serializable payloads)
- chart helpers (Altair -> Vega-Lite spec dict)
"""
