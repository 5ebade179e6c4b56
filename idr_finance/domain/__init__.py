"""
idr_finance.domain — Canonical enumerations and dataset models.

Nothing in here imports from other idr_finance sub-packages (only stdlib and
Pydantic), so every layer can depend on it freely.
"""
