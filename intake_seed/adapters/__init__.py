"""Adapters for the Oracle database and the external case-management API."""
