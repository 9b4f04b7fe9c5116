"""intake-seed: synthetic test data for the healthcare intake workflow.

This package provides a FastAPI backend that inspects Oracle schemas,
generates synthetic field values, writes verified patient/intake record sets
and proxies calls to the external case-management API.
"""

__version__ = "1.0.0"
