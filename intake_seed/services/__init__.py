"""Application services for schema inspection, lookups and intake creation."""
