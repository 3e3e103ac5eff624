"""Application – audit trail use cases (framework-agnostic)."""
