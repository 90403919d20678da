"""Wire models for external payloads."""
