"""Payload normalization for sensor and location ingestion."""
