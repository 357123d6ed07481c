"""HTTP API for Unified Blog."""
