"""HTTP API for the Campus Feed service."""
