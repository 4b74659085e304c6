"""HTTP API for interview scheduling, turns and reports."""
