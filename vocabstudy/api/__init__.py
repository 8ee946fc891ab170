"""HTTP API for the vocab study engine."""
