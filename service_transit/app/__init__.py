"""
Transit Service package for the Transit Access Layer.

The service fronts the bus and train agency APIs, shielding callers from
upstream schema differences, rate limits and latency:
- Caching: short-lived TTL cache with per-key hit/miss accounting
- Normalization: one domain model for bus and train payloads
- Uniform error mapping for upstream failures

Structure:
- app.main: FastAPI app and routes.
- app.adapters: HTTP clients for the upstream APIs.
- app.caching: Cache store and key derivation.
- app.normalization: Raw upstream shapes and per-resource normalizers.
- app.transit: Resource services (cache-aside pipelines).
"""
