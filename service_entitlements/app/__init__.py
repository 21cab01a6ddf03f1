"""
Entitlements Service package for the course platform.

This package turns quiz answers into an outcome path and decides whether a
user's subscription tier unlocks a gated feature. It provides:

- app.main: API surface for path assignment, entitlement checks and health.
- app.registry: Static plan table and locked-feature copy.
- app.paths: Quiz question metadata and the ordered path rule table.
- app.rules: Entitlement engine and request/response models.
- app.graph: Decision graph builder for admin reporting.

Guidelines:
- The service is stateless; callers own persistence of answers and users.
- Keep evaluation deterministic and observable (metrics + logs).
- Access checks fail closed; path assignment falls back to STARTER.
"""
