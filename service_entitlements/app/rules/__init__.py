"""
Entitlement rules package.

Defines the per-user context and the engine that answers "can this user
use feature X" and, when not, "which cheapest plan unlocks it".

Modules of interest:
- models: UserContext, LockedReason and the HTTP request/response models.
- engine: Feature, course and path access checks over the plan registry.

The engine is pure and in-memory; it holds no per-user state.
"""
