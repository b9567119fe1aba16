"""Domain layer: entities, import items and the reconciliation engine."""
