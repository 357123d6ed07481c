"""Service layer: remote catalog, unification, reactions, permissions."""
