"""Domain layer: entities, errors, parsing and repository contracts."""
