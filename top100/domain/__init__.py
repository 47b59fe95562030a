"""Pure domain layer: entities, matching algorithms, ranking and errors."""
