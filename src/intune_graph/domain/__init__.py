"""Domain layer: graph model, key rules, converters and reconciliation."""
