"""Domain layer: entities, value objects and services of the QAT plugin."""
