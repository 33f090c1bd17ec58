"""Domain layer: framework-free models and rules."""
