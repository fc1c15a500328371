"""External program launching."""
