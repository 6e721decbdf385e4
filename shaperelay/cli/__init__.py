"""CLI module for ShapeRelay."""
