"""Chat channel integrations."""
