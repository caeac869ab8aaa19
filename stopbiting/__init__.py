"""Hand-to-mouth detection monitor."""
