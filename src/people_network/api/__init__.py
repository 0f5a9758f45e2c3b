"""HTTP access surface for people-network."""
