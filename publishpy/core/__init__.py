"""Core publishpy components."""
