"""Potluck services: entries, votes and guest profiles."""
