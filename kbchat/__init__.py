"""Grounded knowledge-base chat assistant."""
