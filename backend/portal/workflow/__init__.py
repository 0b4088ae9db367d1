"""Shoot workflow: status vocabularies and phase visibility."""
