"""Clinic appointment calendar view model service."""

__version__ = "0.1.0"
