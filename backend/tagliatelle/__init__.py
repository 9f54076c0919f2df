"""Tagliatelle media catalogue backend."""
