"""Spec AI: multi-agent chat backend over Japanese open data."""
