"""Service layer for the chat backend."""
