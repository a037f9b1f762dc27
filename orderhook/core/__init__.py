"""Core configuration, logging and infrastructure."""
