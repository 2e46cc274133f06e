"""Core configuration, logging and services."""
