"""Core runtime: errors, settings, logging, data models and the sync pipeline."""
