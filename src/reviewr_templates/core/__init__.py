"""Core infrastructure: paths, configuration, models and the template catalog."""
