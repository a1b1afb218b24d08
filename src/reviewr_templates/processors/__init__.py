"""Processors that validate, detect, install and render catalog templates."""
