"""Pytest configuration and shared fixtures."""

# The truetime testing plugin is registered via a ``pytest11`` entry
# point for external consumers.  Our own suite disables it
# (``-p no:truetime``) and loads it here instead, so the truetime import
# chain happens after ``pytest-cov`` starts tracing.
pytest_plugins = ["truetime.testing._plugin"]
