"""Test package for world-metrics-atlas.

This package contains:
- Unit tests (test_spatial.py, test_scales.py, test_registry.py, test_series.py,
  test_render.py, test_config_loader.py)
- Integration tests (test_integration.py)
- Test configuration and shared fixtures (conftest.py)
"""
