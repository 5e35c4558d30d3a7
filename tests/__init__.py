"""
gostarter test suite
====================

This package contains the tests for gostarter.

Test Modules
------------
- test_models.py: Tests for Pydantic configuration models
- test_catalog.py: Tests for blueprint loading and lookup
- test_renderer.py: Tests for the template context, conditions and rendering
- test_disclosure.py: Tests for progressive disclosure rules
- test_validation.py: Tests for input validation rules
- test_builder.py: Tests for the interactive configuration builder
- test_generator.py: Tests for project generation, rollback and hooks
- test_settings.py: Tests for the user settings file
- test_cli.py: Tests for the command-line interface

Running Tests
-------------
    # Run all tests
    pytest

    # Run with coverage
    pytest --cov=src/gostarter

    # Run specific test class
    pytest tests/test_generator.py::TestRollback
"""
