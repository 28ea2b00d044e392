"""
Shared utility functions.

This subpackage includes:
- config loading and path management
- seeding for reproducibility
- lightweight logging helpers used across the project.
"""
