"""
CyberX Event Management System - Test Suite

This package contains automated tests for the application.

Structure:
- unit/: Unit tests for services, utilities, and models
- integration/: Integration tests for API endpoints
- e2e/: End-to-end tests for complete workflows
"""

__version__ = "0.1.0"
