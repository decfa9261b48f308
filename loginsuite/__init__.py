"""
Login UI test suite package.

Keeps `loginsuite` importable for:
  - IDE navigation
  - pytest fixtures and plugins shared across suites
  - CI/CD module imports
"""
