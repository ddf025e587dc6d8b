"""Shared test infrastructure for the asset creator suite.

- sample_assets: concrete, abstract and single-instance asset classes
- mocks: in-memory stand-ins for the host collaborators
"""
