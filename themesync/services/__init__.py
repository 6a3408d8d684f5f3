"""
themesync services:
- config - Remote fetch, validation, caching and fallback
- controller - Observable Loading / Ready / Error theme state
"""
