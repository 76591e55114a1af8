"""
Mental Reset Planner - a guided wellness journaling service.

This package provides the form state, activity policy and persistence gateway
behind the "calm down & refocus" planner, plus an HTTP API and CLI tools.
"""

__version__ = "0.1.0"
