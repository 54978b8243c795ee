"""
CLI Commands for House Points.

Usage:
    flask points seed                      # Default houses, categories, rewards
    flask points reconcile                 # Recompute every house total
    flask points reconcile --house-id 1    # Recompute one house
    flask points reset --yes               # Delete all ledger entries
    flask points create-admin              # Create an admin account
"""
from .points import init_app as init_points_commands


def init_app(app):
    """Register all CLI commands with the Flask app."""
    init_points_commands(app)
