"""
Utilities for the Banker's Algorithm Resource Manager.
Logging and scenario loading.
"""
