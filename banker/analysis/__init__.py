"""
Analysis package for the Banker's Algorithm Resource Manager.
Event log and metrics.
"""
