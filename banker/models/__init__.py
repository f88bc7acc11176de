"""
Models package for the Banker's Algorithm Resource Manager.
Resource pool, allocation records and system snapshots.
"""
