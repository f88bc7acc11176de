"""
Algorithms package for the Banker's Algorithm Resource Manager.
Contains the safety simulation and request evaluation.
"""
