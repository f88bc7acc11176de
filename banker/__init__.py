"""
Banker's Algorithm Resource Manager.
Grants or denies multi-resource requests so the system never enters an
unsafe (potentially deadlocked) state.
"""
