"""
Utilities for the Resource Allocation & Deadlock Simulator: logging and scenario loading.
"""
