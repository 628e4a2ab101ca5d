"""
Analysis package for the Resource Allocation & Deadlock Simulator.
"""
