"""
Algorithms package for the Resource Allocation & Deadlock Simulator.
Contains the request/release protocol, wait-for-graph deadlock detection
and Banker's safety algorithm.
"""
