"""
Models package for the Resource Allocation & Deadlock Simulator.
Contains processes, resources, allocation-graph edges and the system state.
"""
