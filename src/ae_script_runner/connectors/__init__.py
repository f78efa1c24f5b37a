"""
Platform connectors for After Effects
"""
