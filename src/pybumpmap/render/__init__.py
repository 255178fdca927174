"""Heatmap rendering.

Pure functions from a store snapshot, a viewport and a projection to a
list of draw commands; the host owns the actual drawing surface.
"""
