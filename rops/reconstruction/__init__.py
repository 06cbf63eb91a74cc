"""
Normal estimation and triangulation of captured point clouds.

Requires open3d (installed with the 'reconstruction' extra).
"""
