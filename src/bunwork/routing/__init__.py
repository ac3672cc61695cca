"""Routing — per-method route tries with O(path-depth) matching.

Routes are registered during setup and frozen before the first request
is served.
"""
