"""Densities that convolve basis functions with a resolution model."""
