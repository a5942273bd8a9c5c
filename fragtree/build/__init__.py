"""Fragmentation graph construction."""

from .graph_builder import FragmentationGraphBuilder

__all__ = ['FragmentationGraphBuilder']
