#!/usr/bin/env python3
"""
Core Module
Format-agnostic decoded scene structures and the helpers that operate on them.
"""

from .config import DecoderOptions
from .errors import GltfError, GltfIoError, GltfParseError, GltfMissingDataError
from .hierarchy import resolve_root_nodes, find_cycles, iter_instances
from .scene_data import (
    DecodedScene,
    DecodedMesh,
    DecodedPrimitive,
    DecodedMaterial,
    DecodedNode,
    Vertex,
)
from .shading import ShadingMaterial

__all__ = [
    'DecoderOptions',
    'GltfError',
    'GltfIoError',
    'GltfParseError',
    'GltfMissingDataError',
    'resolve_root_nodes',
    'find_cycles',
    'iter_instances',
    'DecodedScene',
    'DecodedMesh',
    'DecodedPrimitive',
    'DecodedMaterial',
    'DecodedNode',
    'Vertex',
    'ShadingMaterial',
]
