#!/usr/bin/env python3
"""
gltfscene
Decodes glTF 2.0 / GLB documents into immutable, engine-ready scene values.

Usage:
    from gltfscene import load_gltf

    scene = load_gltf("model.glb")
    for root in scene.root_nodes:
        print(scene.nodes[root].name)
"""

from .core import (
    DecoderOptions,
    DecodedScene,
    DecodedMesh,
    DecodedPrimitive,
    DecodedMaterial,
    DecodedNode,
    Vertex,
    ShadingMaterial,
    GltfError,
    GltfIoError,
    GltfParseError,
    GltfMissingDataError,
    resolve_root_nodes,
    find_cycles,
    iter_instances,
)
from .readers import create_reader

__version__ = "1.0.0"


def load_gltf(path, options=None) -> DecodedScene:
    """Decode a .gltf or .glb file

    One synchronous pass: the document and its buffers are loaded, every
    material, mesh and node is decoded, and hierarchy roots are resolved.
    The result holds no reference to the document or its buffers.

    Args:
        path: Path to the document
        options: DecoderOptions, defaults to best-effort decoding

    Returns:
        DecodedScene: Decoded meshes, materials, nodes and root indices

    Raises:
        GltfIoError: If the document cannot be opened or its container is malformed
        GltfParseError: If document contents are structurally corrupt
        GltfMissingDataError: Under strict options, if a primitive is unusable
    """
    reader = create_reader(path, options)
    return reader.extract_scene_data()


__all__ = [
    'load_gltf',
    'DecoderOptions',
    'DecodedScene',
    'DecodedMesh',
    'DecodedPrimitive',
    'DecodedMaterial',
    'DecodedNode',
    'Vertex',
    'ShadingMaterial',
    'GltfError',
    'GltfIoError',
    'GltfParseError',
    'GltfMissingDataError',
    'resolve_root_nodes',
    'find_cycles',
    'iter_instances',
]
