#!/usr/bin/env python3
"""
Scene Data Module
Engine-ready data structures for decoded glTF scenes.

Readers decode a document into these structures once; renderers, material
resolution and scene instantiation consume them without knowledge of the
source format. Every cross-reference is a plain integer index into a sibling
tuple, so a DecodedScene is a flat value with no reference cycles and no
link back into the source document or its buffers.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from .shading import ShadingMaterial


@dataclass(frozen=True)
class Vertex:
    """Single interleaved vertex

    Attributes:
        position: (x, y, z)
        normal: (nx, ny, nz), (0, 1, 0) when the source has no normals
        uv: (u, v) from the first UV channel, (0, 0) when absent
    """
    position: Tuple[float, float, float]
    normal: Tuple[float, float, float]
    uv: Tuple[float, float]


@dataclass(frozen=True)
class DecodedPrimitive:
    """One renderable surface of a mesh

    Attributes:
        vertices: Interleaved vertices
        indices: Vertex indices widened to 32-bit unsigned range
        material_index: Index into DecodedScene.materials, None if unbound
    """
    vertices: Tuple[Vertex, ...]
    indices: Tuple[int, ...]
    material_index: Optional[int] = None

    @property
    def vertex_count(self) -> int:
        return len(self.vertices)

    @property
    def triangle_count(self) -> int:
        return len(self.indices) // 3

    @property
    def positions(self) -> Tuple[Tuple[float, float, float], ...]:
        return tuple(v.position for v in self.vertices)

    @property
    def normals(self) -> Tuple[Tuple[float, float, float], ...]:
        return tuple(v.normal for v in self.vertices)

    @property
    def uvs(self) -> Tuple[Tuple[float, float], ...]:
        return tuple(v.uv for v in self.vertices)

    def to_mesh_arrays(self) -> Tuple[np.ndarray, np.ndarray]:
        """Convert to upload-ready arrays

        Returns:
            tuple: (vertices, indices) where:
                - vertices: float32 array of shape (N, 8), position/normal/uv
                - indices: uint32 array of shape (M,)
        """
        vertices = np.array(
            [v.position + v.normal + v.uv for v in self.vertices],
            dtype=np.float32,
        ).reshape(-1, 8)
        indices = np.array(self.indices, dtype=np.uint32)
        return vertices, indices


@dataclass(frozen=True)
class DecodedMesh:
    """Named group of primitives, in source declaration order"""
    name: str
    primitives: Tuple[DecodedPrimitive, ...]


@dataclass(frozen=True)
class DecodedMaterial:
    """Metallic-roughness material parameters

    Attributes:
        name: Material name (placeholder if unnamed)
        base_color: Base color factor (RGBA)
        metallic: Metallic factor
        roughness: Roughness factor
        base_color_texture: Opaque texture reference, None if no texture is bound
    """
    name: str
    base_color: Tuple[float, float, float, float]
    metallic: float
    roughness: float
    base_color_texture: Optional[str] = None

    def to_shading_material(self) -> ShadingMaterial:
        """Convert to the renderer's specular/shininess material"""
        return ShadingMaterial.from_roughness(
            self.base_color[:3],
            self.roughness,
            use_texture=self.base_color_texture is not None,
        )


@dataclass(frozen=True)
class DecodedNode:
    """Node in the scene hierarchy

    Attributes:
        name: Node name (placeholder if unnamed)
        translation: Local translation (x, y, z)
        rotation: Local rotation as (x, y, z, w) unit quaternion
        scale: Local scale (sx, sy, sz)
        mesh_index: Index into DecodedScene.meshes, None if the node has no mesh
        children: Child node indices in source order
    """
    name: str
    translation: Tuple[float, float, float]
    rotation: Tuple[float, float, float, float]
    scale: Tuple[float, float, float]
    mesh_index: Optional[int] = None
    children: Tuple[int, ...] = ()


@dataclass(frozen=True)
class DecodedScene:
    """Complete decoded document

    Attributes:
        meshes: All meshes, indexed as in the source document
        materials: All materials, indexed as in the source document
        nodes: All nodes, indexed as in the source document
        root_nodes: Unique indices of hierarchy roots
    """
    meshes: Tuple[DecodedMesh, ...]
    materials: Tuple[DecodedMaterial, ...]
    nodes: Tuple[DecodedNode, ...]
    root_nodes: Tuple[int, ...]

    def get_mesh_by_name(self, name: str) -> Optional[DecodedMesh]:
        """Find mesh by name

        Args:
            name: Mesh name to find

        Returns:
            DecodedMesh if found, None otherwise
        """
        for mesh in self.meshes:
            if mesh.name == name:
                return mesh
        return None

    def get_material_by_name(self, name: str) -> Optional[DecodedMaterial]:
        """Find material by name

        Args:
            name: Material name to find

        Returns:
            DecodedMaterial if found, None otherwise
        """
        for material in self.materials:
            if material.name == name:
                return material
        return None

    def get_node_by_name(self, name: str) -> Optional[DecodedNode]:
        """Find node by name

        Args:
            name: Node name to find

        Returns:
            DecodedNode if found, None otherwise
        """
        for node in self.nodes:
            if node.name == name:
                return node
        return None
