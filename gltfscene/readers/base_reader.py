#!/usr/bin/env python3
"""
Base Reader Module
Abstract interface for decoding scene-interchange documents
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Any, Optional, Union

from ..core.config import DecoderOptions
from ..core.errors import GltfMissingDataError, GltfParseError
from ..core.hierarchy import find_cycles, resolve_root_nodes
from ..core.scene_data import (
    DecodedScene, DecodedMesh, DecodedPrimitive, DecodedMaterial, DecodedNode
)

logger = logging.getLogger(__name__)


class BaseReader(ABC):
    """Abstract base class for scene document readers

    Subclasses open the document in their constructor and decode single
    entities on request. extract_scene_data() drives the whole decode and
    assembles the immutable DecodedScene.
    """

    def __init__(self, file_path: Union[str, Path], options: Optional[DecoderOptions] = None):
        """Initialize reader with file path

        Args:
            file_path: Path to the scene document
            options: Decoder options, defaults to DecoderOptions()
        """
        self.file_path = Path(file_path)
        self.options = options if options is not None else DecoderOptions()

    @abstractmethod
    def get_format_name(self) -> str:
        """Return human-readable format name (e.g., 'glTF', 'GLB')"""
        pass

    @abstractmethod
    def get_materials(self) -> List[Any]:
        """Get all source materials in document order"""
        pass

    @abstractmethod
    def get_meshes(self) -> List[Any]:
        """Get all source meshes in document order"""
        pass

    @abstractmethod
    def get_nodes(self) -> List[Any]:
        """Get all source nodes in document order"""
        pass

    @abstractmethod
    def get_primitives(self, mesh: Any) -> List[Any]:
        """Get the source primitives of a mesh in declaration order"""
        pass

    @abstractmethod
    def get_mesh_name(self, mesh: Any) -> str:
        """Get a mesh's name, or the placeholder if it has none"""
        pass

    @abstractmethod
    def get_default_scene_nodes(self) -> Optional[List[int]]:
        """Get the node list of the default scene

        Returns:
            list: Node indices of the default scene, None if the document
                declares no default scene
        """
        pass

    @abstractmethod
    def decode_material(self, material: Any) -> DecodedMaterial:
        """Decode one source material"""
        pass

    @abstractmethod
    def decode_primitive(self, primitive: Any, label: str) -> Optional[DecodedPrimitive]:
        """Decode one source primitive

        Args:
            primitive: Source primitive
            label: Human-readable location used in log messages

        Returns:
            DecodedPrimitive, or None if the primitive is unusable
        """
        pass

    @abstractmethod
    def decode_node(self, node: Any, label: str) -> DecodedNode:
        """Decode one source node"""
        pass

    def _reject_primitive(self, label: str, reason: str) -> None:
        """Drop an unusable primitive, or fail under strict options

        Raises:
            GltfMissingDataError: If options.strict is set
        """
        if self.options.strict:
            raise GltfMissingDataError(f"{label}: {reason}")
        logger.warning("Dropping %s: %s", label, reason)
        return None

    def extract_scene_data(self) -> DecodedScene:
        """Decode the complete document

        Materials, meshes and nodes are decoded independently into parallel
        index-addressable lists. Roots are resolved last from the decoded
        child lists and the optional default scene.

        Returns:
            DecodedScene: Complete decoded scene
        """
        # Step 1: Materials
        materials = [self.decode_material(material) for material in self.get_materials()]

        # Step 2: Meshes, dropping unusable primitives
        meshes = []
        for mesh_index, mesh in enumerate(self.get_meshes()):
            mesh_name = self.get_mesh_name(mesh)
            primitives = []
            for primitive_index, primitive in enumerate(self.get_primitives(mesh)):
                label = f"mesh {mesh_index} ('{mesh_name}') primitive {primitive_index}"
                decoded = self.decode_primitive(primitive, label)
                if decoded is not None:
                    primitives.append(decoded)
            meshes.append(DecodedMesh(name=mesh_name, primitives=tuple(primitives)))

        # Step 3: Nodes
        nodes = [
            self.decode_node(node, f"node {node_index}")
            for node_index, node in enumerate(self.get_nodes())
        ]

        # Step 4: Cycle check
        cyclic = find_cycles(nodes)
        if cyclic:
            if self.options.strict:
                raise GltfParseError(f"Node hierarchy contains a cycle through nodes {cyclic}")
            logger.warning("Node hierarchy contains a cycle through nodes %s", cyclic)

        # Step 5: Roots
        root_nodes = resolve_root_nodes(nodes, self.get_default_scene_nodes())

        logger.info(
            "Decoded %s: %d meshes, %d materials, %d nodes, %d roots",
            self.file_path.name, len(meshes), len(materials), len(nodes), len(root_nodes)
        )

        return DecodedScene(
            meshes=tuple(meshes),
            materials=tuple(materials),
            nodes=tuple(nodes),
            root_nodes=tuple(root_nodes),
        )
