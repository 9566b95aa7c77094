#!/usr/bin/env python3
"""
glTF Reader Module
glTF 2.0 / GLB reading implementing the BaseReader interface
"""

import base64
import binascii
import json
import logging
import struct
from pathlib import Path
from typing import List, Any, Optional, Union
from urllib.parse import unquote, unquote_to_bytes

import numpy as np
from pygltflib import GLTF2

from ..core.config import (
    DecoderOptions,
    DEFAULT_NORMAL,
    DEFAULT_UV,
    DEFAULT_BASE_COLOR,
    DEFAULT_METALLIC,
    DEFAULT_ROUGHNESS,
    TEXTURE_REFERENCE_FORMAT,
)
from ..core.errors import GltfIoError, GltfParseError
from ..core.scene_data import DecodedPrimitive, DecodedMaterial, DecodedNode, Vertex
from ..core.transforms import (
    decompose_matrix,
    IDENTITY_TRANSLATION,
    IDENTITY_ROTATION,
    IDENTITY_SCALE,
)
from .accessors import get_field, read_float_accessor, read_index_accessor
from .base_reader import BaseReader

logger = logging.getLogger(__name__)

GLB_MAGIC = b"glTF"
GLB_VERSION_SUPPORTED = 2
GLB_HEADER_SIZE = 12
GLB_CHUNK_JSON = 0x4E4F534A


class GLTFReader(BaseReader):
    """glTF document reader implementing the BaseReader interface

    Opens `.gltf` (JSON with external or embedded buffers) and `.glb`
    (binary container) files. The container type is detected from the file
    header, not the extension. The document and all of its buffers are
    loaded once in the constructor; decoding afterwards is a read-only pass.
    """

    def __init__(self, gltf_file: Union[str, Path], options: Optional[DecoderOptions] = None):
        """Open the document and load its buffers

        Args:
            gltf_file: Path to a .gltf or .glb file
            options: Decoder options

        Raises:
            GltfIoError: If the file is missing, its container is malformed,
                or a buffer cannot be resolved
        """
        super().__init__(gltf_file, options)
        self.is_binary = False
        self.document = self._open_document()
        self.buffers = self._load_buffers()

    def get_format_name(self) -> str:
        """Return human-readable format name"""
        return "GLB" if self.is_binary else "glTF"

    def _open_document(self) -> GLTF2:
        """Parse the container with pygltflib"""
        if not self.file_path.is_file():
            raise GltfIoError(f"File not found: {self.file_path}")

        try:
            data = self.file_path.read_bytes()
        except OSError as e:
            raise GltfIoError(f"Failed to read {self.file_path}: {e}") from e

        self.is_binary = data[:4] == GLB_MAGIC
        if self.is_binary:
            self._check_json_root(self._check_glb_header(data))
        else:
            self._check_json_root(data)

        try:
            if self.is_binary:
                document = GLTF2.load_binary(str(self.file_path))
            else:
                document = GLTF2.load_json(str(self.file_path))
        except Exception as e:
            raise GltfIoError(f"Failed to parse {self.file_path}: {e}") from e

        logger.debug("Opened %s document %s", self.get_format_name(), self.file_path)
        return document

    def _check_json_root(self, raw: bytes) -> None:
        """Require the JSON content to be an object

        pygltflib turns a `null` document into an empty GLTF2, so the root
        type is checked on the raw text.
        """
        try:
            root = json.loads(raw.decode("utf-8-sig"))
        except ValueError as e:
            raise GltfIoError(f"Failed to parse {self.file_path}: {e}") from e
        if not isinstance(root, dict):
            raise GltfIoError(
                f"Failed to parse {self.file_path}: JSON root is {type(root).__name__}, expected an object"
            )

    def _check_glb_header(self, data: bytes) -> bytes:
        """Validate the GLB header and chunk layout before handing off to pygltflib

        Returns:
            bytes: Contents of the leading JSON chunk
        """
        if len(data) < GLB_HEADER_SIZE:
            raise GltfIoError("Invalid GLB: file too small")

        _magic, version, total_length = struct.unpack_from("<4sII", data, 0)
        if version != GLB_VERSION_SUPPORTED:
            raise GltfIoError(f"Unsupported GLB version: {version} (expected {GLB_VERSION_SUPPORTED})")
        if total_length != len(data):
            raise GltfIoError("Invalid GLB: length mismatch")

        offset = GLB_HEADER_SIZE
        if offset + 8 > total_length:
            raise GltfIoError("Invalid GLB: missing JSON chunk")
        json_length, json_type = struct.unpack_from("<II", data, offset)
        if json_type != GLB_CHUNK_JSON:
            raise GltfIoError("Invalid GLB: first chunk is not JSON")
        json_chunk = data[offset + 8:offset + 8 + json_length]

        while offset < total_length:
            if offset + 8 > total_length:
                raise GltfIoError("Invalid GLB: truncated chunk header")
            chunk_length, _chunk_type = struct.unpack_from("<II", data, offset)
            offset += 8 + chunk_length
            if offset > total_length:
                raise GltfIoError("Invalid GLB: truncated chunk data")
        return json_chunk

    def _load_buffers(self) -> List[bytes]:
        """Resolve every document buffer to bytes

        Buffers without a URI come from the GLB binary chunk. Data URIs are
        decoded in place; other URIs are files relative to the document.
        """
        buffers = []
        for index, buffer in enumerate(self.document.buffers or []):
            uri = get_field(buffer, 'uri')
            if uri is None:
                blob = self.document.binary_blob()
                if blob is None:
                    raise GltfIoError(f"Buffer {index} has no URI and the document has no binary chunk")
                data = bytes(blob)
            elif uri.startswith("data:"):
                header, _, payload = uri.partition(",")
                if header.endswith(";base64"):
                    try:
                        data = base64.b64decode(payload, validate=True)
                    except (binascii.Error, ValueError) as e:
                        raise GltfIoError(f"Buffer {index} has a corrupt base64 data URI: {e}") from e
                else:
                    data = unquote_to_bytes(payload)
            else:
                buffer_path = self.file_path.parent / unquote(uri)
                try:
                    data = buffer_path.read_bytes()
                except OSError as e:
                    raise GltfIoError(f"Failed to read buffer {index} from {buffer_path}: {e}") from e

            byte_length = get_field(buffer, 'byteLength', 0)
            if len(data) < byte_length:
                raise GltfIoError(
                    f"Buffer {index} holds {len(data)} bytes, document declares {byte_length}"
                )
            buffers.append(data)
        return buffers

    def get_materials(self) -> List[Any]:
        """Get all source materials"""
        return list(self.document.materials or [])

    def get_meshes(self) -> List[Any]:
        """Get all source meshes"""
        return list(self.document.meshes or [])

    def get_nodes(self) -> List[Any]:
        """Get all source nodes"""
        return list(self.document.nodes or [])

    def get_primitives(self, mesh: Any) -> List[Any]:
        """Get the primitives of a source mesh"""
        return list(get_field(mesh, 'primitives', []))

    def get_mesh_name(self, mesh: Any) -> str:
        """Get a mesh's name, or the placeholder if it has none"""
        return get_field(mesh, 'name') or self.options.mesh_placeholder

    def get_default_scene_nodes(self) -> Optional[List[int]]:
        """Get the node list of the document's default scene

        Returns:
            list: Node indices, None if the document has no `scene` property

        Raises:
            GltfParseError: If `scene` points outside the scene list
        """
        scene_index = self.document.scene
        if scene_index is None:
            return None

        scenes = self.document.scenes or []
        if not 0 <= scene_index < len(scenes):
            raise GltfParseError(f"Default scene index out of range: {scene_index}")
        return [int(i) for i in get_field(scenes[scene_index], 'nodes', [])]

    def decode_material(self, material: Any) -> DecodedMaterial:
        """Extract metallic-roughness parameters from a source material"""
        pbr = get_field(material, 'pbrMetallicRoughness')

        texture_reference = None
        texture_index = get_field(get_field(pbr, 'baseColorTexture'), 'index')
        if texture_index is not None:
            texture_reference = TEXTURE_REFERENCE_FORMAT.format(index=texture_index)

        return DecodedMaterial(
            name=get_field(material, 'name') or self.options.material_placeholder,
            base_color=tuple(float(c) for c in get_field(pbr, 'baseColorFactor', DEFAULT_BASE_COLOR)),
            metallic=float(get_field(pbr, 'metallicFactor', DEFAULT_METALLIC)),
            roughness=float(get_field(pbr, 'roughnessFactor', DEFAULT_ROUGHNESS)),
            base_color_texture=texture_reference,
        )

    def decode_primitive(self, primitive: Any, label: str) -> Optional[DecodedPrimitive]:
        """Extract vertices, indices and material binding from a source primitive

        Positions are required. Normals and the first UV channel are read when
        present and synthesized otherwise. Missing indices are synthesized as
        0..vertex_count-1.

        Args:
            primitive: Source primitive
            label: Location used in log messages

        Returns:
            DecodedPrimitive, or None if the primitive has no positions or
            its indices reference missing vertices
        """
        attributes = get_field(primitive, 'attributes')

        position_accessor = get_field(attributes, 'POSITION')
        if position_accessor is None:
            return self._reject_primitive(label, "no POSITION attribute")

        positions = read_float_accessor(self.document, self.buffers, position_accessor)
        if positions.shape[1] != 3:
            raise GltfParseError(f"{label}: POSITION accessor is not VEC3")
        vertex_count = len(positions)

        normals = self._read_vertex_attribute(attributes, 'NORMAL', vertex_count, DEFAULT_NORMAL, label)
        uvs = self._read_vertex_attribute(attributes, 'TEXCOORD_0', vertex_count, DEFAULT_UV, label)

        index_accessor = get_field(primitive, 'indices')
        if index_accessor is not None:
            indices = read_index_accessor(self.document, self.buffers, index_accessor)
        else:
            indices = np.arange(vertex_count, dtype=np.uint32)

        if indices.size and int(indices.max()) >= vertex_count:
            return self._reject_primitive(
                label, f"index {int(indices.max())} out of range for {vertex_count} vertices"
            )

        material_index = get_field(primitive, 'material')
        if material_index is not None and not 0 <= material_index < len(self.document.materials or []):
            logger.warning("%s: material %d does not exist, leaving unbound", label, material_index)
            material_index = None

        vertices = tuple(
            Vertex(position=tuple(p), normal=tuple(n), uv=tuple(uv))
            for p, n, uv in zip(positions.tolist(), normals.tolist(), uvs.tolist())
        )

        return DecodedPrimitive(
            vertices=vertices,
            indices=tuple(indices.tolist()),
            material_index=material_index,
        )

    def _read_vertex_attribute(self, attributes: Any, semantic: str, vertex_count: int,
                               default: tuple, label: str) -> np.ndarray:
        """Read an optional per-vertex attribute, backfilling a default

        An attribute whose shape does not match (vertex_count, len(default))
        is treated as absent.
        """
        accessor_index = get_field(attributes, semantic)
        if accessor_index is not None:
            data = read_float_accessor(self.document, self.buffers, accessor_index)
            if data.shape == (vertex_count, len(default)):
                return data
            logger.warning(
                "%s: %s has shape %s, expected (%d, %d); using defaults",
                label, semantic, data.shape, vertex_count, len(default)
            )
        return np.tile(np.array(default, dtype=np.float64), (vertex_count, 1))

    def decode_node(self, node: Any, label: str) -> DecodedNode:
        """Extract local transform, mesh binding and children from a source node

        A declared matrix is decomposed into translation, rotation and scale;
        otherwise the node's TRS properties are used with identity defaults.
        """
        matrix = get_field(node, 'matrix')
        if matrix:
            if len(matrix) != 16:
                raise GltfParseError(f"{label}: matrix has {len(matrix)} values, expected 16")
            translation, rotation, scale = decompose_matrix(matrix)
        else:
            translation = self._read_node_vector(node, 'translation', IDENTITY_TRANSLATION, label)
            rotation = self._read_node_vector(node, 'rotation', IDENTITY_ROTATION, label)
            scale = self._read_node_vector(node, 'scale', IDENTITY_SCALE, label)

        mesh_index = get_field(node, 'mesh')
        if mesh_index is not None and not 0 <= mesh_index < len(self.document.meshes or []):
            logger.warning("%s: mesh %d does not exist, leaving unbound", label, mesh_index)
            mesh_index = None

        node_count = len(self.document.nodes or [])
        children = []
        for child_index in get_field(node, 'children', []):
            if 0 <= child_index < node_count:
                children.append(int(child_index))
            else:
                logger.warning("%s: child %d does not exist, ignoring", label, child_index)

        return DecodedNode(
            name=get_field(node, 'name') or self.options.node_placeholder,
            translation=translation,
            rotation=rotation,
            scale=scale,
            mesh_index=mesh_index,
            children=tuple(children),
        )

    def _read_node_vector(self, node: Any, name: str, default: tuple, label: str) -> tuple:
        values = get_field(node, name, default)
        if len(values) != len(default):
            raise GltfParseError(f"{label}: {name} has {len(values)} values, expected {len(default)}")
        return tuple(float(v) for v in values)
