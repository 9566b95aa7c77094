"""
Shared fixtures: build small glTF documents on disk.
"""

import base64
import json
import struct
from pathlib import Path

import numpy as np
import pytest

GLB_MAGIC = b"glTF"
CHUNK_TYPE_JSON = 0x4E4F534A
CHUNK_TYPE_BIN = 0x004E4942

FLOAT = 5126
UNSIGNED_BYTE = 5121
UNSIGNED_SHORT = 5123
UNSIGNED_INT = 5125

TYPE_NAMES = {1: "SCALAR", 2: "VEC2", 3: "VEC3", 4: "VEC4"}
DTYPES = {FLOAT: '<f4', UNSIGNED_BYTE: '<u1', UNSIGNED_SHORT: '<u2', UNSIGNED_INT: '<u4'}

TRIANGLE_POSITIONS = [[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0]]
QUAD_POSITIONS = [[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [1.0, 1.0, 0.0], [0.0, 1.0, 0.0]]


class DocumentBuilder:
    """Accumulates a glTF JSON tree and its single binary buffer"""

    def __init__(self):
        self.blob = bytearray()
        self.gltf = {
            "asset": {"version": "2.0"},
            "accessors": [],
            "bufferViews": [],
            "meshes": [],
            "materials": [],
            "nodes": [],
        }

    def _append_view(self, data: bytes, stride=None) -> int:
        self.blob.extend(b"\x00" * ((4 - len(self.blob) % 4) % 4))
        view = {"buffer": 0, "byteOffset": len(self.blob), "byteLength": len(data)}
        if stride:
            view["byteStride"] = stride
        self.blob.extend(data)
        self.gltf["bufferViews"].append(view)
        return len(self.gltf["bufferViews"]) - 1

    def _append_accessor(self, accessor: dict) -> int:
        self.gltf["accessors"].append(accessor)
        return len(self.gltf["accessors"]) - 1

    def add_accessor(self, values, component_type=FLOAT, normalized=False) -> int:
        array = np.asarray(values, dtype=DTYPES[component_type])
        if array.ndim == 1:
            array = array.reshape(-1, 1)
        view = self._append_view(array.tobytes())
        accessor = {
            "bufferView": view,
            "componentType": component_type,
            "count": int(array.shape[0]),
            "type": TYPE_NAMES[array.shape[1]],
        }
        if normalized:
            accessor["normalized"] = True
        return self._append_accessor(accessor)

    def add_interleaved(self, *arrays):
        """Interleave float32 attributes in one strided view"""
        arrays = [np.asarray(a, dtype='<f4') for a in arrays]
        stride = sum(a.shape[1] * 4 for a in arrays)
        data = np.concatenate(arrays, axis=1).astype('<f4').tobytes()
        view = self._append_view(data, stride=stride)
        indices = []
        offset = 0
        for a in arrays:
            indices.append(self._append_accessor({
                "bufferView": view,
                "byteOffset": offset,
                "componentType": FLOAT,
                "count": int(a.shape[0]),
                "type": TYPE_NAMES[a.shape[1]],
            }))
            offset += a.shape[1] * 4
        return indices

    def add_sparse_accessor(self, count, components, targets, values) -> int:
        """Zero-initialised float accessor patched by a sparse section"""
        index_view = self._append_view(np.asarray(targets, dtype='<u2').tobytes())
        value_view = self._append_view(np.asarray(values, dtype='<f4').tobytes())
        return self._append_accessor({
            "componentType": FLOAT,
            "count": count,
            "type": TYPE_NAMES[components],
            "sparse": {
                "count": len(targets),
                "indices": {"bufferView": index_view, "componentType": UNSIGNED_SHORT},
                "values": {"bufferView": value_view},
            },
        })

    def add_primitive_mesh(self, name=None, primitives=()) -> int:
        mesh = {"primitives": list(primitives)}
        if name is not None:
            mesh["name"] = name
        self.gltf["meshes"].append(mesh)
        return len(self.gltf["meshes"]) - 1

    def add_material(self, **material) -> int:
        self.gltf["materials"].append(material)
        return len(self.gltf["materials"]) - 1

    def add_node(self, **node) -> int:
        self.gltf["nodes"].append(node)
        return len(self.gltf["nodes"]) - 1

    def set_default_scene(self, nodes):
        self.gltf["scenes"] = [{"nodes": list(nodes)}]
        self.gltf["scene"] = 0

    def _tree(self, uri=None) -> dict:
        tree = json.loads(json.dumps(self.gltf))
        buffer = {"byteLength": len(self.blob)}
        if uri is not None:
            buffer["uri"] = uri
        tree["buffers"] = [buffer]
        return tree

    def write_gltf(self, path: Path) -> Path:
        """Write JSON form with the buffer embedded as a base64 data URI"""
        uri = "data:application/octet-stream;base64," + base64.b64encode(bytes(self.blob)).decode("ascii")
        path.write_text(json.dumps(self._tree(uri)), encoding="utf-8")
        return path

    def write_gltf_external(self, path: Path, bin_name: str = "buffer.bin") -> Path:
        """Write JSON form referencing an external .bin next to it"""
        (path.parent / bin_name).write_bytes(bytes(self.blob))
        path.write_text(json.dumps(self._tree(bin_name)), encoding="utf-8")
        return path

    def write_glb(self, path: Path) -> Path:
        """Write the binary container form"""
        json_bytes = json.dumps(self._tree(), separators=(",", ":")).encode("utf-8")
        json_bytes += b" " * ((4 - len(json_bytes) % 4) % 4)
        bin_chunk = bytes(self.blob) + b"\x00" * ((4 - len(self.blob) % 4) % 4)

        total_length = 12 + 8 + len(json_bytes) + 8 + len(bin_chunk)
        header = struct.pack("<4sII", GLB_MAGIC, 2, total_length)
        json_header = struct.pack("<II", len(json_bytes), CHUNK_TYPE_JSON)
        bin_header = struct.pack("<II", len(bin_chunk), CHUNK_TYPE_BIN)
        path.write_bytes(header + json_header + json_bytes + bin_header + bin_chunk)
        return path


@pytest.fixture
def builder():
    return DocumentBuilder()


@pytest.fixture
def triangle_builder():
    """One named mesh with an indexed, fully attributed triangle and one material"""
    b = DocumentBuilder()
    positions = b.add_accessor(TRIANGLE_POSITIONS)
    normals = b.add_accessor([[0.0, 0.0, 1.0]] * 3)
    uvs = b.add_accessor([[0.0, 0.0], [1.0, 0.0], [0.0, 1.0]])
    indices = b.add_accessor([0, 1, 2], component_type=UNSIGNED_SHORT)
    material = b.add_material(
        name="Red",
        pbrMetallicRoughness={
            "baseColorFactor": [1.0, 0.0, 0.0, 0.5],
            "metallicFactor": 0.0,
            "roughnessFactor": 0.25,
        },
    )
    b.add_primitive_mesh("Triangle", [{
        "attributes": {"POSITION": positions, "NORMAL": normals, "TEXCOORD_0": uvs},
        "indices": indices,
        "material": material,
    }])
    b.add_node(name="Root", mesh=0)
    return b
