#!/usr/bin/env python3
"""
Accessors Module
Typed reads of glTF accessors over already-loaded binary buffers.

An accessor describes `count` elements of `type` (SCALAR, VEC2, ...) made of
components of `componentType`, stored in a buffer view at an optional byte
stride. Reads return numpy arrays shaped (count, components) and always copy,
so results never alias the source buffers.
"""

from typing import Any, List

import numpy as np

from ..core.errors import GltfParseError

BYTE = 5120
UNSIGNED_BYTE = 5121
SHORT = 5122
UNSIGNED_SHORT = 5123
UNSIGNED_INT = 5125
FLOAT = 5126

COMPONENT_DTYPES = {
    BYTE: np.dtype('<i1'),
    UNSIGNED_BYTE: np.dtype('<u1'),
    SHORT: np.dtype('<i2'),
    UNSIGNED_SHORT: np.dtype('<u2'),
    UNSIGNED_INT: np.dtype('<u4'),
    FLOAT: np.dtype('<f4'),
}

# Divisors for normalized integer components
NORMALIZED_DIVISORS = {
    BYTE: 127.0,
    UNSIGNED_BYTE: 255.0,
    SHORT: 32767.0,
    UNSIGNED_SHORT: 65535.0,
}

INDEX_COMPONENT_TYPES = {UNSIGNED_BYTE, UNSIGNED_SHORT, UNSIGNED_INT}

TYPE_COMPONENT_COUNT = {
    "SCALAR": 1,
    "VEC2": 2,
    "VEC3": 3,
    "VEC4": 4,
    "MAT2": 4,
    "MAT3": 9,
    "MAT4": 16,
}


def get_field(obj: Any, name: str, default: Any = None) -> Any:
    """Read a field from a pygltflib object or a plain dict"""
    if obj is None:
        return default
    if isinstance(obj, dict):
        value = obj.get(name, default)
    else:
        value = getattr(obj, name, default)
    return default if value is None else value


def _component_dtype(component_type: Any) -> np.dtype:
    dtype = COMPONENT_DTYPES.get(component_type)
    if dtype is None:
        raise GltfParseError(f"Unsupported component type: {component_type}")
    return dtype


def _read_strided(gltf: Any, buffers: List[bytes], view_index: int, byte_offset: int,
                  count: int, components: int, dtype: np.dtype) -> np.ndarray:
    """Gather `count` elements from a buffer view, honouring byteStride"""
    views = gltf.bufferViews or []
    if not 0 <= view_index < len(views):
        raise GltfParseError(f"Buffer view index out of range: {view_index}")
    view = views[view_index]

    buffer_index = get_field(view, 'buffer', -1)
    if not 0 <= buffer_index < len(buffers):
        raise GltfParseError(f"Buffer index out of range: {buffer_index}")
    data = buffers[buffer_index]

    element_size = dtype.itemsize * components
    if count == 0:
        return np.zeros((0, components), dtype=dtype)

    stride = get_field(view, 'byteStride', 0) or element_size
    view_start = get_field(view, 'byteOffset', 0)
    view_end = view_start + get_field(view, 'byteLength', 0)
    start = view_start + byte_offset
    end = start + stride * (count - 1) + element_size

    if end > view_end or end > len(data):
        raise GltfParseError(
            f"Accessor reads bytes {start}..{end} past the end of buffer view "
            f"{view_index} ({view_start}..{min(view_end, len(data))})"
        )

    raw = np.frombuffer(data, dtype=np.uint8)
    rows = start + np.arange(count)[:, None] * stride + np.arange(element_size)[None, :]
    return raw[rows].view(dtype).reshape(count, components)


def read_accessor(gltf: Any, buffers: List[bytes], accessor_index: int) -> np.ndarray:
    """Read an accessor into a (count, components) array

    Accessors without a buffer view read as zeros. Sparse substitutions are
    applied on top of the dense data.

    Args:
        gltf: Loaded pygltflib.GLTF2 document
        buffers: Binary data for every document buffer, by buffer index
        accessor_index: Index of the accessor to read

    Returns:
        np.ndarray: Array with the accessor's component dtype

    Raises:
        GltfParseError: If a reference is out of range or a read overruns its buffer
    """
    accessors = gltf.accessors or []
    if not 0 <= accessor_index < len(accessors):
        raise GltfParseError(f"Accessor index out of range: {accessor_index}")
    accessor = accessors[accessor_index]

    dtype = _component_dtype(get_field(accessor, 'componentType'))
    components = TYPE_COMPONENT_COUNT.get(get_field(accessor, 'type'))
    if components is None:
        raise GltfParseError(f"Unsupported accessor type: {get_field(accessor, 'type')}")
    count = int(get_field(accessor, 'count', 0))

    view_index = get_field(accessor, 'bufferView')
    if view_index is None:
        data = np.zeros((count, components), dtype=dtype)
    else:
        data = _read_strided(gltf, buffers, view_index, get_field(accessor, 'byteOffset', 0),
                             count, components, dtype)

    sparse = get_field(accessor, 'sparse')
    if sparse is not None and get_field(sparse, 'count', 0) > 0:
        data = _apply_sparse(gltf, buffers, data, sparse, components, dtype)

    return data


def _apply_sparse(gltf: Any, buffers: List[bytes], data: np.ndarray, sparse: Any,
                  components: int, dtype: np.dtype) -> np.ndarray:
    sparse_count = int(get_field(sparse, 'count', 0))
    sparse_indices = get_field(sparse, 'indices')
    sparse_values = get_field(sparse, 'values')

    index_dtype = _component_dtype(get_field(sparse_indices, 'componentType'))
    targets = _read_strided(gltf, buffers, get_field(sparse_indices, 'bufferView', -1),
                            get_field(sparse_indices, 'byteOffset', 0),
                            sparse_count, 1, index_dtype).reshape(-1)
    values = _read_strided(gltf, buffers, get_field(sparse_values, 'bufferView', -1),
                           get_field(sparse_values, 'byteOffset', 0),
                           sparse_count, components, dtype)

    if targets.size and int(targets.max()) >= len(data):
        raise GltfParseError(
            f"Sparse accessor index {int(targets.max())} exceeds element count {len(data)}"
        )

    patched = np.array(data, copy=True)
    patched[targets.astype(np.int64)] = values
    return patched


def read_float_accessor(gltf: Any, buffers: List[bytes], accessor_index: int) -> np.ndarray:
    """Read an accessor as float64, resolving normalized integer components

    Args:
        gltf: Loaded pygltflib.GLTF2 document
        buffers: Binary data for every document buffer
        accessor_index: Index of the accessor to read

    Returns:
        np.ndarray: float64 array of shape (count, components)
    """
    data = read_accessor(gltf, buffers, accessor_index)
    accessor = gltf.accessors[accessor_index]
    component_type = get_field(accessor, 'componentType')

    if component_type == FLOAT or not get_field(accessor, 'normalized', False):
        return data.astype(np.float64)

    divisor = NORMALIZED_DIVISORS.get(component_type)
    if divisor is None:
        return data.astype(np.float64)
    return np.maximum(data.astype(np.float64) / divisor, -1.0)


def read_index_accessor(gltf: Any, buffers: List[bytes], accessor_index: int) -> np.ndarray:
    """Read an index accessor widened to uint32

    Args:
        gltf: Loaded pygltflib.GLTF2 document
        buffers: Binary data for every document buffer
        accessor_index: Index of the accessor to read

    Returns:
        np.ndarray: Flat uint32 array
    """
    data = read_accessor(gltf, buffers, accessor_index)
    component_type = get_field(gltf.accessors[accessor_index], 'componentType')
    if component_type not in INDEX_COMPONENT_TYPES:
        raise GltfParseError(f"Index accessor {accessor_index} has non-integer component type {component_type}")
    return data.reshape(-1).astype(np.uint32)

