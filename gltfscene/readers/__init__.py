#!/usr/bin/env python3
"""
Readers Module
Scene document readers (glTF JSON and GLB binary containers)
"""

from pathlib import Path

from ..core.errors import GltfIoError
from .base_reader import BaseReader
from .gltf_reader import GLTFReader

# Supported file extensions
GLTF_EXTENSIONS = {'.gltf'}
GLB_EXTENSIONS = {'.glb'}
SUPPORTED_EXTENSIONS = GLTF_EXTENSIONS | GLB_EXTENSIONS


def create_reader(input_file, options=None):
    """Factory function to create appropriate reader based on file extension

    Args:
        input_file: Path to input scene document
        options: DecoderOptions passed to the reader

    Returns:
        BaseReader: GLTFReader instance with the document already opened

    Raises:
        GltfIoError: If the extension is not supported or the document cannot be opened
    """
    ext = Path(input_file).suffix.lower()
    if ext in SUPPORTED_EXTENSIONS:
        return GLTFReader(input_file, options)
    raise GltfIoError(
        f"Unsupported file format: {ext}\n"
        f"Supported formats: {', '.join(sorted(SUPPORTED_EXTENSIONS))}"
    )


def is_supported_format(input_file):
    """Check if a file has a supported format

    Args:
        input_file: Path to input scene document

    Returns:
        bool: True if format is supported
    """
    return Path(input_file).suffix.lower() in SUPPORTED_EXTENSIONS


__all__ = [
    'BaseReader',
    'GLTFReader',
    'create_reader',
    'is_supported_format',
    'GLTF_EXTENSIONS',
    'GLB_EXTENSIONS',
    'SUPPORTED_EXTENSIONS',
]
