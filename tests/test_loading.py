"""
Tests for document opening, error outcomes, options and logging.
"""

import dataclasses
import json
import logging
import struct

import pytest

from gltfscene import (
    load_gltf,
    DecoderOptions,
    GltfError,
    GltfIoError,
    GltfMissingDataError,
)
from gltfscene.logging_config import setup_logging
from gltfscene.readers import create_reader, is_supported_format, GLTFReader
from conftest import TRIANGLE_POSITIONS


def test_missing_file_is_io_error(tmp_path):
    with pytest.raises(GltfIoError):
        load_gltf(tmp_path / "missing.glb")


def test_malformed_json_is_io_error(tmp_path):
    path = tmp_path / "broken.gltf"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(GltfIoError):
        load_gltf(path)


@pytest.mark.parametrize("content", ["null", "[]", "42"])
def test_non_object_json_root_is_io_error(tmp_path, content):
    path = tmp_path / "root.gltf"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(GltfIoError):
        load_gltf(path)


def test_glb_with_null_json_chunk_is_io_error(tmp_path):
    path = tmp_path / "null.glb"
    path.write_bytes(struct.pack("<4sII", b"glTF", 2, 24) + struct.pack("<II", 4, 0x4E4F534A) + b"null")

    with pytest.raises(GltfIoError):
        load_gltf(path)


def test_malformed_glb_header_is_io_error(tmp_path):
    path = tmp_path / "broken.glb"
    path.write_bytes(struct.pack("<4sII", b"glTF", 2, 500) + b"\x00" * 8)

    with pytest.raises(GltfIoError):
        load_gltf(path)


def test_unsupported_glb_version_is_io_error(tmp_path):
    path = tmp_path / "v1.glb"
    path.write_bytes(struct.pack("<4sII", b"glTF", 1, 12))

    with pytest.raises(GltfIoError):
        load_gltf(path)


def test_unsupported_extension_is_io_error(tmp_path):
    path = tmp_path / "scene.obj"
    path.write_text("v 0 0 0\n", encoding="utf-8")

    with pytest.raises(GltfIoError):
        load_gltf(path)


def test_errors_share_a_base_class():
    assert issubclass(GltfIoError, GltfError)
    assert issubclass(GltfMissingDataError, GltfError)


def test_external_buffer(tmp_path, triangle_builder):
    path = triangle_builder.write_gltf_external(tmp_path / "external.gltf")

    scene = load_gltf(path)

    assert scene.meshes[0].primitives[0].vertex_count == 3


def test_missing_external_buffer_is_io_error(tmp_path, triangle_builder):
    path = triangle_builder.write_gltf_external(tmp_path / "external.gltf")
    (tmp_path / "buffer.bin").unlink()

    with pytest.raises(GltfIoError):
        load_gltf(path)


def test_corrupt_base64_buffer_is_io_error(tmp_path, triangle_builder):
    path = tmp_path / "corrupt.gltf"
    tree = triangle_builder._tree("data:application/octet-stream;base64,AAA")
    path.write_text(json.dumps(tree), encoding="utf-8")

    with pytest.raises(GltfIoError):
        load_gltf(path)


def test_json_and_binary_forms_decode_identically(tmp_path, triangle_builder):
    from_json = load_gltf(triangle_builder.write_gltf(tmp_path / "scene.gltf"))
    from_binary = load_gltf(triangle_builder.write_glb(tmp_path / "scene.glb"))

    assert from_json == from_binary


def test_decoding_is_idempotent(tmp_path, triangle_builder):
    path = triangle_builder.write_glb(tmp_path / "scene.glb")

    assert load_gltf(path) == load_gltf(path)


def test_result_holds_plain_python_values(tmp_path, triangle_builder):
    scene = load_gltf(triangle_builder.write_glb(tmp_path / "scene.glb"))
    vertex = scene.meshes[0].primitives[0].vertices[0]

    assert type(vertex.position[0]) is float
    assert type(scene.meshes[0].primitives[0].indices[0]) is int
    with pytest.raises(dataclasses.FrozenInstanceError):
        scene.root_nodes = ()


def test_reader_reports_container_format(tmp_path, triangle_builder):
    glb_reader = create_reader(triangle_builder.write_glb(tmp_path / "scene.glb"))
    json_reader = create_reader(triangle_builder.write_gltf(tmp_path / "scene.gltf"))

    assert isinstance(glb_reader, GLTFReader)
    assert glb_reader.get_format_name() == "GLB"
    assert json_reader.get_format_name() == "glTF"


def test_is_supported_format():
    assert is_supported_format("model.GLB")
    assert is_supported_format("model.gltf")
    assert not is_supported_format("model.fbx")


def test_strict_mode_rejects_primitive_without_positions(tmp_path, builder):
    normals = builder.add_accessor([[0.0, 1.0, 0.0]])
    builder.add_primitive_mesh("NoPositions", [{"attributes": {"NORMAL": normals}}])
    path = builder.write_gltf(tmp_path / "nopos.gltf")

    assert load_gltf(path).meshes[0].primitives == ()
    with pytest.raises(GltfMissingDataError):
        load_gltf(path, DecoderOptions.from_preset("strict"))


def test_dropped_primitive_is_logged(tmp_path, builder, caplog):
    builder.add_primitive_mesh("NoPositions", [{"attributes": {}}])
    path = builder.write_gltf(tmp_path / "nopos.gltf")

    with caplog.at_level(logging.WARNING, logger="gltfscene"):
        load_gltf(path)

    assert "no POSITION attribute" in caplog.text


def test_custom_placeholders(tmp_path, builder):
    positions = builder.add_accessor(TRIANGLE_POSITIONS)
    builder.add_primitive_mesh(None, [{"attributes": {"POSITION": positions}}])
    builder.add_material()
    builder.add_node()
    options = DecoderOptions(mesh_placeholder="mesh", material_placeholder="mat", node_placeholder="node")

    scene = load_gltf(builder.write_gltf(tmp_path / "names.gltf"), options)

    assert scene.meshes[0].name == "mesh"
    assert scene.materials[0].name == "mat"
    assert scene.nodes[0].name == "node"


def test_option_presets():
    assert DecoderOptions.from_preset("lenient").strict is False
    assert DecoderOptions.from_preset("strict").strict is True
    assert DecoderOptions.from_preset("strict", node_placeholder="N").node_placeholder == "N"
    with pytest.raises(ValueError):
        DecoderOptions.from_preset("paranoid")


def test_setup_logging_writes_to_file(tmp_path):
    log_file = tmp_path / "decode.log"
    logger = setup_logging(logging.DEBUG, str(log_file))
    try:
        logger.warning("decoder check")
        for handler in logger.handlers:
            handler.flush()
        assert "decoder check" in log_file.read_text(encoding="utf-8")
        assert len(logger.handlers) == 2
    finally:
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)
        logger.setLevel(logging.NOTSET)


def test_setup_logging_replaces_previous_handlers():
    logger = setup_logging(logging.INFO)
    try:
        assert setup_logging(logging.WARNING) is logger
        assert len(logger.handlers) == 1
        assert logger.handlers[0].level == logging.WARNING
    finally:
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)
        logger.setLevel(logging.NOTSET)
