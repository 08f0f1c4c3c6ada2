import logging

import numpy as np
import pytest

from wobj.buffers.buffer import VertexBuffer
from wobj.buffers.format import VertexFormat
from wobj.codec.numeric import ElementType
from wobj.compiler import BONE_INDICES, compile_scene
from wobj.math import IDENTITY
from wobj.scene.types import Animation, NodeAnimation, Scene, SceneNode
from wobj.skinning import BoneTable, auto_bone_name, bind_mesh

from tests.conftest import skinned_mesh, translation, triangle_mesh


def _skinned_buffer(vertex_count: int = 3) -> VertexBuffer:
    fmt = VertexFormat()
    fmt.add_attribute("position", ElementType.FLOAT, 3)
    fmt.add_attribute("bone_indices", ElementType.FLOAT, 4)
    fmt.add_attribute("bone_weights", ElementType.FLOAT, 4)
    return VertexBuffer(fmt, vertex_count)


def _bind(vertices, mesh, bones, node_name="Body", world=IDENTITY, offset=0):
    return bind_mesh(vertices, mesh, node_name, world, offset, bones, 1, 2)


def test_bone_ids_are_dense_and_deduplicated():
    bones = BoneTable()
    assert bones.resolve("Hip", IDENTITY) == 0
    assert bones.resolve("Arm", translation(1, 0, 0)) == 1
    assert bones.resolve("Hip", translation(5, 5, 5)) == 0
    assert len(bones) == 2
    assert list(bones) == ["Hip", "Arm"]
    assert "Arm" in bones
    assert bones.get("Leg") is None


def test_first_registration_seeds_inverse_bind():
    bones = BoneTable()
    world = translation(1, 2, 3)
    offset = translation(0, 0, -1)
    bones.resolve("Arm", world, offset)
    bones.resolve("Arm", IDENTITY)

    expected = offset @ np.linalg.inv(world)
    assert np.allclose(bones.get("Arm").inverse_bind, expected)


def test_unskinned_mesh_binds_to_auto_bone():
    vertices = _skinned_buffer()
    bones = BoneTable()
    world = translation(0, 4, 0)

    dropped = _bind(vertices, triangle_mesh(), bones, world=world)

    assert dropped == 0
    bone = bones.get(auto_bone_name("Body"))
    assert bone.id == 0
    assert np.allclose(bone.inverse_bind, translation(0, -4, 0))
    for v in range(3):
        assert vertices.get(v, 1) == (0.0, 0.0, 0.0, 0.0)
        assert vertices.get(v, 2) == (1.0, 0.0, 0.0, 0.0)


def test_weights_are_normalized():
    vertices = _skinned_buffer()
    mesh = skinned_mesh(
        "Body",
        {"Hip": [(0, 0.5), (1, 2.0), (2, 1.0)], "Arm": [(0, 1.5), (2, 1.0)]},
    )

    _bind(vertices, mesh, BoneTable())

    assert vertices.get(0, 1)[:2] == (0.0, 1.0)
    assert vertices.get(0, 2) == pytest.approx((0.25, 0.75, 0.0, 0.0))
    assert vertices.get(1, 2) == pytest.approx((1.0, 0.0, 0.0, 0.0))
    assert vertices.get(2, 2) == pytest.approx((0.5, 0.5, 0.0, 0.0))


def test_fifth_influence_is_dropped(caplog):
    vertices = _skinned_buffer()
    mesh = skinned_mesh(
        "Body",
        {f"B{i}": [(0, 0.1 * (i + 1))] for i in range(5)},
    )

    with caplog.at_level(logging.WARNING, logger="wobj.skinning"):
        dropped = _bind(vertices, mesh, BoneTable())

    assert dropped == 1
    assert "dropped 1 bone influence" in caplog.text
    assert vertices.get(0, 1) == (0.0, 1.0, 2.0, 3.0)
    assert vertices.get(0, 2) == pytest.approx((0.1, 0.2, 0.3, 0.4), abs=1e-6)
    assert sum(vertices.get(0, 2)) == pytest.approx(1.0, abs=1e-6)


def test_unweighted_vertices_fall_back_to_auto_bone():
    vertices = _skinned_buffer()
    bones = BoneTable()
    mesh = skinned_mesh("Body", {"Arm": [(0, 1.0)]})

    _bind(vertices, mesh, bones)

    auto = bones.get(auto_bone_name("Body")).id
    assert auto == 1
    assert vertices.get(0, 1)[0] == 0.0
    for v in (1, 2):
        assert vertices.get(v, 1) == (float(auto), 0.0, 0.0, 0.0)
        assert vertices.get(v, 2) == (1.0, 0.0, 0.0, 0.0)


def test_repeated_bone_overwrites_its_slot():
    vertices = _skinned_buffer()
    mesh = skinned_mesh("Body", {"Arm": [(0, 0.2), (0, 0.6), (1, 1.0), (2, 1.0)]})

    _bind(vertices, mesh, BoneTable())

    assert vertices.get(0, 1) == (0.0, 0.0, 0.0, 0.0)
    assert vertices.get(0, 2) == pytest.approx((1.0, 0.0, 0.0, 0.0))


def test_vertex_offset_targets_later_vertices():
    vertices = _skinned_buffer(6)
    bones = BoneTable()
    bones.resolve("Other", IDENTITY)

    _bind(vertices, triangle_mesh(), bones, offset=3)

    for v in range(3):
        assert vertices.get(v, 2) == (0.0, 0.0, 0.0, 0.0)
    for v in range(3, 6):
        assert vertices.get(v, 1)[0] == 1.0
        assert vertices.get(v, 2)[0] == 1.0


def test_meshes_sharing_a_bone_name_share_its_id(settings):
    weights = {"Spine": [(0, 1.0), (1, 1.0), (2, 1.0)]}
    root = SceneNode(
        "Root",
        children=[
            SceneNode("Spine"),
            SceneNode("Body", meshes=[skinned_mesh("Torso", weights)]),
            SceneNode("Cloak", transform=translation(0, 2, 0), meshes=[skinned_mesh("Cape", weights)]),
        ],
    )
    animation = Animation("Walk", 1.0, [NodeAnimation("Spine")])

    compiled = compile_scene(Scene(root=root, animations=[animation]), settings)

    assert list(compiled.bones) == ["Spine"]
    assert np.allclose(compiled.bones.get("Spine").inverse_bind, IDENTITY)
    index_attr = compiled.vertex_format.index_of(BONE_INDICES)
    assert {compiled.vertices.get(v, index_attr)[0] for v in range(6)} == {0.0}
