"""Binary glTF (.vrm) documents built in memory."""

import json
import struct

import numpy as np

JSON_CHUNK = 0x4E4F534A
BIN_CHUNK = 0x004E4942

FLOAT = 5126
UNSIGNED_SHORT = 5123
UNSIGNED_INT = 5125


def make_glb(extensions, document=None, bin_chunk: bytes = b"\x00" * 4) -> bytes:
    if document is None:
        document = {
            "asset": {"version": "2.0"},
            "nodes": [{"name": "Hips", "children": [1]}, {"name": "Head"}],
            "buffers": [{"byteLength": len(bin_chunk)}],
        }
    document = dict(document, extensions=extensions)
    json_chunk = json.dumps(document).encode("utf-8")
    json_chunk += b" " * (-len(json_chunk) % 4)

    body = struct.pack("<II", len(json_chunk), JSON_CHUNK) + json_chunk
    body += struct.pack("<II", len(bin_chunk), BIN_CHUNK) + bin_chunk
    return b"glTF" + struct.pack("<II", 2, 12 + len(body)) + body


def _translation(x: float, y: float, z: float) -> np.ndarray:
    m = np.eye(4, dtype=np.float32)
    m[:3, 3] = (x, y, z)
    return m


def make_skinned_glb() -> bytes:
    """
    One triangle skinned to two joints.

    Hips (node 0) sits at the origin, Head (node 1) one unit above it. Vertex
    0 follows Hips, vertices 1 and 2 follow Head. Morph target 0 pushes vertex
    1 one unit along +z and is bound to the "a" blend shape at full weight.
    """
    positions = np.array([[0, 0, 0], [1, 1, 0], [0, 2, 0]], dtype=np.float32)
    indices = np.array([0, 1, 2], dtype=np.uint32)
    joints = np.array([[0, 0, 0, 0], [1, 0, 0, 0], [1, 0, 0, 0]], dtype=np.uint16)
    weights = np.array([[1, 0, 0, 0]] * 3, dtype=np.float32)
    morph = np.array([[0, 0, 0], [0, 0, 1], [0, 0, 0]], dtype=np.float32)
    # Column-major inverse bind matrices
    inverse_binds = np.stack([np.eye(4, dtype=np.float32), _translation(0, -1, 0)]).transpose(0, 2, 1)

    blocks = [positions, indices, joints, weights, morph, inverse_binds]
    offsets, binary = [], b""
    for block in blocks:
        offsets.append(len(binary))
        binary += np.ascontiguousarray(block).tobytes()

    def accessor(block: int, component_type: int, count: int, kind: str) -> dict:
        return {"bufferView": 0, "byteOffset": offsets[block], "componentType": component_type,
                "count": count, "type": kind}

    document = {
        "asset": {"version": "2.0"},
        "scene": 0,
        "scenes": [{"nodes": [0]}],
        "nodes": [
            {"name": "Hips", "children": [1, 2]},
            {"name": "Head", "translation": [0.0, 1.0, 0.0]},
            {"name": "Body", "mesh": 0, "skin": 0},
        ],
        "meshes": [{
            "primitives": [{
                "attributes": {"POSITION": 0, "JOINTS_0": 2, "WEIGHTS_0": 3},
                "indices": 1,
                "targets": [{"POSITION": 4}],
            }],
        }],
        "skins": [{"joints": [0, 1], "inverseBindMatrices": 5}],
        "accessors": [
            accessor(0, FLOAT, 3, "VEC3"),
            accessor(1, UNSIGNED_INT, 3, "SCALAR"),
            accessor(2, UNSIGNED_SHORT, 3, "VEC4"),
            accessor(3, FLOAT, 3, "VEC4"),
            accessor(4, FLOAT, 3, "VEC3"),
            accessor(5, FLOAT, 2, "MAT4"),
        ],
        "bufferViews": [{"buffer": 0, "byteOffset": 0, "byteLength": len(binary)}],
        "buffers": [{"byteLength": len(binary)}],
    }
    extension = {
        "humanoid": {"humanBones": [{"bone": "hips", "node": 0}, {"bone": "head", "node": 1}]},
        "blendShapeMaster": {
            "blendShapeGroups": [{"presetName": "a", "binds": [{"mesh": 0, "index": 0, "weight": 100}]}],
        },
    }
    return make_glb({"VRM": extension}, document, binary)
