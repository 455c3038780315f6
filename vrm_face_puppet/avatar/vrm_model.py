"""VRM humanoid rig built from a parsed glTF document."""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple
import math
import numpy as np
from pygltflib import GLTF2

from ..core.base_avatar import BaseAvatar, BoneNode
from ..core.constants import VRM1_EXPRESSION_PRESETS
from ..core.exceptions import AvatarLoadError

# glTF accessor component types
COMPONENT_DTYPES = {
    5120: np.int8,
    5121: np.uint8,
    5122: np.int16,
    5123: np.uint16,
    5125: np.uint32,
    5126: np.float32,
}

# glTF accessor element types
TYPE_COMPONENTS = {
    "SCALAR": 1,
    "VEC2": 2,
    "VEC3": 3,
    "VEC4": 4,
    "MAT2": 4,
    "MAT3": 9,
    "MAT4": 16,
}

DEFAULT_COLOR = (0.8, 0.8, 0.8, 1.0)


def quaternion_to_matrix(q) -> np.ndarray:
    """Rotation matrix (3, 3) from a glTF quaternion (x, y, z, w)."""
    x, y, z, w = q
    return np.array([
        [1 - 2 * (y * y + z * z), 2 * (x * y - z * w), 2 * (x * z + y * w)],
        [2 * (x * y + z * w), 1 - 2 * (x * x + z * z), 2 * (y * z - x * w)],
        [2 * (x * z - y * w), 2 * (y * z + x * w), 1 - 2 * (x * x + y * y)],
    ])


def matrix_to_euler_xyz(m: np.ndarray) -> np.ndarray:
    """Euler angles (XYZ order) from a pure rotation matrix (3, 3)."""
    y = math.asin(max(-1.0, min(1.0, m[0, 2])))
    if abs(m[0, 2]) < 0.9999999:
        x = math.atan2(-m[1, 2], m[2, 2])
        z = math.atan2(-m[0, 1], m[0, 0])
    else:
        # Gimbal lock
        x = math.atan2(m[2, 1], m[1, 1])
        z = 0.0
    return np.array([x, y, z])


def euler_xyz_to_matrix(e: np.ndarray) -> np.ndarray:
    """Rotation matrix (3, 3) from Euler angles applied in XYZ order."""
    cx, cy, cz = np.cos(e)
    sx, sy, sz = np.sin(e)
    rx = np.array([[1, 0, 0], [0, cx, -sx], [0, sx, cx]])
    ry = np.array([[cy, 0, sy], [0, 1, 0], [-sy, 0, cy]])
    rz = np.array([[cz, -sz, 0], [sz, cz, 0], [0, 0, 1]])
    return rx @ ry @ rz


def _get(obj: Any, name: str) -> Any:
    """Read a glTF property from either a pygltflib object or a plain dict."""
    if obj is None:
        return None
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)


class SceneNode(BoneNode):
    """glTF node with hierarchy, attached mesh/skin and cached world matrix."""

    def __init__(self, name: str, **kwargs):
        super().__init__(name, **kwargs)
        self.children: List[int] = []
        self.parent: Optional[int] = None
        self.mesh: Optional[int] = None
        self.skin: Optional[int] = None
        self.world_matrix: np.ndarray = np.eye(4)

    def local_matrix(self) -> np.ndarray:
        m = np.eye(4)
        m[:3, :3] = euler_xyz_to_matrix(self.rotation) * self.scale
        m[:3, 3] = self.translation
        return m


@dataclass
class MeshPrimitive:
    """Vertex data of one drawable primitive."""
    positions: np.ndarray
    indices: np.ndarray
    normals: Optional[np.ndarray] = None
    joints: Optional[np.ndarray] = None
    weights: Optional[np.ndarray] = None
    morph_positions: List[np.ndarray] = field(default_factory=list)
    morph_normals: List[Optional[np.ndarray]] = field(default_factory=list)
    color: Tuple[float, float, float, float] = DEFAULT_COLOR


@dataclass
class Mesh:
    primitives: List[MeshPrimitive]
    default_weights: np.ndarray
    morph_weights: np.ndarray


@dataclass
class Skin:
    joints: List[int]
    inverse_bind_matrices: np.ndarray


@dataclass
class BlendShapeBind:
    """One morph target driven by a blend shape group; weight is in [0, 1]."""
    mesh: int
    index: int
    weight: float


class BlendShapeProxy:
    """
    Named blend shape groups driving mesh morph targets.

    Values are weights in [0, 1]; anything outside is clamped.
    """

    def __init__(self, groups: Dict[str, List[BlendShapeBind]]):
        self.groups = groups
        self.values: Dict[str, float] = {name: 0.0 for name in groups}

    def set_value(self, name: str, value: float):
        if name not in self.groups:
            return
        self.values[name] = min(1.0, max(0.0, float(value)))

    def get_value(self, name: str) -> Optional[float]:
        return self.values.get(name)

    def apply(self, meshes: List[Mesh]):
        """Write group values into mesh morph weights."""
        for mesh in meshes:
            mesh.morph_weights[:] = mesh.default_weights

        for name, binds in self.groups.items():
            value = self.values[name]
            if value == 0.0:
                continue
            for bind in binds:
                if bind.mesh >= len(meshes):
                    continue
                weights = meshes[bind.mesh].morph_weights
                if bind.index < len(weights):
                    weights[bind.index] += bind.weight * value


class Humanoid:
    """Humanoid bone name -> scene node lookup."""

    def __init__(self, bones: Dict[str, int], nodes: List[SceneNode]):
        self.bones = bones
        self._nodes = nodes

    def get_bone_node(self, bone_name: str) -> Optional[SceneNode]:
        index = self.bones.get(bone_name)
        if index is None:
            return None
        return self._nodes[index]


class VRMModel(BaseAvatar):
    """
    VRM avatar: scene graph, humanoid bones and blend shapes.

    Supports VRM 0.x ("VRM" extension) and VRM 1.0 ("VRMC_vrm" extension).
    VRM 1.0 expression presets are exposed under the VRM 0.x preset names.
    """

    def __init__(self,
                 nodes: List[SceneNode],
                 humanoid: Humanoid,
                 blend_shape_proxy: BlendShapeProxy,
                 meshes: Optional[List[Mesh]] = None,
                 skins: Optional[List[Skin]] = None,
                 spec_version: str = "0.x",
                 title: str = ""):
        self.nodes = nodes
        self.humanoid = humanoid
        self.blend_shape_proxy = blend_shape_proxy
        self.meshes = meshes or []
        self.skins = skins or []
        self.spec_version = spec_version
        self.title = title
        self.roots = [i for i, node in enumerate(nodes) if node.parent is None]
        self.update_world_matrices()

    @classmethod
    def from_gltf(cls, gltf: GLTF2, blob: Optional[bytes] = None) -> "VRMModel":
        """
        Build a model from a parsed glTF document.

        Args:
            gltf: Parsed document carrying a VRM extension
            blob: Binary chunk of the GLB container (needed for meshes)

        Returns:
            VRM model

        Raises:
            AvatarLoadError: If the document has no VRM extension
        """
        extensions = gltf.extensions or {}
        nodes = _load_nodes(gltf)
        meshes = _load_meshes(gltf, blob) if blob is not None else []
        skins = _load_skins(gltf, blob) if blob is not None else []

        if "VRM" in extensions:
            vrm = extensions["VRM"]
            bones = {
                b["bone"]: b["node"]
                for b in vrm.get("humanoid", {}).get("humanBones", [])
                if b.get("node", -1) >= 0
            }
            groups = _vrm0_blend_shape_groups(vrm)
            version = "0.x"
            title = vrm.get("meta", {}).get("title", "")
        elif "VRMC_vrm" in extensions:
            vrm = extensions["VRMC_vrm"]
            bones = {
                name: bone["node"]
                for name, bone in vrm.get("humanoid", {}).get("humanBones", {}).items()
            }
            groups = _vrm1_expression_groups(vrm, nodes)
            version = "1.0"
            title = vrm.get("meta", {}).get("name", "")
        else:
            raise AvatarLoadError("Document has no VRM extension")

        for name, index in bones.items():
            if not 0 <= index < len(nodes):
                raise AvatarLoadError(f"Humanoid bone {name} refers to missing node {index}")

        return cls(nodes, Humanoid(bones, nodes), BlendShapeProxy(groups),
                   meshes=meshes, skins=skins, spec_version=version, title=title)

    def get_bone_node(self, bone_name: str) -> Optional[SceneNode]:
        return self.humanoid.get_bone_node(bone_name)

    def set_blend_shape(self, preset_name: str, value: float) -> None:
        self.blend_shape_proxy.set_value(preset_name, value)

    def get_blend_shape(self, preset_name: str) -> Optional[float]:
        return self.blend_shape_proxy.get_value(preset_name)

    def update(self, delta_time: float) -> None:
        """Apply blend shapes to morph targets and recompute node transforms."""
        self.blend_shape_proxy.apply(self.meshes)
        self.update_world_matrices()

    def update_world_matrices(self):
        stack = [(index, np.eye(4)) for index in self.roots]
        while stack:
            index, parent_matrix = stack.pop()
            node = self.nodes[index]
            node.world_matrix = parent_matrix @ node.local_matrix()
            stack.extend((child, node.world_matrix) for child in node.children)

    def skinned_primitives(self) -> Iterator[Tuple[np.ndarray, Optional[np.ndarray], MeshPrimitive]]:
        """
        Compute deformed vertex data for drawing.

        Yields:
            (positions (V, 3), normals (V, 3) or None, primitive) in world space
        """
        for node in self.nodes:
            if node.mesh is None or node.mesh >= len(self.meshes):
                continue
            mesh = self.meshes[node.mesh]
            skin = self.skins[node.skin] if node.skin is not None and node.skin < len(self.skins) else None

            for prim in mesh.primitives:
                positions, normals = _morph(prim, mesh.morph_weights)
                if skin is not None and prim.joints is not None and prim.weights is not None:
                    positions, normals = self._skin(skin, prim, positions, normals)
                else:
                    positions, normals = _transform(node.world_matrix, positions, normals)
                yield positions, normals, prim

    def _skin(self, skin: Skin, prim: MeshPrimitive, positions: np.ndarray,
              normals: Optional[np.ndarray]) -> Tuple[np.ndarray, Optional[np.ndarray]]:
        joint_matrices = np.stack([
            self.nodes[joint].world_matrix @ skin.inverse_bind_matrices[i]
            for i, joint in enumerate(skin.joints)
        ])
        # Per-vertex blend of the four influencing joint matrices
        vertex_matrices = np.einsum("vk,vkij->vij", prim.weights, joint_matrices[prim.joints])
        skinned = np.einsum("vij,vj->vi", vertex_matrices[:, :3, :3], positions) + vertex_matrices[:, :3, 3]

        skinned_normals = None
        if normals is not None:
            skinned_normals = np.einsum("vij,vj->vi", vertex_matrices[:, :3, :3], normals)
            lengths = np.linalg.norm(skinned_normals, axis=1, keepdims=True)
            skinned_normals = skinned_normals / np.maximum(lengths, 1e-8)
        return skinned, skinned_normals


def _morph(prim: MeshPrimitive, weights: np.ndarray) -> Tuple[np.ndarray, Optional[np.ndarray]]:
    positions = prim.positions.astype(np.float64)
    normals = prim.normals.astype(np.float64) if prim.normals is not None else None
    for i, weight in enumerate(weights):
        if weight == 0.0 or i >= len(prim.morph_positions):
            continue
        positions = positions + weight * prim.morph_positions[i]
        if normals is not None and prim.morph_normals[i] is not None:
            normals = normals + weight * prim.morph_normals[i]
    return positions, normals


def _transform(matrix: np.ndarray, positions: np.ndarray,
               normals: Optional[np.ndarray]) -> Tuple[np.ndarray, Optional[np.ndarray]]:
    out_positions = positions @ matrix[:3, :3].T + matrix[:3, 3]
    out_normals = normals @ matrix[:3, :3].T if normals is not None else None
    return out_positions, out_normals


def _load_nodes(gltf: GLTF2) -> List[SceneNode]:
    nodes = []
    for i, gnode in enumerate(gltf.nodes or []):
        node = SceneNode(gnode.name or f"node_{i}")
        if gnode.matrix:
            m = np.array(gnode.matrix, dtype=np.float64).reshape(4, 4).T  # Column-major
            node.translation = m[:3, 3].copy()
            node.scale = np.linalg.norm(m[:3, :3], axis=0)
            node.rotation = matrix_to_euler_xyz(m[:3, :3] / node.scale)
        else:
            if gnode.translation:
                node.translation = np.array(gnode.translation, dtype=np.float64)
            if gnode.rotation:
                node.rotation = matrix_to_euler_xyz(quaternion_to_matrix(gnode.rotation))
            if gnode.scale:
                node.scale = np.array(gnode.scale, dtype=np.float64)
        node.children = list(gnode.children or [])
        node.mesh = gnode.mesh
        node.skin = gnode.skin
        nodes.append(node)

    for i, node in enumerate(nodes):
        for child in node.children:
            nodes[child].parent = i
    return nodes


def _vrm0_blend_shape_groups(vrm: Dict[str, Any]) -> Dict[str, List[BlendShapeBind]]:
    groups: Dict[str, List[BlendShapeBind]] = {}
    for group in vrm.get("blendShapeMaster", {}).get("blendShapeGroups", []):
        preset = group.get("presetName", "unknown")
        name = preset if preset and preset != "unknown" else group.get("name", "").lower()
        if not name:
            continue
        # VRM 0.x bind weights are percentages
        groups[name] = [
            BlendShapeBind(b["mesh"], b["index"], b.get("weight", 100.0) / 100.0)
            for b in group.get("binds", [])
        ]
    return groups


def _vrm1_expression_groups(vrm: Dict[str, Any], nodes: List[SceneNode]) -> Dict[str, List[BlendShapeBind]]:
    groups: Dict[str, List[BlendShapeBind]] = {}
    expressions = vrm.get("expressions", {})
    entries = list(expressions.get("preset", {}).items()) + list(expressions.get("custom", {}).items())
    for name, expression in entries:
        binds = []
        for b in expression.get("morphTargetBinds", []):
            mesh = nodes[b["node"]].mesh
            if mesh is not None:
                binds.append(BlendShapeBind(mesh, b["index"], b.get("weight", 1.0)))
        groups[VRM1_EXPRESSION_PRESETS.get(name, name)] = binds
    return groups


def read_accessor(gltf: GLTF2, blob: bytes, accessor_index: int) -> np.ndarray:
    """
    Read a glTF accessor into a numpy array of shape (count, components).

    Handles interleaved buffer views, normalized integers and sparse storage.
    """
    accessor = gltf.accessors[accessor_index]
    dtype = np.dtype(COMPONENT_DTYPES[accessor.componentType])
    components = TYPE_COMPONENTS[accessor.type]

    if accessor.bufferView is not None:
        view = gltf.bufferViews[accessor.bufferView]
        offset = (view.byteOffset or 0) + (accessor.byteOffset or 0)
        item_size = dtype.itemsize * components
        stride = view.byteStride or item_size
        data = np.ndarray(
            shape=(accessor.count, components),
            dtype=dtype,
            buffer=blob,
            offset=offset,
            strides=(stride, dtype.itemsize),
        ).copy()
    else:
        data = np.zeros((accessor.count, components), dtype=dtype)

    sparse = accessor.sparse
    if sparse is not None and sparse.count:
        idx_view = gltf.bufferViews[sparse.indices.bufferView]
        indices = np.frombuffer(
            blob,
            dtype=COMPONENT_DTYPES[sparse.indices.componentType],
            count=sparse.count,
            offset=(idx_view.byteOffset or 0) + (sparse.indices.byteOffset or 0),
        )
        val_view = gltf.bufferViews[sparse.values.bufferView]
        values = np.frombuffer(
            blob,
            dtype=dtype,
            count=sparse.count * components,
            offset=(val_view.byteOffset or 0) + (sparse.values.byteOffset or 0),
        ).reshape(sparse.count, components)
        data[indices] = values

    if accessor.normalized and dtype.kind in "iu":
        data = data.astype(np.float32) / np.iinfo(dtype).max
    return data


def _load_meshes(gltf: GLTF2, blob: bytes) -> List[Mesh]:
    meshes = []
    for gmesh in gltf.meshes or []:
        primitives = []
        target_count = 0
        for gprim in gmesh.primitives:
            attrs = gprim.attributes
            position_index = _get(attrs, "POSITION")
            if position_index is None:
                continue
            positions = read_accessor(gltf, blob, position_index)

            if gprim.indices is not None:
                indices = read_accessor(gltf, blob, gprim.indices).reshape(-1).astype(np.uint32)
            else:
                indices = np.arange(len(positions), dtype=np.uint32)

            prim = MeshPrimitive(positions=positions, indices=indices, color=_material_color(gltf, gprim.material))
            normal_index = _get(attrs, "NORMAL")
            if normal_index is not None:
                prim.normals = read_accessor(gltf, blob, normal_index)
            joints_index = _get(attrs, "JOINTS_0")
            weights_index = _get(attrs, "WEIGHTS_0")
            if joints_index is not None and weights_index is not None:
                prim.joints = read_accessor(gltf, blob, joints_index).astype(np.int64)
                prim.weights = read_accessor(gltf, blob, weights_index).astype(np.float64)

            for target in gprim.targets or []:
                target_position = _get(target, "POSITION")
                target_normal = _get(target, "NORMAL")
                prim.morph_positions.append(
                    read_accessor(gltf, blob, target_position) if target_position is not None
                    else np.zeros_like(positions)
                )
                prim.morph_normals.append(
                    read_accessor(gltf, blob, target_normal) if target_normal is not None else None
                )
            target_count = max(target_count, len(prim.morph_positions))
            primitives.append(prim)

        defaults = np.zeros(target_count)
        if gmesh.weights:
            n = min(len(gmesh.weights), target_count)
            defaults[:n] = gmesh.weights[:n]
        meshes.append(Mesh(primitives=primitives, default_weights=defaults, morph_weights=defaults.copy()))
    return meshes


def _load_skins(gltf: GLTF2, blob: bytes) -> List[Skin]:
    skins = []
    for gskin in gltf.skins or []:
        joints = list(gskin.joints)
        if gskin.inverseBindMatrices is not None:
            # Column-major to row-major
            ibm = read_accessor(gltf, blob, gskin.inverseBindMatrices).reshape(-1, 4, 4).transpose(0, 2, 1)
        else:
            ibm = np.tile(np.eye(4), (len(joints), 1, 1))
        skins.append(Skin(joints=joints, inverse_bind_matrices=ibm.astype(np.float64)))
    return skins


def _material_color(gltf: GLTF2, material_index: Optional[int]) -> Tuple[float, float, float, float]:
    if material_index is None or not gltf.materials:
        return DEFAULT_COLOR
    pbr = gltf.materials[material_index].pbrMetallicRoughness
    factor = _get(pbr, "baseColorFactor")
    if not factor:
        return DEFAULT_COLOR
    return tuple(float(c) for c in factor)
