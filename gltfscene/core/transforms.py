#!/usr/bin/env python3
"""
Transforms Module
Matrix and TRS helpers for node transforms.

glTF stores node matrices as 16 floats in column-major order and rotations as
(x, y, z, w) quaternions. Matrices returned here are 4x4 numpy arrays in the
usual row/column math layout, so a point transforms as ``M @ [x, y, z, 1]``.
"""

from typing import Sequence, Tuple

import numpy as np

Vec3 = Tuple[float, float, float]
Quat = Tuple[float, float, float, float]

IDENTITY_TRANSLATION: Vec3 = (0.0, 0.0, 0.0)
IDENTITY_ROTATION: Quat = (0.0, 0.0, 0.0, 1.0)
IDENTITY_SCALE: Vec3 = (1.0, 1.0, 1.0)


def matrix_from_column_major(values: Sequence[float]) -> np.ndarray:
    """Build a 4x4 matrix from 16 column-major floats"""
    return np.array(values, dtype=np.float64).reshape(4, 4).T


def quaternion_from_rotation_matrix(rot: np.ndarray) -> Quat:
    """Convert a 3x3 rotation matrix to an (x, y, z, w) quaternion

    Branches on the largest diagonal term to keep the square root well
    conditioned. The result is renormalized; a zero-length result falls back
    to the identity rotation.

    Args:
        rot: 3x3 rotation matrix

    Returns:
        tuple: (x, y, z, w) unit quaternion
    """
    trace = rot[0][0] + rot[1][1] + rot[2][2]

    if trace >= 0.0:
        s = np.sqrt(trace + 1.0)
        w = 0.5 * s
        s = 0.5 / s
        x = (rot[2][1] - rot[1][2]) * s
        y = (rot[0][2] - rot[2][0]) * s
        z = (rot[1][0] - rot[0][1]) * s
    elif rot[0][0] > rot[1][1] and rot[0][0] > rot[2][2]:
        s = np.sqrt(rot[0][0] - rot[1][1] - rot[2][2] + 1.0)
        x = 0.5 * s
        s = 0.5 / s
        y = (rot[1][0] + rot[0][1]) * s
        z = (rot[0][2] + rot[2][0]) * s
        w = (rot[2][1] - rot[1][2]) * s
    elif rot[1][1] > rot[2][2]:
        s = np.sqrt(rot[1][1] - rot[0][0] - rot[2][2] + 1.0)
        y = 0.5 * s
        s = 0.5 / s
        z = (rot[2][1] + rot[1][2]) * s
        x = (rot[1][0] + rot[0][1]) * s
        w = (rot[0][2] - rot[2][0]) * s
    else:
        s = np.sqrt(rot[2][2] - rot[0][0] - rot[1][1] + 1.0)
        z = 0.5 * s
        s = 0.5 / s
        x = (rot[0][2] + rot[2][0]) * s
        y = (rot[2][1] + rot[1][2]) * s
        w = (rot[1][0] - rot[0][1]) * s

    q = np.array([x, y, z, w], dtype=np.float64)
    norm = np.linalg.norm(q)
    if not np.isfinite(norm) or norm == 0.0:
        return IDENTITY_ROTATION
    q = q / norm
    return (float(q[0]), float(q[1]), float(q[2]), float(q[3]))


def rotation_matrix_from_quaternion(q: Sequence[float]) -> np.ndarray:
    """Convert an (x, y, z, w) quaternion to a 3x3 rotation matrix"""
    x, y, z, w = (float(v) for v in q)
    return np.array([
        [1 - 2 * (y * y + z * z), 2 * (x * y - z * w), 2 * (x * z + y * w)],
        [2 * (x * y + z * w), 1 - 2 * (x * x + z * z), 2 * (y * z - x * w)],
        [2 * (x * z - y * w), 2 * (y * z + x * w), 1 - 2 * (x * x + y * y)],
    ], dtype=np.float64)


def decompose_matrix(values: Sequence[float]) -> Tuple[Vec3, Quat, Vec3]:
    """Decompose a column-major 4x4 matrix into translation, rotation and scale

    Translation is taken from the last column and scale from the lengths of
    the three basis columns. A negative determinant is carried as a negative
    Z scale. Zero-length basis columns are left unnormalized.

    Args:
        values: 16 floats in column-major order

    Returns:
        tuple: (translation, rotation, scale) where:
            - translation: (x, y, z)
            - rotation: (x, y, z, w) unit quaternion
            - scale: (sx, sy, sz)
    """
    m = matrix_from_column_major(values)
    translation = (float(m[0][3]), float(m[1][3]), float(m[2][3]))

    basis = m[:3, :3].copy()
    sx = float(np.linalg.norm(basis[:, 0]))
    sy = float(np.linalg.norm(basis[:, 1]))
    sz = float(np.linalg.norm(basis[:, 2]))
    if np.linalg.det(basis) < 0.0:
        sz = -sz
    scale = (sx, sy, sz)

    for column, s in enumerate(scale):
        if s != 0.0:
            basis[:, column] = basis[:, column] / s

    rotation = quaternion_from_rotation_matrix(basis)
    return translation, rotation, scale


def compose_trs(translation: Sequence[float], rotation: Sequence[float],
                scale: Sequence[float]) -> np.ndarray:
    """Compose T * R * S into a 4x4 matrix

    Args:
        translation: (x, y, z)
        rotation: (x, y, z, w) quaternion
        scale: (sx, sy, sz)

    Returns:
        np.ndarray: 4x4 float64 matrix
    """
    m = np.identity(4, dtype=np.float64)
    m[:3, :3] = rotation_matrix_from_quaternion(rotation) @ np.diag([float(v) for v in scale])
    m[:3, 3] = [float(v) for v in translation]
    return m
