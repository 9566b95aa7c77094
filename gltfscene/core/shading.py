#!/usr/bin/env python3
"""
Shading Module
Specular/shininess shading material derived from decoded PBR materials.
"""

from dataclasses import dataclass
from typing import Tuple

import numpy as np


@dataclass(frozen=True)
class ShadingMaterial:
    """Shading-ready material consumed by the renderer

    Attributes:
        color: Base color (RGB)
        specular: Specular reflectivity (0.0 - 1.0)
        shininess: Shininess exponent
        use_texture: True if a base color texture should be sampled
    """
    color: Tuple[float, float, float]
    specular: float
    shininess: float
    use_texture: bool = False

    @classmethod
    def from_roughness(cls, color: Tuple[float, float, float], roughness: float,
                       use_texture: bool) -> 'ShadingMaterial':
        """Bridge PBR roughness to the specular/shininess model

        specular = 1 - roughness, shininess = 32 * (1 - roughness) + 1.
        """
        gloss = 1.0 - roughness
        return cls(
            color=(float(color[0]), float(color[1]), float(color[2])),
            specular=gloss,
            shininess=32.0 * gloss + 1.0,
            use_texture=use_texture,
        )

    @classmethod
    def default(cls) -> 'ShadingMaterial':
        """Renderer fallback for primitives without a material"""
        return cls(color=(0.8, 0.8, 0.8), specular=0.5, shininess=32.0)

    def to_uniform(self) -> np.ndarray:
        """Pack into the 32-byte uniform layout

        Layout: color.rgb, pad, specular, shininess, pad, pad.

        Returns:
            np.ndarray: float32 array of 8 values
        """
        return np.array([
            self.color[0], self.color[1], self.color[2], 0.0,
            self.specular, self.shininess, 0.0, 0.0,
        ], dtype=np.float32)
