#!/usr/bin/env python3
"""
Decoder Configuration
Options controlling placeholder names and how strictly local problems are treated.
"""

from dataclasses import dataclass, replace
from typing import Dict, Any


# Source-schema defaults and synthesized vertex attributes
DEFAULT_NORMAL = (0.0, 1.0, 0.0)
DEFAULT_UV = (0.0, 0.0)
DEFAULT_BASE_COLOR = (1.0, 1.0, 1.0, 1.0)
DEFAULT_METALLIC = 1.0
DEFAULT_ROUGHNESS = 1.0

# Stable per-texture reference handed to texture resolution
TEXTURE_REFERENCE_FORMAT = "texture_{index}"


@dataclass(frozen=True)
class DecoderOptions:
    """Options for a single decode

    Attributes:
        strict: Promote dropped primitives and cyclic hierarchies to errors
        mesh_placeholder: Name given to meshes without a name
        material_placeholder: Name given to materials without a name
        node_placeholder: Name given to nodes without a name
    """
    strict: bool = False
    mesh_placeholder: str = "Unnamed"
    material_placeholder: str = "Unnamed"
    node_placeholder: str = "Node"

    @classmethod
    def from_preset(cls, preset_name: str, **overrides: Any) -> 'DecoderOptions':
        """Create options from a named preset

        Args:
            preset_name: 'lenient' (best-effort decode) or 'strict'
            **overrides: Field values replacing the preset's

        Returns:
            DecoderOptions: Options instance with preset values

        Raises:
            ValueError: If the preset name is unknown
        """
        presets: Dict[str, Dict[str, Any]] = {
            'lenient': {'strict': False},
            'strict': {'strict': True},
        }
        if preset_name not in presets:
            raise ValueError(
                f"Unknown preset: {preset_name}\n"
                f"Available presets: {', '.join(sorted(presets))}"
            )
        return replace(cls(**presets[preset_name]), **overrides)
