"""
Scenekit Configuration Settings

All configuration constants for the scene and animation system.
Modify these values to change engine behavior.
"""

import json
from pathlib import Path

# ============================================================================
# Project Paths
# ============================================================================

PROJECT_ROOT = Path(__file__).parent.parent.parent.parent
ASSETS_DIR = PROJECT_ROOT / "assets"
ANIMATIONS_DIR = ASSETS_DIR / "animations"
SCENES_DIR = ASSETS_DIR / "scenes"

# ============================================================================
# Attribute Animation Defaults
# ============================================================================

DEFAULT_ANIMATION_SPEED = 1.0       # Playback speed when none is given
DEFAULT_WRAP_MODE = "Loop"          # "Loop", "Once" or "Clamp"
DEFAULT_INTERPOLATION = "Linear"    # "Linear" or "Spline"
DEFAULT_SPLINE_TENSION = 0.5        # Tangent scale for spline curves

# ============================================================================
# Resource Cache
# ============================================================================

RESOURCE_CACHE_AUTO_RELEASE = False  # Drop resources as soon as ref count hits 0

# ============================================================================
# XML Output
# ============================================================================

XML_INDENT = "    "     # Indentation for pretty-printed resource files
FLOAT_FORMAT = "g"      # Format spec used when writing float values

# ============================================================================
# Debug Settings
# ============================================================================

DEBUG_ATTRIBUTE_ANIMATION = False  # Log every binding eviction during update
DEBUG_RESOURCE_CACHE = False       # Log cache hits and misses

# ============================================================================
# Resource Paths - Loaded from JSON Config
# ============================================================================

def _load_resource_paths() -> list:
    """
    Load resource directories from JSON configuration file.

    Returns:
        List of directories searched by the resource cache, in priority order
    """
    config_path = ASSETS_DIR / "config" / "resource_paths.json"

    if not config_path.exists():
        return [ASSETS_DIR]

    try:
        with open(config_path, 'r') as f:
            config = json.load(f)
    except (OSError, ValueError) as e:
        print(f"Error loading resource paths: {e}")
        return [ASSETS_DIR]

    paths = []
    for entry in config.get("resource_dirs", []):
        path = Path(entry)
        if not path.is_absolute():
            path = PROJECT_ROOT / path
        paths.append(path)

    return paths or [ASSETS_DIR]

# Load resource directories from JSON configuration
RESOURCE_DIRS = _load_resource_paths()
