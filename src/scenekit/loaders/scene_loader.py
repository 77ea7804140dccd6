"""Scene loader for XML-defined scenes."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List
from xml.etree.ElementTree import Element, SubElement

from ..config.settings import PROJECT_ROOT
from ..core.resource_cache import ResourceCache
from ..core.scene import Scene, SceneObject
from ..core.xml_utils import read_xml_file, write_xml_file

logger = logging.getLogger(__name__)


@dataclass
class SceneLoadResult:
    """Result returned from :class:`SceneLoader`."""

    scene: Scene
    failed_nodes: List[str] = field(default_factory=list)
    metadata: Dict[str, str] = field(default_factory=dict)


class SceneLoader:
    """Load and save scenes as XML documents.

    Layout::

        <scene name="Demo">
            <node>
                <attribute name="Name" value="Cube" />
                <attribute name="Position" value="0 1 0" />
                <attributeAnimation name="Position" speed="1"> ... </attributeAnimation>
            </node>
        </scene>
    """

    def __init__(self, resource_cache: ResourceCache = None):
        self.resource_cache = resource_cache or ResourceCache.get_instance()

    @staticmethod
    def _resolve(path: Path | str) -> Path:
        scene_path = Path(path)
        if not scene_path.is_absolute():
            scene_path = PROJECT_ROOT / scene_path
        return scene_path.resolve()

    def load_scene(self, path: Path | str) -> SceneLoadResult:
        """
        Load a scene from disk.

        Nodes that fail to load are reported in the result and left out of
        the scene.

        Raises:
            FileNotFoundError: If the scene file does not exist
            ValueError: If the file is not a scene document
        """
        scene_path = self._resolve(path)
        if not scene_path.exists():
            raise FileNotFoundError(f"Scene file not found: {scene_path}")

        root = read_xml_file(scene_path)
        if root is None or root.tag != "scene":
            raise ValueError(f"Not a scene document: {scene_path}")

        # Scene-relative resource references
        self.resource_cache.add_resource_dir(scene_path.parent, priority=False)

        return self.load_scene_xml(root)

    def load_scene_xml(self, root: Element) -> SceneLoadResult:
        """Instantiate a scene from a parsed <scene> element."""
        scene = Scene()
        result = SceneLoadResult(scene=scene, metadata=dict(root.attrib))

        for index, node in enumerate(root.findall("node")):
            obj = SceneObject()
            if not obj.load_xml(node):
                label = obj.name if obj.name != "Object" else f"node #{index}"
                logger.error("Failed to load scene node %s", label)
                result.failed_nodes.append(label)
                continue
            scene.add_object(obj)

        return result

    def save_scene(self, scene: Scene, path: Path | str, **metadata: str) -> bool:
        """
        Save a scene to disk.

        Returns:
            False if any object failed to save; nothing is written then
        """
        root = Element("scene", {key: str(value) for key, value in metadata.items()})
        for obj in scene.objects:
            node = SubElement(root, "node")
            if not obj.save_xml(node):
                logger.error("Failed to save scene node %s", obj.name)
                return False

        write_xml_file(root, self._resolve(path))
        return True
