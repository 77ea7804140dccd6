#!/usr/bin/env python3
"""
Animated Scene Example

Loads the demo scene, steps it at a fixed frame rate and prints the
animated attributes. Useful for checking animation files without a
renderer.
"""

import sys
sys.path.insert(0, '..')

import argparse
import logging

from src.scenekit import SCENES_DIR, ResourceCache, SceneLoader

logger = logging.getLogger(__name__)


def parse_args():
    parser = argparse.ArgumentParser(description="Play a scene file headlessly")
    parser.add_argument("scene", nargs="?", default=str(SCENES_DIR / "demo.xml"),
                        help="Scene XML file")
    parser.add_argument("--duration", type=float, default=2.0, help="Seconds to simulate")
    parser.add_argument("--fps", type=float, default=10.0, help="Update rate")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args()


def main():
    args = parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(levelname)s %(name)s: %(message)s")

    loader = SceneLoader()
    result = loader.load_scene(args.scene)
    scene = result.scene
    for label in result.failed_nodes:
        logger.warning("Skipped node %s", label)

    for obj in scene.objects:
        obj.subscribe_animation_event(
            "Apex", lambda o, event_type, data: logger.info("%s reached %s %s", o.name, event_type, data))

    time_step = 1.0 / args.fps
    frames = int(args.duration * args.fps)
    for frame in range(frames):
        scene.update(time_step)
        for obj in scene.objects:
            if not obj.has_attribute_animations():
                continue
            values = ", ".join(f"{name}={obj.get_attribute(name)}"
                               for name in obj.attribute_animation_instances)
            print(f"[{(frame + 1) * time_step:5.2f}s] {obj.name}: {values}")

    print(f"\nAnimated objects remaining: {scene.animated_object_count}")
    ResourceCache.get_instance().print_cache_status()


if __name__ == "__main__":
    main()
