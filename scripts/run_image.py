#!/usr/bin/env python3
"""Enroll, recognize or remove faces using the configured engine.

This script initializes the engine named by ENGINE_FACTORY (see .env),
runs one operation and tears the engine down again.

Usage:
    python scripts/run_image.py enroll --id 5f0c...e1 --image photo.jpg
    python scripts/run_image.py --log-file scan.log find --image group.jpg --save result.jpg
    python scripts/run_image.py unregister --id 5f0c...e1
"""

from __future__ import annotations

import argparse
import sys
import uuid
from pathlib import Path

import cv2

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from facescanner.config import Config
from facescanner.errors import FaceScannerError
from facescanner.factory import create_orchestrator
from facescanner.logging_config import get_logger, setup_logging
from facescanner.overlay import render_faces
from facescanner.services import FaceOrchestrator

logger = get_logger("facescanner.run_image")


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Face enrollment and recognition on static images",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "--log-file",
        type=str,
        default=None,
        help="Also write log messages to this file (uncolored)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    enroll = subparsers.add_parser("enroll", help="Enroll the largest face in an image")
    enroll.add_argument("--id", type=uuid.UUID, required=True, help="Identity UUID")
    enroll.add_argument("--image", type=str, required=True, help="Path to photo")

    find = subparsers.add_parser("find", help="Recognize all faces in an image")
    find.add_argument("--image", type=str, required=True, help="Path to image")
    find.add_argument(
        "--save",
        type=str,
        default=None,
        help="Path to save the normalized image with faces drawn",
    )

    unregister = subparsers.add_parser("unregister", help="Remove an enrolled identity")
    unregister.add_argument("--id", type=uuid.UUID, required=True, help="Identity UUID")

    return parser.parse_args()


def run_find(orchestrator: FaceOrchestrator, image_path: Path, save: str | None) -> None:
    """Recognize faces and print (and optionally save) the results."""
    faces = orchestrator.find_all_in_image(image_path.read_bytes())

    if not faces:
        print("No faces detected in image")
        return

    for i, face in enumerate(faces, 1):
        status = str(face.identity) if face.is_known else "UNKNOWN"
        print(f"Face {i}: {status}")
        print(f"  Box: left={face.left} top={face.top} width={face.width} height={face.height}")

    if save:
        frame = cv2.imread(str(image_path))
        if frame is None:
            logger.error(f"Failed to read image for drawing: {image_path}")
            return
        cv2.imwrite(save, render_faces(frame, faces))
        print(f"Image saved: {save}")


def main() -> int:
    """Main function."""
    args = parse_args()

    image_path = Path(args.image) if getattr(args, "image", None) else None
    if image_path is not None and not image_path.exists():
        logger.error(f"Image not found: {image_path}")
        return 1

    config = Config.from_env()
    setup_logging(config.log_level, log_file=args.log_file)
    logger.info(f"Loaded config: engine={config.engine_factory or '<unset>'}")

    try:
        orchestrator = create_orchestrator(config)
    except FaceScannerError as e:
        logger.error(f"Failed to initialize engine: {e}")
        return 1

    try:
        if args.command == "enroll":
            orchestrator.enroll(args.id, image_path.read_bytes())
            print(f"Enrolled {args.id}")
        elif args.command == "find":
            run_find(orchestrator, image_path, args.save)
        elif args.command == "unregister":
            orchestrator.unregister(args.id)
            print(f"Unregistered {args.id}")
    except FaceScannerError as e:
        logger.error(f"{args.command} failed: {e}")
        return 1
    finally:
        orchestrator.teardown()

    return 0


if __name__ == "__main__":
    sys.exit(main())
