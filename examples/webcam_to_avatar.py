#!/usr/bin/env python3
"""
webcam_to_avatar.py - Live VRM avatar puppeteering from a webcam

This script opens the default camera, detects the face in every frame and
drives a VRM avatar from it: head yaw follows the nose, the mouth follows the
lips, and a detected smile triggers a short Joy animation.

Usage:
    python webcam_to_avatar.py [options]

Example:
    python webcam_to_avatar.py
    python webcam_to_avatar.py --no-landmarks
"""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Optional

# Import our package
sys.path.append(str(Path(__file__).parent.parent))
from vrm_face_puppet import (
    CameraReader,
    FacePuppetPipeline,
    InsightFaceDetector,
    LandmarkOverlay,
    SceneRenderer,
)


def parse_args() -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Drive a VRM avatar from webcam face tracking",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Keys (avatar window):
  w  set Joy to 0.5
  e  set Joy to 0.0

Examples:
  # Avatar plus landmark preview
  python webcam_to_avatar.py

  # Avatar only
  python webcam_to_avatar.py --no-landmarks
        """
    )

    parser.add_argument(
        "--no-landmarks",
        action="store_true",
        help="Hide the landmark preview window"
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Show debug information"
    )

    return parser.parse_args()


def run_pipeline(args: argparse.Namespace) -> None:
    """Open devices, run both loops and release everything on exit."""
    camera = CameraReader()
    print(f"Opened camera: {camera.width}x{camera.height}, {camera.fps} fps")

    detector = InsightFaceDetector()
    renderer = SceneRenderer()
    overlay: Optional[LandmarkOverlay] = None if args.no_landmarks else LandmarkOverlay()

    pipeline = FacePuppetPipeline(detector, camera, renderer, overlay=overlay)
    try:
        with camera, renderer:
            asyncio.run(pipeline.run())
    finally:
        if overlay is not None:
            overlay.close()
        detector.close()

    print(f"Stopped after {pipeline.render_loop.frame} frames, {pipeline.detection_loop.detections} detections")


def main() -> None:
    """Main execution function."""
    args = parse_args()

    try:
        run_pipeline(args)
    except KeyboardInterrupt:
        print("Interrupted")
    except Exception as e:
        print(f"Error: {e}")
        if args.debug:
            import traceback
            traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
