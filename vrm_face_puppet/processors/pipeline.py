"""Detection and render loops driving the avatar from the camera."""

import asyncio
import math
from typing import List, Optional

from ..avatar.vrm_loader import ProgressPrinter, VRMLoader
from ..core.avatar_status import AvatarStatus
from ..core.base_avatar import BaseAvatar
from ..core.base_detector import BaseDetector
from ..core.base_frame_reader import BaseFrameReader
from ..core.base_mapper import BaseAnimationMapper
from ..core.base_renderer import BaseRenderer
from ..core.clock import AnimationClock
from ..core.constants import (
    AVATAR_PATH,
    BLEND_SHAPE_JOY,
    BONE_HIPS,
    DISPLAY_REFRESH_HZ,
    JOY_OVERRIDE_KEYS,
    RENDER_SKIP_INTERVAL,
    WEIGHTS_DIR,
)
from ..core.types import AnimationSignal, FaceResult
from ..mappers.animation_mapper import AnimationMapper
from .landmark_overlay import LandmarkOverlay
from .signal_extractor import SignalExtractor


class DetectionLoop:
    """
    Repeating detection task: camera frame -> detector -> signal extractor.

    Polls without delay until the detector reports its models loaded, then
    runs detections back to back. There is no frame-rate cap; the cadence is
    set by inference time. Frames and inference run in worker threads so the
    render loop keeps ticking meanwhile.
    """

    def __init__(self,
                 detector: BaseDetector,
                 reader: BaseFrameReader,
                 signal: AnimationSignal,
                 extractor: Optional[SignalExtractor] = None,
                 overlay: Optional[LandmarkOverlay] = None):
        self.detector = detector
        self.reader = reader
        self.signal = signal
        self.extractor = extractor or SignalExtractor()
        self.overlay = overlay

        self.running = False
        self.polls = 0
        self.detections = 0

    async def step(self) -> Optional[FaceResult]:
        """
        Run one iteration.

        Returns:
            Detection result, or None if models are not ready, no frame was
            available or no face was found
        """
        if not self.detector.is_loaded:
            self.polls += 1
            return None

        frame = await asyncio.to_thread(self.reader.read)
        if frame is None:
            return None

        result = await asyncio.to_thread(self.detector.detect, frame)
        self.detections += 1
        self.extractor.update(result, self.signal)

        if self.overlay is not None:
            self.overlay.show(self.overlay.draw(frame, result))
        return result

    async def run(self):
        self.running = True
        while self.running:
            await self.step()
            # Reschedule immediately
            await asyncio.sleep(0)

    def stop(self):
        self.running = False


class RenderLoop:
    """
    Repeating render task ticked once per display refresh.

    Every tick advances the avatar; drawing is skipped on every third frame.
    Reads the shared signals without synchronizing with the detection loop.
    """

    def __init__(self,
                 renderer: BaseRenderer,
                 signal: AnimationSignal,
                 mapper: Optional[BaseAnimationMapper] = None,
                 clock: Optional[AnimationClock] = None,
                 refresh_hz: float = DISPLAY_REFRESH_HZ):
        self.renderer = renderer
        self.signal = signal
        self.mapper = mapper or AnimationMapper()
        self.clock = clock or AnimationClock()
        self.refresh_hz = refresh_hz

        self.avatar: Optional[BaseAvatar] = None
        self.status = AvatarStatus.LOADING
        self.error: Optional[Exception] = None
        self.frame = 0
        self.running = False

    def set_avatar(self, avatar: BaseAvatar):
        self.avatar = avatar
        self.status = AvatarStatus.READY

    def set_failed(self, error: Exception):
        """Enter degraded mode: scene keeps rendering without an avatar."""
        self.error = error
        self.status = AvatarStatus.FAILED

    def on_key(self, key: str):
        """Debug override of the Joy blend shape, bypassing the mapper."""
        if self.avatar is None:
            return
        if key in JOY_OVERRIDE_KEYS:
            self.avatar.set_blend_shape(BLEND_SHAPE_JOY, JOY_OVERRIDE_KEYS[key])

    def tick(self) -> bool:
        """
        Run one render iteration.

        Returns:
            True if the scene was drawn this frame
        """
        self.frame += 1

        for key in self.renderer.process_events():
            self.on_key(key)

        if self.avatar is not None:
            delta_time = self.clock.get_delta()
            self.mapper.map(self.signal, self.avatar, delta_time, self.clock.elapsed_time)

        if self.frame % RENDER_SKIP_INTERVAL != 0:
            self.renderer.render()
            return True
        return False

    async def run(self):
        """Tick until the window is closed or stop() is called."""
        interval = 1.0 / self.refresh_hz
        self.running = True
        while self.running and not self.renderer.closed:
            self.tick()
            await asyncio.sleep(interval)
        self.running = False

    def stop(self):
        self.running = False


class FacePuppetPipeline:
    """
    Wires camera, detector, avatar and renderer into two independent loops.

    The loops share only an AnimationSignal; there is no
    synchronization between them (last write wins, frame skew tolerated).
    """

    def __init__(self,
                 detector: BaseDetector,
                 reader: BaseFrameReader,
                 renderer: BaseRenderer,
                 loader: Optional[VRMLoader] = None,
                 overlay: Optional[LandmarkOverlay] = None,
                 weights_dir: str = WEIGHTS_DIR,
                 avatar_path: str = AVATAR_PATH):
        """
        Initialize pipeline components.

        Args:
            detector: Face detector (loaded by the pipeline)
            reader: Opened camera reader
            renderer: Scene renderer
            loader: Avatar loader
            overlay: Optional landmark debug overlay
            weights_dir: Detector weights directory
            avatar_path: Avatar asset path
        """
        self.detector = detector
        self.reader = reader
        self.renderer = renderer
        self.loader = loader or VRMLoader()
        self.weights_dir = weights_dir
        self.avatar_path = avatar_path

        self.signal = AnimationSignal()
        self.detection_loop = DetectionLoop(detector, reader, self.signal, overlay=overlay)
        self.render_loop = RenderLoop(renderer, self.signal)

    def on_avatar_loaded(self, avatar: BaseAvatar):
        # VRM 0.x avatars face -z; turn them toward the camera
        if avatar.spec_version == "0.x":
            hips = avatar.get_bone_node(BONE_HIPS)
            if hips is not None:
                hips.rotation[1] = math.pi

        self.renderer.add_avatar(avatar)
        self.render_loop.set_avatar(avatar)
        print(f"Loaded avatar: {self.avatar_path}")

    def on_avatar_error(self, error: Exception):
        print(f"Error: {error}")
        print("Continuing without avatar")
        self.render_loop.set_failed(error)

    async def load_models(self):
        try:
            await asyncio.to_thread(self.detector.load, self.weights_dir)
        except Exception:
            # Nothing left to animate; end the session
            self.render_loop.stop()
            raise
        print("Face models ready")

    async def detect_faces(self):
        try:
            await self.detection_loop.run()
        except Exception as e:
            print(f"Error: face detection stopped: {e}")
            self.render_loop.stop()
            raise

    async def load_avatar(self):
        await self.loader.load_async(
            self.avatar_path,
            self.on_avatar_loaded,
            ProgressPrinter(),
            self.on_avatar_error,
        )

    async def run(self):
        """
        Run until the render window is closed.

        Raises:
            Exception: Whatever made model loading or detection fail
        """
        tasks: List[asyncio.Task] = [
            asyncio.create_task(self.load_models()),
            asyncio.create_task(self.load_avatar()),
            asyncio.create_task(self.detect_faces()),
        ]

        try:
            await self.render_loop.run()
        finally:
            self.detection_loop.stop()
            for task in tasks:
                task.cancel()
            results = await asyncio.gather(*tasks, return_exceptions=True)

        for result in results:
            if isinstance(result, Exception):
                raise result
