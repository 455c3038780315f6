"""Loader for VRM avatar assets with success/progress/error callbacks."""

import asyncio
import io
from pathlib import Path
from typing import Callable, Optional
from pygltflib import GLTF2
from tqdm import tqdm

from ..core.exceptions import AvatarLoadError
from .vrm_model import VRMModel

GLB_MAGIC = b"glTF"
CHUNK_SIZE = 1 << 16


class ProgressPrinter:
    """Default progress callback, shows loading progress with a progress bar."""

    def __init__(self, desc: str = "Loading model..."):
        self.desc = desc
        self._bar: Optional[tqdm] = None

    def __call__(self, fraction: float):
        if self._bar is None:
            self._bar = tqdm(total=100.0, desc=self.desc, unit="%",
                             bar_format="{desc} {n:.1f} {unit} |{bar}|")
        self._bar.n = 100.0 * fraction
        self._bar.refresh()
        if fraction >= 1.0:
            self._bar.close()


class VRMLoader:
    """
    Loads a .vrm (binary glTF) file into a VRMModel.

    The outcome is reported through callbacks instead of exceptions:
    on_success(model) on success, on_error(AvatarLoadError) on any failure.
    """

    def __init__(self, chunk_size: int = CHUNK_SIZE):
        self.chunk_size = chunk_size

    def load(self,
             path: str,
             on_success: Callable[[VRMModel], None],
             on_progress: Optional[Callable[[float], None]] = None,
             on_error: Optional[Callable[[Exception], None]] = None) -> Optional[VRMModel]:
        """
        Load a VRM file.

        Args:
            path: Path to the .vrm file
            on_success: Called with the loaded model
            on_progress: Called with the fraction of the file read so far
            on_error: Called with an AvatarLoadError on failure

        Returns:
            The loaded model, or None on failure
        """
        try:
            model = self.parse(self.read(path, on_progress))
        except AvatarLoadError as e:
            if on_error is not None:
                on_error(e)
            return None

        on_success(model)
        return model

    async def load_async(self,
                         path: str,
                         on_success: Callable[[VRMModel], None],
                         on_progress: Optional[Callable[[float], None]] = None,
                         on_error: Optional[Callable[[Exception], None]] = None) -> Optional[VRMModel]:
        """
        Load a VRM file in a worker thread.
        on_success and on_error run on the event loop, on_progress in the worker.

        Args:
            path: Path to the .vrm file
            on_success: Called with the loaded model
            on_progress: Called with the fraction of the file read so far
            on_error: Called with an AvatarLoadError on failure

        Returns:
            The loaded model, or None on failure
        """
        try:
            data = await asyncio.to_thread(self.read, path, on_progress)
            model = await asyncio.to_thread(self.parse, data)
        except AvatarLoadError as e:
            if on_error is not None:
                on_error(e)
            return None

        on_success(model)
        return model

    def read(self, path: str, on_progress: Optional[Callable[[float], None]] = None) -> bytes:
        """Read the file in chunks, reporting progress."""
        path_obj = Path(path)
        try:
            total = path_obj.stat().st_size
            buffer = bytearray()
            with open(path_obj, "rb") as f:
                while True:
                    chunk = f.read(self.chunk_size)
                    if not chunk:
                        break
                    buffer.extend(chunk)
                    if on_progress is not None and total > 0:
                        on_progress(len(buffer) / total)
        except OSError as e:
            raise AvatarLoadError(f"Failed to read avatar {path}: {e}") from e
        return bytes(buffer)

    def parse(self, data: bytes) -> VRMModel:
        """Parse GLB bytes into a VRM model."""
        if data[:4] != GLB_MAGIC:
            raise AvatarLoadError("Avatar is not a binary glTF (.vrm/.glb) file")

        try:
            gltf = GLTF2.load_binary_from_file_object(io.BytesIO(data))
        except Exception as e:
            raise AvatarLoadError(f"Failed to parse avatar: {e}") from e
        if gltf is None:
            raise AvatarLoadError("Failed to parse avatar")

        try:
            return VRMModel.from_gltf(gltf, gltf.binary_blob())
        except AvatarLoadError:
            raise
        except (KeyError, IndexError, ValueError, TypeError) as e:
            raise AvatarLoadError(f"Malformed VRM data: {e}") from e
