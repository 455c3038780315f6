"""OpenGL scene renderer for the avatar window."""

from typing import List, Optional, Tuple
import numpy as np
import pygame
import OpenGL.GL as gl
import OpenGL.GLU as glu

from ..core.base_avatar import BaseAvatar
from ..core.base_renderer import BaseRenderer
from ..core.constants import (
    AXES_LENGTH,
    CAMERA_FAR,
    CAMERA_FOV,
    CAMERA_NEAR,
    CAMERA_POSITION,
    CANVAS_SIZE,
    CLEAR_COLOR,
    GRID_DIVISIONS,
    GRID_SIZE,
    LIGHT_COLOR,
    LIGHT_POSITION,
)


def hex_to_rgb(color: int) -> Tuple[float, float, float]:
    """Convert 0xRRGGBB to float RGB in [0, 1]."""
    return (
        ((color >> 16) & 0xFF) / 255.0,
        ((color >> 8) & 0xFF) / 255.0,
        (color & 0xFF) / 255.0,
    )


class SceneRenderer(BaseRenderer):
    """
    Fixed scene: perspective camera, one directional light, grid and axes
    helpers, and the avatar mesh once it is loaded.
    """

    def __init__(self,
                 canvas_size: Tuple[int, int] = CANVAS_SIZE,
                 title: str = "vrm-face-puppet"):
        """
        Initialize scene renderer.

        Args:
            canvas_size: Window size (width, height)
            title: Window caption
        """
        super().__init__()
        self.canvas_size = canvas_size
        self.title = title

        self.avatar: Optional[BaseAvatar] = None
        self.initialized = False

    def initialize(self):
        """Open the window and set up fixed OpenGL state."""
        if self.initialized:
            return

        pygame.init()
        pygame.display.set_mode(self.canvas_size, pygame.DOUBLEBUF | pygame.OPENGL)
        pygame.display.set_caption(self.title)

        r, g, b = hex_to_rgb(CLEAR_COLOR)
        gl.glClearColor(r, g, b, 1.0)
        gl.glEnable(gl.GL_DEPTH_TEST)
        gl.glEnable(gl.GL_NORMALIZE)

        # Camera
        width, height = self.canvas_size
        gl.glViewport(0, 0, width, height)
        gl.glMatrixMode(gl.GL_PROJECTION)
        gl.glLoadIdentity()
        glu.gluPerspective(CAMERA_FOV, width / height, CAMERA_NEAR, CAMERA_FAR)

        # Directional light, w=0
        lr, lg, lb = hex_to_rgb(LIGHT_COLOR)
        gl.glLightfv(gl.GL_LIGHT0, gl.GL_DIFFUSE, (lr, lg, lb, 1.0))
        gl.glLightfv(gl.GL_LIGHT0, gl.GL_AMBIENT, (0.3, 0.3, 0.3, 1.0))
        gl.glEnable(gl.GL_LIGHT0)
        gl.glColorMaterial(gl.GL_FRONT_AND_BACK, gl.GL_AMBIENT_AND_DIFFUSE)
        gl.glEnable(gl.GL_COLOR_MATERIAL)

        self.initialized = True

    def add_avatar(self, avatar: BaseAvatar) -> None:
        self.avatar = avatar

    def render(self) -> None:
        """Draw one frame and swap buffers."""
        if not self.initialized:
            self.initialize()

        gl.glClear(gl.GL_COLOR_BUFFER_BIT | gl.GL_DEPTH_BUFFER_BIT)
        gl.glMatrixMode(gl.GL_MODELVIEW)
        gl.glLoadIdentity()
        # Camera has no rotation: looks down -z
        x, y, z = CAMERA_POSITION
        glu.gluLookAt(x, y, z, x, y, z - 1.0, 0.0, 1.0, 0.0)
        gl.glLightfv(gl.GL_LIGHT0, gl.GL_POSITION, (*LIGHT_POSITION, 0.0))

        self._draw_grid()
        self._draw_axes()
        if self.avatar is not None:
            self._draw_avatar()

        pygame.display.flip()

    def process_events(self) -> List[str]:
        # Event queue only exists once the window is up
        if not self.initialized:
            self.initialize()

        keys = []
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.closed = True
            elif event.type == pygame.KEYDOWN and event.unicode:
                keys.append(event.unicode)
        return keys

    def _draw_grid(self):
        gl.glDisable(gl.GL_LIGHTING)
        half = GRID_SIZE / 2
        step = GRID_SIZE / GRID_DIVISIONS
        gl.glBegin(gl.GL_LINES)
        for i in range(GRID_DIVISIONS + 1):
            k = -half + i * step
            # Center lines darker
            shade = 0.27 if i == GRID_DIVISIONS // 2 else 0.53
            gl.glColor3f(shade, shade, shade)
            gl.glVertex3f(-half, 0.0, k)
            gl.glVertex3f(half, 0.0, k)
            gl.glVertex3f(k, 0.0, -half)
            gl.glVertex3f(k, 0.0, half)
        gl.glEnd()

    def _draw_axes(self):
        gl.glDisable(gl.GL_LIGHTING)
        gl.glBegin(gl.GL_LINES)
        for axis, color in enumerate(((1.0, 0.0, 0.0), (0.0, 1.0, 0.0), (0.0, 0.0, 1.0))):
            end = [0.0, 0.0, 0.0]
            end[axis] = AXES_LENGTH
            gl.glColor3f(*color)
            gl.glVertex3f(0.0, 0.0, 0.0)
            gl.glVertex3f(*end)
        gl.glEnd()

    def _draw_avatar(self):
        primitives = getattr(self.avatar, "skinned_primitives", None)
        if primitives is None:
            return

        gl.glEnable(gl.GL_LIGHTING)
        gl.glEnableClientState(gl.GL_VERTEX_ARRAY)
        try:
            for positions, normals, prim in primitives():
                gl.glColor4f(*prim.color)
                gl.glVertexPointer(3, gl.GL_FLOAT, 0, np.ascontiguousarray(positions, dtype=np.float32))
                if normals is not None:
                    gl.glEnableClientState(gl.GL_NORMAL_ARRAY)
                    gl.glNormalPointer(gl.GL_FLOAT, 0, np.ascontiguousarray(normals, dtype=np.float32))
                gl.glDrawElements(gl.GL_TRIANGLES, len(prim.indices), gl.GL_UNSIGNED_INT,
                                  np.ascontiguousarray(prim.indices, dtype=np.uint32))
                if normals is not None:
                    gl.glDisableClientState(gl.GL_NORMAL_ARRAY)
        finally:
            gl.glDisableClientState(gl.GL_VERTEX_ARRAY)

    def close(self):
        """Clean up resources."""
        if self.initialized:
            pygame.quit()
            self.initialized = False
        self.avatar = None
