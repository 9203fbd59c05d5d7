"""
Pygame paint targets for the frame and the hover trajectory.

SurfaceSink owns two surfaces of the window size: the frame, painted
cell by cell by the renderer, and a transparent overlay where the hover
trajectory is drawn. Keeping them apart means hovering never disturbs
a frame that is still being rendered.
"""

import pygame


TRAJECTORY_COLOR = (255, 0, 0)
CLEAR = (0, 0, 0, 0)


class SurfaceSink:
    """
    Frame and overlay surfaces for the viewer.

    Args:
        width, height: Surface size in pixels
    """

    def __init__(self, width, height):
        self.frame = None
        self.overlay = None
        self.resize(width, height)

    def resize(self, width, height):
        """Recreate both surfaces, keeping whatever part of the frame still fits."""
        old_frame = self.frame
        self.frame = pygame.Surface((width, height))
        self.frame.fill((0, 0, 0))
        if old_frame is not None:
            self.frame.blit(old_frame, (0, 0))
        self.overlay = pygame.Surface((width, height), pygame.SRCALPHA)
        self.overlay.fill(CLEAR)

    def paint_cell(self, col, row, width, height, color):
        self.frame.fill(color, pygame.Rect(int(col), int(row),
                                           max(1, round(width)), max(1, round(height))))

    def clear_overlay(self):
        self.overlay.fill(CLEAR)

    def draw_trajectory(self, points):
        """Draw the trajectory as connected red line segments."""
        if len(points) >= 2:
            pygame.draw.lines(self.overlay, TRAJECTORY_COLOR, False, points)

    def blit_to(self, screen):
        screen.blit(self.frame, (0, 0))
        screen.blit(self.overlay, (0, 0))
