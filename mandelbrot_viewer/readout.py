"""
On-screen readout panel for the Mandelbrot viewer.

Shows the iteration count under the pointer, the zoom scale, the
pointer's plane coordinates, the sampling quality, the active color
policy and the render status. Purely informational: nothing here feeds
back into the view.
"""

import pygame


FIELDS = [
    ('iterations', 'Iterations'),
    ('scale', 'Scale'),
    ('x_offset', 'xOffset'),
    ('y_offset', 'yOffset'),
    ('quality', 'Quality'),
    ('policy', 'Colors'),
    ('status', 'Status'),
]


class Readout:
    """A text panel in the top-left corner of the window."""

    LINE_HEIGHT = 18

    def __init__(self, x=10, y=10, width=220):
        self.x = x
        self.y = y
        self.width = width
        self.font = None
        self.values = {
            'iterations': '0',
            'scale': '1',
            'x_offset': '0',
            'y_offset': '0',
            'quality': '',
            'policy': '',
            'status': '',
        }

    def init_fonts(self):
        pygame.font.init()
        self.font = pygame.font.SysFont('Arial', 14)

    def update(self, name, value):
        if name not in self.values:
            raise KeyError(name)
        self.values[name] = str(value)

    def lines(self):
        return [f'{label}: {self.values[name]}' for name, label in FIELDS]

    def get_rect(self):
        return pygame.Rect(self.x, self.y, self.width, 12 + len(FIELDS) * self.LINE_HEIGHT)

    def draw(self, screen):
        if self.font is None:
            self.init_fonts()

        rect = self.get_rect()
        pygame.draw.rect(screen, (40, 40, 40), rect)
        pygame.draw.rect(screen, (100, 100, 100), rect, 1)

        current_y = self.y + 6
        for line in self.lines():
            text = self.font.render(line, True, (200, 200, 200))
            screen.blit(text, (self.x + 8, current_y))
            current_y += self.LINE_HEIGHT
