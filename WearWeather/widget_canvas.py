"""Canvas abstraction for the companion display - text console or PNG preview."""
from abc import ABC, abstractmethod
from typing import List, Tuple

from PIL import Image, ImageDraw, ImageFont


class WidgetCanvas(ABC):
    """Abstract canvas interface the widget layout draws onto."""

    @property
    @abstractmethod
    def width(self) -> int:
        """Get canvas width in pixels."""
        pass

    @property
    @abstractmethod
    def height(self) -> int:
        """Get canvas height in pixels."""
        pass

    @abstractmethod
    def clear(self) -> None:
        """Erase everything drawn so far."""
        pass

    @abstractmethod
    def draw_text(self, x: int, y: int, text: str, r: int, g: int, b: int) -> None:
        """
        Draw a line of text with its top-left corner at (x, y).

        Args:
            x: X position
            y: Y position
            text: Text to draw
            r: Red component (0-255)
            g: Green component (0-255)
            b: Blue component (0-255)
        """
        pass


class TextCanvas(WidgetCanvas):
    """
    Records text in memory; renders as plain lines for the console.

    Useful for unit tests and terminals.
    """

    def __init__(self, width: int = 160, height: int = 96):
        self._width = width
        self._height = height
        self._items: List[Tuple[int, int, str]] = []

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    def clear(self) -> None:
        self._items = []

    def draw_text(self, x: int, y: int, text: str, r: int, g: int, b: int) -> None:
        self._items.append((y, x, text))

    def lines(self) -> List[str]:
        """Drawn texts top to bottom, left to right."""
        return [text for _, _, text in sorted(self._items)]

    def to_text(self) -> str:
        return "\n".join(self.lines())


class PILCanvas(WidgetCanvas):
    """PIL-based canvas for rendering a PNG preview of the widget."""

    def __init__(self, width: int = 160, height: int = 96, scale: int = 3):
        """
        Initialize PIL canvas.

        Args:
            width: Canvas width in pixels
            height: Canvas height in pixels
            scale: Scale factor for the saved image
        """
        self._width = width
        self._height = height
        self._scale = scale
        self._font = ImageFont.load_default()
        self.clear()

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    def clear(self) -> None:
        self._image = Image.new("RGB", (self._width, self._height), (24, 28, 36))
        self._draw = ImageDraw.Draw(self._image)

    def draw_text(self, x: int, y: int, text: str, r: int, g: int, b: int) -> None:
        self._draw.text((x, y), text, fill=(r, g, b), font=self._font)

    def get_image(self) -> Image.Image:
        return self._image

    def save(self, filename: str) -> None:
        """Save canvas to a PNG file, scaled up for visibility."""
        image = self._image
        if self._scale > 1:
            image = image.resize(
                (self._width * self._scale, self._height * self._scale),
                Image.NEAREST
            )
        image.save(filename)
