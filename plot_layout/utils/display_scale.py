"""
Conversion between plot meters and a caller-chosen display space.
"""
from dataclasses import dataclass
import logging

from plot_layout.domain.models import NodeInstance
from plot_layout.utils.traversal import tree_bounds

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DisplayTransform:
    """
    Affine map from plot meters to display units.

    ``to_display`` keeps the Cartesian y-up convention unless ``flip_y`` is
    set, in which case y is measured down from the top of the bounds (screen
    convention).
    """
    scale: float = 1.0
    padding: float = 0.0
    min_x: float = 0.0
    min_y: float = 0.0
    max_x: float = 0.0
    max_y: float = 0.0
    flip_y: bool = False

    @classmethod
    def identity(cls) -> "DisplayTransform":
        """Transform that leaves coordinates in meters."""
        return cls()

    @classmethod
    def fit(
        cls,
        root: NodeInstance,
        viewport_width: float,
        viewport_height: float,
        padding: float = 16.0,
        flip_y: bool = False,
    ) -> "DisplayTransform":
        """
        Scale a layout tree to fit a viewport while preserving aspect ratio.

        Args:
            root: Layout tree to fit
            viewport_width: Available width in display units
            viewport_height: Available height in display units
            padding: Margin kept on every side
            flip_y: Measure y downward from the top edge

        Returns:
            DisplayTransform using the tighter of the horizontal/vertical scales

        Raises:
            ValueError: If the padding leaves no drawable area
        """
        if 2 * padding >= viewport_width or 2 * padding >= viewport_height:
            raise ValueError(
                f"Padding {padding} leaves no drawable area in a "
                f"{viewport_width}x{viewport_height} viewport"
            )

        min_x, min_y, max_x, max_y = tree_bounds(root)
        width_m = max_x - min_x
        height_m = max_y - min_y

        scales = []
        if width_m > 0:
            scales.append((viewport_width - 2 * padding) / width_m)
        if height_m > 0:
            scales.append((viewport_height - 2 * padding) / height_m)
        scale = min(scales) if scales else 1.0

        logger.debug(f"Fitted {width_m:.2f}x{height_m:.2f}m into "
                     f"{viewport_width}x{viewport_height} at scale {scale:.3f}")

        return cls(
            scale=scale,
            padding=padding,
            min_x=min_x,
            min_y=min_y,
            max_x=max_x,
            max_y=max_y,
            flip_y=flip_y,
        )

    def to_display(self, x: float, y: float) -> tuple[float, float]:
        display_x = self.padding + (x - self.min_x) * self.scale
        if self.flip_y:
            display_y = self.padding + (self.max_y - y) * self.scale
        else:
            display_y = self.padding + (y - self.min_y) * self.scale
        return (display_x, display_y)

    def to_meters(self, display_x: float, display_y: float) -> tuple[float, float]:
        """Inverse of to_display."""
        x = (display_x - self.padding) / self.scale + self.min_x
        if self.flip_y:
            y = self.max_y - (display_y - self.padding) / self.scale
        else:
            y = (display_y - self.padding) / self.scale + self.min_y
        return (x, y)

    def length(self, meters: float) -> float:
        return meters * self.scale
