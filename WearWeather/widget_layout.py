"""Layout of the companion display - pure functions from snapshot to draw operations."""
import time
from typing import List, Optional, Tuple

from weather_data import BAD_AIR_AQI, MISSING_TEXT, Condition, WidgetSnapshot

CONDITION_COLORS = {
    Condition.CLEAR: (255, 200, 60),
    Condition.CLOUDY: (190, 200, 215),
    Condition.RAIN: (90, 160, 255),
    Condition.SNOW: (235, 245, 255),
    Condition.STORM: (170, 120, 255),
}
TEXT_COLOR = (220, 220, 220)
WARNING_COLOR = (255, 120, 80)

LINE_HEIGHT = 14
MARGIN = 4


class DrawOp:
    """Represents a drawing operation (for testing/layout calculation)."""
    def __init__(self, op_type: str, **kwargs):
        self.op_type = op_type
        self.kwargs = kwargs


def temperature_text(snapshot: WidgetSnapshot) -> str:
    return f"{snapshot.temperature}°"


def summary_text(snapshot: WidgetSnapshot) -> str:
    """E.g. "H 17°  L 12° · Rain"."""
    return f"H {snapshot.daily_high}°  L {snapshot.daily_low}° · {snapshot.condition.short_text}"


def aqi_line_text(snapshot: WidgetSnapshot) -> Optional[str]:
    if snapshot.air_quality_index is None:
        return None
    return f"AQI {snapshot.air_quality_index} · {snapshot.air_quality_status_text or MISSING_TEXT}"


def is_bad_air(snapshot: WidgetSnapshot) -> bool:
    if snapshot.air_quality_index is not None:
        return snapshot.air_quality_index >= BAD_AIR_AQI
    return snapshot.outfit.has_mask


def widget_hint(snapshot: WidgetSnapshot) -> Optional[str]:
    """
    The one reminder worth showing on a small display.

    Mask beats everything, then the outfit's accessory, then the condition.
    """
    if is_bad_air(snapshot):
        return "Mask"

    accessory = (snapshot.outfit.accessory or "").lower()
    for keyword, hint in (("umbrella", "Umbrella"), ("glove", "Gloves"), ("muffler", "Muffler"), ("cap", "Cap")):
        if keyword in accessory:
            return hint

    if snapshot.condition in (Condition.RAIN, Condition.STORM):
        return "Umbrella"
    if snapshot.condition == Condition.SNOW:
        return "Gloves"
    return None


def outfit_text(snapshot: WidgetSnapshot) -> str:
    outfit = snapshot.outfit
    items = [outfit.outer, outfit.top, outfit.bottom, outfit.shoes]
    return " + ".join(item for item in items if item)


def updated_text(snapshot: WidgetSnapshot) -> str:
    return "Updated " + time.strftime("%H:%M", time.localtime(snapshot.updated_at))


def calculate_layout(snapshot: WidgetSnapshot, width: int = 160, height: int = 96) -> List[DrawOp]:
    """
    Calculate text operations for the widget.

    Pure: the same snapshot always gives the same operations, so it can be
    tested without rendering anything. Lines that do not fit in height are
    dropped from the bottom.

    Args:
        snapshot: Snapshot to display
        width: Canvas width
        height: Canvas height

    Returns:
        List of DrawOp objects representing what to draw
    """
    lines: List[Tuple[str, Tuple[int, int, int]]] = [
        (f"{snapshot.location_name}  {temperature_text(snapshot)}", CONDITION_COLORS[snapshot.condition]),
        (summary_text(snapshot), TEXT_COLOR),
        (outfit_text(snapshot), TEXT_COLOR),
    ]
    hint = widget_hint(snapshot)
    if hint:
        lines.append((f"Bring: {hint}", WARNING_COLOR if hint == "Mask" else TEXT_COLOR))
    aqi_line = aqi_line_text(snapshot)
    if aqi_line:
        lines.append((aqi_line, WARNING_COLOR if is_bad_air(snapshot) else TEXT_COLOR))
    lines.append((updated_text(snapshot), (140, 140, 140)))

    max_chars = max(1, (width - 2 * MARGIN) // 6)
    ops = []
    for i, (text, color) in enumerate(lines):
        y = MARGIN + i * LINE_HEIGHT
        if y + LINE_HEIGHT > height:
            break
        ops.append(DrawOp(
            "text",
            text=text[:max_chars],
            x=MARGIN,
            y=y,
            r=color[0],
            g=color[1],
            b=color[2]
        ))
    return ops


def render_snapshot(canvas, snapshot: WidgetSnapshot) -> None:
    """Clear the canvas and draw the snapshot onto it."""
    canvas.clear()
    for op in calculate_layout(snapshot, canvas.width, canvas.height):
        if op.op_type == "text":
            canvas.draw_text(
                op.kwargs["x"],
                op.kwargs["y"],
                op.kwargs["text"],
                op.kwargs["r"],
                op.kwargs["g"],
                op.kwargs["b"]
            )
