"""
Pillow-backed 2D drawing surface.

Provides the small subset of a vector drawing API the poster layers need:
paths, solid and gradient paints, drop shadows, clipping, affine
transforms, bitmap placement and text. All graphics state lives on an
explicit stack that is only touched through Surface.scope(), so a layer
can never leak alpha, shadow, clip or transform into the next one.
"""
import base64
import contextlib
import dataclasses
import logging
import math
import threading
from dataclasses import dataclass, field
from io import BytesIO
from typing import Iterator, List, Optional, Sequence, Tuple, Union

import numpy as np
from PIL import Image, ImageChops, ImageDraw, ImageFilter, ImageFont

from domain.errors import SurfaceUnavailableError
from services.colors import RGBA, ColorLike, TRANSPARENT, to_rgba
from settings import settings

logger = logging.getLogger(__name__)

# Masks are rasterized at this multiple and box-filtered down for antialiasing.
SUPERSAMPLE = 3
ARC_STEP_RADIANS = math.pi / 24
BEZIER_STEPS = 24

Point = Tuple[float, float]
Matrix = Tuple[float, float, float, float, float, float]
IDENTITY: Matrix = (1.0, 0.0, 0.0, 1.0, 0.0, 0.0)


def _multiply(m: Matrix, n: Matrix) -> Matrix:
    """Return m·n (n is applied first)."""
    a1, b1, c1, d1, e1, f1 = m
    a2, b2, c2, d2, e2, f2 = n
    return (
        a1 * a2 + c1 * b2,
        b1 * a2 + d1 * b2,
        a1 * c2 + c1 * d2,
        b1 * c2 + d1 * d2,
        a1 * e2 + c1 * f2 + e1,
        b1 * e2 + d1 * f2 + f1,
    )


def _apply(m: Matrix, x: float, y: float) -> Point:
    a, b, c, d, e, f = m
    return a * x + c * y + e, b * x + d * y + f


def _invert(m: Matrix) -> Matrix:
    a, b, c, d, e, f = m
    det = a * d - b * c
    if abs(det) < 1e-12:
        raise ValueError("Transform is not invertible")
    ia, ib, ic, id_ = d / det, -b / det, -c / det, a / det
    return ia, ib, ic, id_, -(ia * e + ic * f), -(ib * e + id_ * f)


# ============================================
# Paths
# ============================================

@dataclass
class SubPath:
    points: List[Point] = field(default_factory=list)
    closed: bool = False


class Path:
    """
    A vector outline built from lines, arcs and cubic Bézier curves.
    Curves are flattened to polylines as they are added.
    """

    def __init__(self) -> None:
        self.subpaths: List[SubPath] = []

    def _current(self) -> SubPath:
        if not self.subpaths or self.subpaths[-1].closed:
            start = self.subpaths[-1].points[0] if self.subpaths and self.subpaths[-1].points else None
            self.subpaths.append(SubPath(points=[start] if start else []))
        return self.subpaths[-1]

    @property
    def current_point(self) -> Optional[Point]:
        if not self.subpaths or not self.subpaths[-1].points:
            return None
        return self.subpaths[-1].points[-1]

    def move_to(self, x: float, y: float) -> "Path":
        self.subpaths.append(SubPath(points=[(float(x), float(y))]))
        return self

    def line_to(self, x: float, y: float) -> "Path":
        self._current().points.append((float(x), float(y)))
        return self

    def bezier_curve_to(
        self, cp1x: float, cp1y: float, cp2x: float, cp2y: float, x: float, y: float
    ) -> "Path":
        sub = self._current()
        if not sub.points:
            sub.points.append((float(cp1x), float(cp1y)))
        x0, y0 = sub.points[-1]
        for i in range(1, BEZIER_STEPS + 1):
            t = i / BEZIER_STEPS
            mt = 1 - t
            px = mt ** 3 * x0 + 3 * mt ** 2 * t * cp1x + 3 * mt * t ** 2 * cp2x + t ** 3 * x
            py = mt ** 3 * y0 + 3 * mt ** 2 * t * cp1y + 3 * mt * t ** 2 * cp2y + t ** 3 * y
            sub.points.append((px, py))
        return self

    def arc(
        self,
        cx: float,
        cy: float,
        radius: float,
        start_angle: float,
        end_angle: float,
        anticlockwise: bool = False,
    ) -> "Path":
        """Angles in radians, measured clockwise from +x (screen coordinates)."""
        sweep = end_angle - start_angle
        if anticlockwise:
            if sweep > 0:
                sweep = sweep % (2 * math.pi) - 2 * math.pi
            sweep = max(sweep, -2 * math.pi)
        else:
            if sweep < 0:
                sweep = sweep % (2 * math.pi)
            sweep = min(sweep, 2 * math.pi)
        steps = max(2, int(math.ceil(abs(sweep) / ARC_STEP_RADIANS)))
        sub = self._current()
        for i in range(steps + 1):
            angle = start_angle + sweep * i / steps
            sub.points.append((cx + radius * math.cos(angle), cy + radius * math.sin(angle)))
        return self

    def close_path(self) -> "Path":
        if self.subpaths and self.subpaths[-1].points:
            self.subpaths[-1].closed = True
        return self

    def points(self) -> List[Point]:
        """All vertices in construction order."""
        return [p for sub in self.subpaths for p in sub.points]

    def transformed(self, matrix: Matrix) -> List[SubPath]:
        return [
            SubPath(points=[_apply(matrix, x, y) for x, y in sub.points], closed=sub.closed)
            for sub in self.subpaths
            if sub.points
        ]


# ============================================
# Paints
# ============================================

ColorStop = Tuple[float, ColorLike]


@dataclass
class LinearGradient:
    x0: float
    y0: float
    x1: float
    y1: float
    stops: List[ColorStop] = field(default_factory=list)

    def add_color_stop(self, offset: float, color: ColorLike) -> "LinearGradient":
        self.stops.append((offset, color))
        return self


@dataclass
class RadialGradient:
    """Concentric radial gradient from (x, y, r0) to (x, y, r1)."""
    x: float
    y: float
    r0: float
    r1: float
    stops: List[ColorStop] = field(default_factory=list)

    def add_color_stop(self, offset: float, color: ColorLike) -> "RadialGradient":
        self.stops.append((offset, color))
        return self


Paint = Union[str, Tuple[int, ...], LinearGradient, RadialGradient]


def _interpolate_stops(stops: Sequence[ColorStop], t: np.ndarray) -> np.ndarray:
    ordered = sorted(stops, key=lambda s: s[0])
    offsets = np.array([min(1.0, max(0.0, float(o))) for o, _ in ordered], dtype=np.float32)
    colors = np.array([to_rgba(c) for _, c in ordered], dtype=np.float32)
    out = np.empty(t.shape + (4,), dtype=np.float32)
    for channel in range(4):
        out[..., channel] = np.interp(t, offsets, colors[:, channel])
    return np.clip(out, 0, 255).astype(np.uint8)


# ============================================
# Fonts
# ============================================

@dataclass(frozen=True)
class FontSpec:
    size: float = 10.0
    bold: bool = False
    monospace: bool = False


_SANS_CANDIDATES = ("DejaVuSans.ttf", "Arial.ttf", "LiberationSans-Regular.ttf")
_BOLD_CANDIDATES = ("DejaVuSans-Bold.ttf", "Arial Bold.ttf", "LiberationSans-Bold.ttf")
_MONO_CANDIDATES = ("DejaVuSansMono.ttf", "Courier New.ttf", "LiberationMono-Regular.ttf")

# FreeType faces are not shared across threads; each worker keeps its own.
_FONT_CACHE = threading.local()


def load_font(spec: FontSpec) -> ImageFont.FreeTypeFont:
    """
    Resolve a TrueType font for spec, honoring configured paths first.
    Falls back to Pillow's bundled default font when nothing is installed.
    """
    size = max(1, int(round(spec.size)))
    key = (size, spec.bold, spec.monospace)
    fonts = _FONT_CACHE.__dict__.setdefault("fonts", {})
    cached = fonts.get(key)
    if cached is not None:
        return cached

    if spec.monospace:
        configured, candidates = settings.POSTER_MONO_FONT_PATH, _MONO_CANDIDATES
    elif spec.bold:
        configured, candidates = settings.POSTER_BOLD_FONT_PATH, _BOLD_CANDIDATES
    else:
        configured, candidates = settings.POSTER_FONT_PATH, _SANS_CANDIDATES

    font = None
    for candidate in ((configured,) if configured else ()) + candidates:
        try:
            font = ImageFont.truetype(candidate, size)
            break
        except OSError:
            continue
    if font is None:
        logger.debug("[canvas] no TrueType font found for %s; using Pillow default", spec)
        font = ImageFont.load_default(size=size)
    fonts[key] = font
    return font


_ALIGN_ANCHOR = {"left": "l", "start": "l", "center": "m", "right": "r", "end": "r"}
_BASELINE_ANCHOR = {"top": "a", "middle": "m", "alphabetic": "s", "bottom": "d"}


# ============================================
# Drawing state and surface
# ============================================

@dataclass
class DrawState:
    fill_style: Paint = "#000000"
    stroke_style: Paint = "#000000"
    line_width: float = 1.0
    global_alpha: float = 1.0
    shadow_color: RGBA = TRANSPARENT
    shadow_blur: float = 0.0
    shadow_offset_x: float = 0.0
    shadow_offset_y: float = 0.0
    clip: Optional[Image.Image] = None
    transform: Matrix = IDENTITY
    font: FontSpec = FontSpec()
    text_align: str = "left"
    text_baseline: str = "alphabetic"

    def copy(self) -> "DrawState":
        return dataclasses.replace(self)

    def set_shadow(
        self, color: ColorLike, blur: float = 0.0, offset_x: float = 0.0, offset_y: float = 0.0
    ) -> None:
        self.shadow_color = to_rgba(color)
        self.shadow_blur = blur
        self.shadow_offset_x = offset_x
        self.shadow_offset_y = offset_y

    def clear_shadow(self) -> None:
        self.set_shadow(TRANSPARENT)

    @property
    def has_shadow(self) -> bool:
        return self.shadow_color[3] > 0 and (
            self.shadow_blur > 0 or self.shadow_offset_x != 0 or self.shadow_offset_y != 0
        )


class Surface:
    """
    Fixed-size RGBA drawing target with a scoped graphics-state stack.

    Usage:
        surface = Surface.create(1280, 720)
        with surface.scope() as state:
            state.global_alpha = 0.5
            surface.fill(path)
    """

    def __init__(self, image: Image.Image):
        self._image = image
        self._stack: List[DrawState] = []
        self.state = DrawState()

    @classmethod
    def create(cls, width: int, height: int) -> "Surface":
        try:
            image = Image.new("RGBA", (int(width), int(height)), TRANSPARENT)
        except (MemoryError, ValueError) as exc:
            raise SurfaceUnavailableError() from exc
        return cls(image)

    @property
    def width(self) -> int:
        return self._image.width

    @property
    def height(self) -> int:
        return self._image.height

    @property
    def depth(self) -> int:
        return len(self._stack)

    @contextlib.contextmanager
    def scope(self) -> Iterator[DrawState]:
        """Push a copy of the current state; restore it on every exit path."""
        self._stack.append(self.state)
        self.state = self.state.copy()
        try:
            yield self.state
        finally:
            self.state = self._stack.pop()

    # --- transforms -------------------------------------------------

    def translate(self, dx: float, dy: float) -> None:
        self.state.transform = _multiply(self.state.transform, (1.0, 0.0, 0.0, 1.0, dx, dy))

    def scale(self, sx: float, sy: float) -> None:
        self.state.transform = _multiply(self.state.transform, (sx, 0.0, 0.0, sy, 0.0, 0.0))

    def rotate(self, radians: float) -> None:
        cos_a, sin_a = math.cos(radians), math.sin(radians)
        self.state.transform = _multiply(self.state.transform, (cos_a, sin_a, -sin_a, cos_a, 0.0, 0.0))

    # --- rasterization ----------------------------------------------

    def _device_box(self, subpaths: Sequence[SubPath], pad: float) -> Optional[Tuple[int, int, int, int]]:
        xs = [x for sub in subpaths for x, _ in sub.points]
        ys = [y for sub in subpaths for _, y in sub.points]
        if not xs:
            return None
        x0 = max(0, int(math.floor(min(xs) - pad)))
        y0 = max(0, int(math.floor(min(ys) - pad)))
        x1 = min(self.width, int(math.ceil(max(xs) + pad)))
        y1 = min(self.height, int(math.ceil(max(ys) + pad)))
        if x1 <= x0 or y1 <= y0:
            return None
        return x0, y0, x1, y1

    def _rasterize(
        self, path: Path, stroke_width: Optional[float] = None
    ) -> Optional[Tuple[Image.Image, int, int]]:
        """Return an antialiased 'L' coverage mask and its device origin, or None if off-canvas."""
        subpaths = path.transformed(self.state.transform)
        device_width = None
        if stroke_width is not None:
            a, b, c, d, _, _ = self.state.transform
            device_width = stroke_width * math.sqrt(abs(a * d - b * c))
        pad = (device_width or 0.0) / 2 + 2
        box = self._device_box(subpaths, pad)
        if box is None:
            return None
        x0, y0, x1, y1 = box
        ss = SUPERSAMPLE
        big = Image.new("L", ((x1 - x0) * ss, (y1 - y0) * ss), 0)
        draw = ImageDraw.Draw(big)
        for sub in subpaths:
            pts = [((x - x0) * ss, (y - y0) * ss) for x, y in sub.points]
            if device_width is None:
                if len(pts) >= 3:
                    draw.polygon(pts, fill=255)
            elif len(pts) >= 2:
                if sub.closed:
                    pts = pts + [pts[0]]
                draw.line(pts, fill=255, width=max(1, int(round(device_width * ss))), joint="curve")
        mask = big.resize((x1 - x0, y1 - y0), Image.Resampling.BOX)
        return mask, x0, y0

    def _paint_layer(self, paint: Paint, size: Tuple[int, int], origin: Tuple[int, int]) -> Image.Image:
        w, h = size
        if isinstance(paint, (LinearGradient, RadialGradient)):
            ys, xs = np.mgrid[0:h, 0:w].astype(np.float32)
            xs += origin[0] + 0.5
            ys += origin[1] + 0.5
            matrix = self.state.transform
            if isinstance(paint, LinearGradient):
                gx0, gy0 = _apply(matrix, paint.x0, paint.y0)
                gx1, gy1 = _apply(matrix, paint.x1, paint.y1)
                dx, dy = gx1 - gx0, gy1 - gy0
                length_sq = dx * dx + dy * dy
                if length_sq == 0:
                    t = np.zeros((h, w), dtype=np.float32)
                else:
                    t = ((xs - gx0) * dx + (ys - gy0) * dy) / length_sq
            else:
                cx, cy = _apply(matrix, paint.x, paint.y)
                a, b, c, d, _, _ = matrix
                scale = math.sqrt(abs(a * d - b * c))
                r0, r1 = paint.r0 * scale, paint.r1 * scale
                dist = np.hypot(xs - cx, ys - cy)
                t = (dist - r0) / max(1e-6, r1 - r0)
            t = np.clip(t, 0.0, 1.0)
            return Image.fromarray(_interpolate_stops(paint.stops, t))
        return Image.new("RGBA", (w, h), to_rgba(paint))

    def _emit(self, layer: Image.Image, x: int, y: int, shadow_only: bool = False) -> None:
        """Composite a device-space RGBA layer, applying alpha, shadow and clip."""
        state = self.state
        if state.global_alpha < 1.0:
            alpha = layer.getchannel("A").point(lambda p: int(p * max(0.0, state.global_alpha)))
            layer = layer.copy()
            layer.putalpha(alpha)
        if state.has_shadow:
            self._emit_shadow(layer.getchannel("A"), x, y)
        if not shadow_only:
            self._blit(layer, x, y)

    def _emit_shadow(self, coverage: Image.Image, x: int, y: int) -> None:
        state = self.state
        sigma = state.shadow_blur / 2.0
        pad = int(math.ceil(sigma * 3)) + 1
        w, h = coverage.size
        shadow_alpha = Image.new("L", (w + 2 * pad, h + 2 * pad), 0)
        shadow_alpha.paste(coverage, (pad, pad))
        if sigma > 0:
            shadow_alpha = shadow_alpha.filter(ImageFilter.GaussianBlur(radius=sigma))
        opacity = state.shadow_color[3] / 255.0
        shadow_alpha = shadow_alpha.point(lambda p: int(p * opacity))
        shadow = Image.new("RGBA", shadow_alpha.size, state.shadow_color[:3] + (255,))
        shadow.putalpha(shadow_alpha)
        self._blit(
            shadow,
            x - pad + int(round(state.shadow_offset_x)),
            y - pad + int(round(state.shadow_offset_y)),
        )

    def _blit(self, layer: Image.Image, x: int, y: int) -> None:
        left, top = max(0, x), max(0, y)
        right, bottom = min(self.width, x + layer.width), min(self.height, y + layer.height)
        if right <= left or bottom <= top:
            return
        if (left, top, right, bottom) != (x, y, x + layer.width, y + layer.height):
            layer = layer.crop((left - x, top - y, right - x, bottom - y))
        clip = self.state.clip
        if clip is not None:
            clipped = ImageChops.multiply(layer.getchannel("A"), clip.crop((left, top, right, bottom)))
            layer = layer.copy()
            layer.putalpha(clipped)
        self._image.alpha_composite(layer, dest=(left, top))

    def _emit_masked(self, paint: Paint, mask: Image.Image, x: int, y: int) -> None:
        layer = self._paint_layer(paint, mask.size, (x, y))
        layer.putalpha(ImageChops.multiply(layer.getchannel("A"), mask))
        self._emit(layer, x, y)

    # --- public drawing API -----------------------------------------

    def fill(self, path: Path, paint: Optional[Paint] = None) -> None:
        raster = self._rasterize(path)
        if raster is None:
            return
        mask, x, y = raster
        self._emit_masked(paint if paint is not None else self.state.fill_style, mask, x, y)

    def stroke(self, path: Path, paint: Optional[Paint] = None) -> None:
        raster = self._rasterize(path, stroke_width=self.state.line_width)
        if raster is None:
            return
        mask, x, y = raster
        self._emit_masked(paint if paint is not None else self.state.stroke_style, mask, x, y)

    def fill_rect(self, x: float, y: float, width: float, height: float) -> None:
        rect = Path().move_to(x, y).line_to(x + width, y).line_to(x + width, y + height).line_to(x, y + height)
        self.fill(rect.close_path())

    def cast_shadow(self, path: Path) -> None:
        """Draw only the current shadow of path's opaque silhouette, not the shape itself."""
        if not self.state.has_shadow:
            return
        raster = self._rasterize(path)
        if raster is None:
            return
        mask, x, y = raster
        if self.state.global_alpha < 1.0:
            mask = mask.point(lambda p: int(p * max(0.0, self.state.global_alpha)))
        self._emit_shadow(mask, x, y)

    def clip(self, path: Path) -> None:
        """Intersect the current clip region with path."""
        region = Image.new("L", (self.width, self.height), 0)
        raster = self._rasterize(path)
        if raster is not None:
            mask, x, y = raster
            region.paste(mask, (x, y))
        if self.state.clip is not None:
            region = ImageChops.multiply(region, self.state.clip)
        self.state.clip = region

    def _place(self, layer: Image.Image, x: float, y: float, shadow_only: bool = False) -> None:
        """Place an RGBA bitmap whose top-left sits at user-space (x, y)."""
        matrix = _multiply(self.state.transform, (1.0, 0.0, 0.0, 1.0, x, y))
        a, b, c, d, e, f = matrix
        if (a, b, c, d) == (1.0, 0.0, 0.0, 1.0):
            self._emit(layer, int(round(e)), int(round(f)), shadow_only)
            return
        w, h = layer.size
        corners = [_apply(matrix, cx, cy) for cx, cy in ((0, 0), (w, 0), (0, h), (w, h))]
        x0 = int(math.floor(min(px for px, _ in corners)))
        y0 = int(math.floor(min(py for _, py in corners)))
        x1 = int(math.ceil(max(px for px, _ in corners)))
        y1 = int(math.ceil(max(py for _, py in corners)))
        if x1 <= x0 or y1 <= y0:
            return
        # Image.transform maps output pixels back into the source bitmap.
        ia, ib, ic, id_, ie, if_ = _invert(matrix)
        data = (ia, ic, ia * x0 + ic * y0 + ie, ib, id_, ib * x0 + id_ * y0 + if_)
        warped = layer.convert("RGBa").transform(
            (x1 - x0, y1 - y0),
            Image.Transform.AFFINE,
            data=data,
            resample=Image.Resampling.BICUBIC,
        ).convert("RGBA")
        self._emit(warped, x0, y0, shadow_only)

    @staticmethod
    def _fit_image(image: Image.Image, width: float, height: float) -> Image.Image:
        size = (max(1, int(round(width))), max(1, int(round(height))))
        source = image if image.mode == "RGBA" else image.convert("RGBA")
        if source.size != size:
            # Premultiplied resize avoids dark fringes on transparent edges.
            source = source.convert("RGBa").resize(size, Image.Resampling.LANCZOS).convert("RGBA")
        return source

    def draw_image(self, image: Image.Image, x: float, y: float, width: float, height: float) -> None:
        self._place(self._fit_image(image, width, height), x, y)

    def cast_image_shadow(self, image: Image.Image, x: float, y: float, width: float, height: float) -> None:
        """Draw only the current shadow of image's alpha silhouette."""
        if self.state.has_shadow:
            self._place(self._fit_image(image, width, height), x, y, shadow_only=True)

    def _text_mask(self, text: str, stroke_px: int = 0) -> Tuple[Image.Image, float, float]:
        state = self.state
        font = load_font(state.font)
        anchor = _ALIGN_ANCHOR.get(state.text_align, "l") + _BASELINE_ANCHOR.get(state.text_baseline, "s")
        measure = ImageDraw.Draw(Image.new("L", (1, 1), 0))
        left, top, right, bottom = measure.textbbox((0, 0), text, font=font, anchor=anchor, stroke_width=stroke_px)
        pad = 2 + stroke_px
        mask = Image.new("L", (int(right - left) + 2 * pad, int(bottom - top) + 2 * pad), 0)
        ImageDraw.Draw(mask).text(
            (pad - left, pad - top), text, font=font, fill=255, anchor=anchor, stroke_width=stroke_px, stroke_fill=255
        )
        return mask, left - pad, top - pad

    def _emit_text(self, paint: Paint, mask: Image.Image, x: float, y: float) -> None:
        # Text is painted with solid colors only; a gradient falls back to its first stop.
        if isinstance(paint, (LinearGradient, RadialGradient)):
            paint = paint.stops[0][1] if paint.stops else "#000000"
        layer = Image.new("RGBA", mask.size, to_rgba(paint))
        layer.putalpha(ImageChops.multiply(layer.getchannel("A"), mask))
        self._place(layer, x, y)

    def fill_text(self, text: str, x: float, y: float) -> None:
        if not text:
            return
        mask, dx, dy = self._text_mask(text)
        self._emit_text(self.state.fill_style, mask, x + dx, y + dy)

    def stroke_text(self, text: str, x: float, y: float) -> None:
        if not text:
            return
        stroke_px = max(1, int(round(self.state.line_width / 2)))
        outer, dx, dy = self._text_mask(text, stroke_px=stroke_px)
        inner, ix, iy = self._text_mask(text)
        body = Image.new("L", outer.size, 0)
        body.paste(inner, (int(round(ix - dx)), int(round(iy - dy))))
        outline = ImageChops.subtract(outer, body)
        self._emit_text(self.state.stroke_style, outline, x + dx, y + dy)

    # --- output -----------------------------------------------------

    def to_image(self) -> Image.Image:
        return self._image.copy()

    def to_png_bytes(self) -> bytes:
        buffer = BytesIO()
        self._image.save(buffer, format="PNG")
        return buffer.getvalue()

    def to_data_url(self) -> str:
        encoded = base64.b64encode(self.to_png_bytes()).decode("ascii")
        return f"data:image/png;base64,{encoded}"
