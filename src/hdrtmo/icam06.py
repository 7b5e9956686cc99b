"""
iCAM06 tone mapping operator.

Reference:
    Mark D. Fairchild, Jiangtao Kuang and Garrett M. Johnson,
    "iCAM for high-dynamic-range image rendering",
    SIGGRAPH '06 Research posters, Article No. 185.

Pipeline (each stage waits for the previous one to finish on every tile):
1. Peak luminance scan
2. Input normalization
3. Base layer (bilateral blur in log10 domain)
4. Local white point (wide Gaussian blur)
5. Cone/rod tone compression, written over the white point buffer
6. Detail layer recombination
7. IPT colorfulness adjustment
8. Percentile clipping and 16-bit sRGB encoding
"""

from __future__ import annotations

import logging
import time

import numpy as np

from .adaptation import detail_layer, tone_compress
from .appearance import colorfulness_surround
from .color import xyz_to_rgb
from .config import MAX_LUMINANCE, MIN_NORMALIZED, ICam06Config, ToneMapResult
from .filters import bilateral_filter, fast_gaussian, log10_image, pow10_image
from .image import HDRImage, as_hdr_image
from .normalize import Percentiles, clipping_range, encode_rgba16
from .tiles import Tile, TileExecutor
from .utils import get_platform_info, get_timestamp_iso, get_version, max_dim, min_dim

logger = logging.getLogger(__name__)

# Spatial sigma of the base layer blur, fraction of the shorter side
BASE_SIGMA_FRACTION = 0.02


class ICam06:
    """
    iCAM06 HDR to LDR tone mapper.

    Parameters
    ----------
    image : HDRImage or np.ndarray
        Source image. Bare (H, W, 3) arrays are taken as linear RGB.
    contrast : float, default 0.75
        Response exponent, clamped into [0.6, 0.85].
    min_clipping : float, default 0.01
        Black point percentile, clamped into [0, 1].
    max_clipping : float, default 0.99
        White point percentile, clamped into [0, 1].
    workers : int or None, default None
        Worker threads. None = auto-detect, 1 = sequential.
    tile_size : int, default 256
        Tile edge length in pixels.
    show_progress : bool, default False
        Show a progress bar per stage.

    Example
    -------
    >>> tmo = ICam06(HDRImage.from_xyz(xyz), contrast=0.7)
    >>> raster = tmo.perform()  # (H, W, 4) uint16
    """

    def __init__(
        self,
        image: HDRImage | np.ndarray,
        contrast: float = 0.75,
        min_clipping: float = 0.01,
        max_clipping: float = 0.99,
        *,
        workers: int | None = None,
        tile_size: int = 256,
        show_progress: bool = False,
    ):
        self.config = ICam06Config(
            contrast=contrast,
            min_clipping=min_clipping,
            max_clipping=max_clipping,
            workers=workers,
            tile_size=tile_size,
            show_progress=show_progress,
        )
        self.config.validate()
        self.image = as_hdr_image(image)
        self.width, self.height = self.image.bounds()
        self._executor = TileExecutor(workers, tile_size, show_progress)

    @classmethod
    def default(cls, image: HDRImage | np.ndarray) -> ICam06:
        """Tone mapper with the default contrast and clippings."""
        return cls(image)

    @classmethod
    def from_config(cls, image: HDRImage | np.ndarray, config: ICam06Config) -> ICam06:
        return cls(
            image,
            config.contrast,
            config.min_clipping,
            config.max_clipping,
            workers=config.workers,
            tile_size=config.tile_size,
            show_progress=config.show_progress,
        )

    @property
    def contrast(self) -> float:
        return self.config.contrast

    @property
    def min_clipping(self) -> float:
        return self.config.min_clipping

    @property
    def max_clipping(self) -> float:
        return self.config.max_clipping

    def perform(self) -> np.ndarray:
        """
        Run the tone mapping.

        Returns
        -------
        np.ndarray
            uint16 RGBA raster of shape (height, width, 4), alpha 65535.
        """
        return self.run().raster

    def run(self) -> ToneMapResult:
        """
        Run the tone mapping and collect the global quantities of the run.

        Returns
        -------
        ToneMapResult
            Output raster and run metadata.

        Raises
        ------
        DegenerateRangeError
            If the black and white points of the output coincide.
        """
        durations: dict[str, float] = {}
        t_start = time.perf_counter()

        def _mark(stage: str, t0: float) -> float:
            now = time.perf_counter()
            durations[stage] = now - t0
            return now

        logger.info(
            "iCAM06 on %dx%d image (contrast=%.3f, clipping=[%.3f, %.3f])",
            self.width, self.height, self.contrast, self.min_clipping, self.max_clipping,
        )
        t0 = t_start

        # Stage 1: peak luminance
        source = self.image.xyz()
        peak = self._peak_luminance(source)
        logger.debug("Stage 1: peak luminance = %.4g", peak)
        t0 = _mark("luminance", t0)

        # Stage 2: input normalization
        normalized = self._normalize_input(source, peak)
        del source
        logger.debug("Stage 2: input normalized to [%g, %g]", MIN_NORMALIZED, MAX_LUMINANCE)
        t0 = _mark("normalize", t0)

        # Stage 3: base layer
        base = self._base_layer(normalized)
        logger.debug("Stage 3: base layer ready")
        t0 = _mark("base_layer", t0)

        # Stage 4: local white point
        radius = max_dim(self.width, self.height) // 2
        white = fast_gaussian(normalized, radius)
        logger.debug("Stage 4: white point blur (radius=%d)", radius)
        t0 = _mark("white_point", t0)

        # Stage 5: tone compression, the white buffer becomes the output
        white_scale = self._max_y(white, "Scanning white")
        tone = self._tone_compression(base, white, white_scale)
        del white
        logger.debug("Stage 5: tone compressed (Sw=%.4g)", white_scale)
        t0 = _mark("tone_compression", t0)

        # Stage 6: detail recombination, written over the normalized buffer
        combined = self._combine_details(tone, normalized, base)
        del tone, normalized
        logger.debug("Stage 6: detail layer combined")
        t0 = _mark("detail", t0)

        # Stage 7: colorfulness and surround, in place
        self._color_appearance(combined, base)
        del base
        logger.debug("Stage 7: IPT appearance adjusted")
        t0 = _mark("appearance", t0)

        # Stage 8: display normalization
        raster, appearance_peak, min_rgb, max_rgb = self._final_normalize(combined)
        del combined
        logger.debug("Stage 8: clipping range [%.4g, %.4g]", min_rgb, max_rgb)
        _mark("final_normalize", t0)

        total = time.perf_counter() - t_start
        logger.info("iCAM06 done in %.2fs", total)

        return ToneMapResult(
            raster=raster,
            peak_luminance=peak,
            white_scale=white_scale,
            appearance_peak=appearance_peak,
            min_rgb=min_rgb,
            max_rgb=max_rgb,
            durations=durations,
            config=self.config,
            version=get_version(),
            timestamp=get_timestamp_iso(),
            platform=get_platform_info(),
        )

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    def _max_y(self, xyz: np.ndarray, desc: str) -> float:
        """Maximum Y over the whole image, folded from per-tile maxima."""

        def _tile_max(tile: Tile) -> float:
            return float(np.max(xyz[tile.index + (1,)]))

        return self._executor.reduce(self.height, self.width, _tile_max, combine=max, desc=desc)

    def _peak_luminance(self, source: np.ndarray) -> float:
        return max(MAX_LUMINANCE, self._max_y(source, "Scanning luminance"))

    def _normalize_input(self, source: np.ndarray, peak: float) -> np.ndarray:
        normalized = np.empty_like(source)

        def _task(tile: Tile) -> None:
            block = source[tile.index] / peak * MAX_LUMINANCE
            normalized[tile.index] = np.clip(block, MIN_NORMALIZED, MAX_LUMINANCE)

        self._executor.for_each(self.height, self.width, _task, desc="Normalizing")
        return normalized

    def _base_layer(self, normalized: np.ndarray) -> np.ndarray:
        log = np.empty_like(normalized)

        def _log(tile: Tile) -> None:
            log[tile.index] = log10_image(normalized[tile.index])

        self._executor.for_each(self.height, self.width, _log, desc="Log10")

        sigma = min_dim(self.width, self.height) * BASE_SIGMA_FRACTION
        base = bilateral_filter(log, sigma)
        del log

        def _pow(tile: Tile) -> None:
            base[tile.index] = pow10_image(base[tile.index])

        self._executor.for_each(self.height, self.width, _pow, desc="Pow10")
        return base

    def _tone_compression(self, base: np.ndarray, white: np.ndarray, white_scale: float) -> np.ndarray:
        """Compress tones in place: every pixel of ``white`` is overwritten."""
        contrast = self.contrast

        def _task(tile: Tile) -> None:
            white[tile.index] = tone_compress(base[tile.index], white[tile.index], white_scale, contrast)

        self._executor.for_each(self.height, self.width, _task, desc="Tone compression")
        return white

    def _combine_details(self, tone: np.ndarray, normalized: np.ndarray, base: np.ndarray) -> np.ndarray:
        """Multiply by the detail layer, storing the result in ``normalized``."""

        def _task(tile: Tile) -> None:
            details = detail_layer(normalized[tile.index], base[tile.index])
            normalized[tile.index] = tone[tile.index] * details

        self._executor.for_each(self.height, self.width, _task, desc="Details")
        return normalized

    def _color_appearance(self, combined: np.ndarray, base: np.ndarray) -> None:
        def _task(tile: Tile) -> None:
            combined[tile.index] = colorfulness_surround(combined[tile.index], base[tile.index + (1,)])

        self._executor.for_each(self.height, self.width, _task, desc="Appearance")

    def _final_normalize(self, appearance: np.ndarray) -> tuple[np.ndarray, float, float, float]:
        peak = self._max_y(appearance, "Scanning appearance")

        # Linear RGB replaces the appearance XYZ in the same buffer
        def _to_rgb(tile: Tile) -> None:
            appearance[tile.index] = xyz_to_rgb(appearance[tile.index] / peak)

        self._executor.for_each(self.height, self.width, _to_rgb, desc="Linear RGB")
        rgb = appearance

        table = Percentiles(rgb)
        min_rgb, max_rgb = clipping_range(table, self.min_clipping, self.max_clipping)
        del table

        raster = np.empty((self.height, self.width, 4), dtype=np.uint16)

        def _encode(tile: Tile) -> None:
            raster[tile.index] = encode_rgba16(rgb[tile.index], min_rgb, max_rgb)

        self._executor.for_each(self.height, self.width, _encode, desc="Encoding")
        return raster, peak, min_rgb, max_rgb


def tonemap(
    image: HDRImage | np.ndarray,
    config: ICam06Config | None = None,
) -> ToneMapResult:
    """
    Tone map an image with iCAM06.

    Parameters
    ----------
    image : HDRImage or np.ndarray
        Source image. Bare arrays are taken as linear RGB.
    config : ICam06Config, optional
        Run configuration. Defaults are used if None.

    Returns
    -------
    ToneMapResult
        Output raster and run metadata.
    """
    if config is None:
        config = ICam06Config()
    return ICam06.from_config(image, config).run()
