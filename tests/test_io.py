"""
Tests for reading HDR sources and writing tone mapped rasters.
"""

import imageio.v3 as iio
import numpy as np
import pytest
import tifffile
from astropy.io import fits

from hdrtmo.image import ColorSpace
from hdrtmo.io import read_hdr, write_ldr


@pytest.fixture
def rgba16():
    """Create a small uint16 RGBA raster."""
    rng = np.random.default_rng(0)
    raster = rng.integers(0, 65536, (6, 5, 4), dtype=np.uint16)
    raster[..., 3] = 65535
    return raster


class TestReadHDR:
    """Tests for HDR input."""

    def test_float_tiff(self, tmp_path):
        data = np.random.default_rng(1).uniform(0, 5000, (4, 6, 3)).astype(np.float32)
        path = tmp_path / "scene.tif"
        tifffile.imwrite(path, data)

        image = read_hdr(path)
        assert image.bounds() == (6, 4)
        assert image.space is ColorSpace.RGB
        np.testing.assert_allclose(image.raw(), data, rtol=1e-6)

    def test_fits_cube(self, tmp_path):
        """Channel-first FITS cubes are moved to channel-last."""
        cube = np.random.default_rng(2).uniform(0, 100, (3, 5, 7))
        path = tmp_path / "scene.fits"
        fits.PrimaryHDU(cube).writeto(path)

        image = read_hdr(path, ColorSpace.XYZ)
        assert image.bounds() == (7, 5)
        assert image.space is ColorSpace.XYZ
        np.testing.assert_allclose(image.raw()[..., 1], cube[1])

    def test_grayscale_replicated(self, tmp_path):
        data = np.random.default_rng(3).uniform(0, 10, (4, 4)).astype(np.float32)
        path = tmp_path / "mono.tiff"
        tifffile.imwrite(path, data)

        image = read_hdr(path)
        np.testing.assert_allclose(image.raw()[..., 0], image.raw()[..., 2])

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_hdr(tmp_path / "nope.tif")


class TestWriteLDR:
    """Tests for LDR output."""

    def test_tiff_keeps_16_bits(self, tmp_path, rgba16):
        path = write_ldr(tmp_path / "out.tif", rgba16)
        back = tifffile.imread(path)
        assert back.dtype == np.uint16
        np.testing.assert_array_equal(back, rgba16[..., :3])

    def test_tiff_with_alpha(self, tmp_path, rgba16):
        path = write_ldr(tmp_path / "out.tif", rgba16, alpha=True)
        assert tifffile.imread(path).shape == (6, 5, 4)

    def test_png_is_8_bit(self, tmp_path, rgba16):
        path = write_ldr(tmp_path / "out.png", rgba16)
        back = iio.imread(path)
        assert back.dtype == np.uint8
        np.testing.assert_array_equal(back, (rgba16[..., :3] >> 8).astype(np.uint8))

    def test_fits_channel_first(self, tmp_path, rgba16):
        path = write_ldr(tmp_path / "out.fits", rgba16)
        with fits.open(path) as hdul:
            data = np.array(hdul[0].data)
            assert hdul[0].header["TMO"] == "iCAM06"
        assert data.shape == (3, 6, 5)
        np.testing.assert_array_equal(data[0], rgba16[..., 0])

    def test_creates_parent_dir(self, tmp_path, rgba16):
        path = write_ldr(tmp_path / "a" / "b" / "out.tif", rgba16)
        assert path.exists()

    def test_rejects_float_raster(self, tmp_path):
        with pytest.raises(ValueError, match="Expected uint16"):
            write_ldr(tmp_path / "out.tif", np.zeros((2, 2, 4)))
