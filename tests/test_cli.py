"""Tests for the pixelate command line."""
import numpy as np
import pytest
from PIL import Image

import pixelate
from conftest import solid


@pytest.fixture
def source_png(tmp_path):
    img = solid(8, 4, (240, 20, 20))
    img[:, :4, :3] = (10, 10, 10)
    path = tmp_path / "art.png"
    Image.fromarray(img).save(path)
    return path


class TestMain:
    def test_writes_png(self, source_png, capsys):
        pixelate.main([str(source_png), "--height", "2", "--palette", "#000000,#FF0000", "--resample", "nearest"])
        out_path = source_png.with_name("art_pixel.png")
        assert out_path.exists()
        with Image.open(out_path) as im:
            arr = np.array(im.convert("RGBA"))
        assert arr.shape == (2, 4, 4)
        assert set(map(tuple, arr[..., :3].reshape(-1, 3).tolist())) == {(0, 0, 0), (255, 0, 0)}
        assert "Colours used:" in capsys.readouterr().out

    def test_width_keeps_aspect(self, source_png, tmp_path):
        out = tmp_path / "wide.png"
        pixelate.main([str(source_png), "--height", "1", "--out", str(out), "--palette", "none"])
        with Image.open(out) as im:
            assert im.size == (2, 1)

    def test_suggest_and_filter(self, source_png, capsys):
        pixelate.main(
            [str(source_png), "--height", "4", "--filter-trivial", "--suggest", "2", "--distinct", "--seed", "1"]
        )
        assert "Suggested colours:" in capsys.readouterr().out

    def test_missing_input(self, tmp_path):
        with pytest.raises(SystemExit) as exc:
            pixelate.main([str(tmp_path / "nope.png")])
        assert exc.value.code == 2

    def test_not_an_image(self, tmp_path):
        path = tmp_path / "notes.png"
        path.write_text("not pixels")
        with pytest.raises(SystemExit) as exc:
            pixelate.main([str(path)])
        assert exc.value.code == 2

    def test_bad_palette(self, source_png):
        with pytest.raises(SystemExit) as exc:
            pixelate.main([str(source_png), "--palette", "sunset"])
        assert exc.value.code == 1
