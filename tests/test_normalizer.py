"""Tests for the icon normalizer."""

import pytest
from PIL import Image

from iconcat.normalizer import (
    NormalizeReport,
    NormalizeStatus,
    fit_contain,
    make_square,
    normalize_catalogs,
    normalize_icon,
)

RED = (200, 30, 30, 255)


def _size(path):
    with Image.open(path) as img:
        return img.size


def _alpha(path, xy):
    with Image.open(path) as img:
        return img.convert("RGBA").getpixel(xy)[3]


# --- Single icon ---


def test_wide_icon_padded_to_square(tmp_path, png):
    icon = png(tmp_path / "wide.png", (100, 60), RED)

    assert normalize_icon(icon) == NormalizeStatus.RESIZED
    assert _size(icon) == (100, 100)
    # Original sits at left 0, top 20.
    assert _alpha(icon, (50, 19)) == 0
    assert _alpha(icon, (50, 20)) == 255
    assert _alpha(icon, (0, 50)) == 255
    assert _alpha(icon, (99, 79)) == 255
    assert _alpha(icon, (50, 80)) == 0
    assert not (tmp_path / "wide.png.tmp").exists()


def test_tall_icon_padded_to_square(tmp_path, png):
    icon = png(tmp_path / "tall.png", (61, 100), RED)

    normalize_icon(icon)
    assert _size(icon) == (100, 100)
    # floor((100 - 61) / 2) == 19
    assert _alpha(icon, (18, 50)) == 0
    assert _alpha(icon, (19, 50)) == 255
    assert _alpha(icon, (79, 50)) == 255
    assert _alpha(icon, (80, 50)) == 0


def test_small_square_scaled_up(tmp_path, png):
    icon = png(tmp_path / "tiny.png", (20, 20))
    assert normalize_icon(icon) == NormalizeStatus.RESIZED
    assert _size(icon) == (128, 128)


def test_large_square_scaled_down(tmp_path, png):
    icon = png(tmp_path / "huge.png", (300, 300))
    assert normalize_icon(icon) == NormalizeStatus.RESIZED
    assert _size(icon) == (128, 128)


def test_custom_target_size(tmp_path, png):
    icon = png(tmp_path / "huge.png", (512, 512))
    normalize_icon(icon, target_size=64)
    assert _size(icon) == (64, 64)


def test_non_square_and_out_of_range(tmp_path, png):
    icon = png(tmp_path / "banner.png", (400, 100), RED)

    assert normalize_icon(icon) == NormalizeStatus.RESIZED
    assert _size(icon) == (128, 128)
    assert _alpha(icon, (64, 0)) == 0
    assert _alpha(icon, (64, 64)) == 255


@pytest.mark.parametrize("side", [32, 64, 256])
def test_valid_icon_left_untouched(tmp_path, png, side):
    icon = png(tmp_path / "ok.png", (side, side))
    before = icon.read_bytes()
    mtime = icon.stat().st_mtime_ns

    assert normalize_icon(icon) == NormalizeStatus.ALREADY_VALID
    assert icon.read_bytes() == before
    assert icon.stat().st_mtime_ns == mtime


def test_corrupt_icon_fails_without_raising(tmp_path):
    icon = tmp_path / "broken.png"
    icon.write_bytes(b"\x89PNG\r\n\x1a\nthis is not really a png")

    assert normalize_icon(icon) == NormalizeStatus.FAILED
    assert icon.read_bytes().endswith(b"not really a png")


def test_failed_write_leaves_no_temp_file(tmp_path, png, monkeypatch):
    icon = png(tmp_path / "wide.png", (100, 60), RED)
    before = icon.read_bytes()

    def broken_save(self, fp, *args, **kwargs):
        with open(fp, "wb") as f:
            f.write(b"\x89PNG partial")
        raise OSError("disk full")

    monkeypatch.setattr(Image.Image, "save", broken_save)

    assert normalize_icon(icon) == NormalizeStatus.FAILED
    assert icon.read_bytes() == before
    assert sorted(p.name for p in tmp_path.iterdir()) == ["wide.png"]


def test_palette_image_keeps_working(tmp_path):
    icon = tmp_path / "palette.png"
    Image.new("P", (40, 20), 3).save(icon)

    normalize_icon(icon)
    assert _size(icon) == (40, 40)


def test_make_square_and_fit_contain_helpers():
    img = Image.new("RGB", (30, 10), (0, 0, 255))
    square = make_square(img)
    assert square.size == (30, 30)
    assert square.mode == "RGBA"

    fitted = fit_contain(Image.new("RGBA", (200, 100), RED), 50)
    assert fitted.size == (50, 50)
    assert fitted.getpixel((25, 0))[3] == 0
    assert fitted.getpixel((25, 25))[3] == 255


# --- Pass policy ---


@pytest.mark.parametrize("report,passed", [
    (NormalizeReport(), True),
    (NormalizeReport(already_valid=3), True),
    (NormalizeReport(already_valid=3, error_count=1, missing=["x"]), True),
    (NormalizeReport(resized=1, error_count=2, errors=["a", "b"]), True),
    (NormalizeReport(already_valid=3, error_count=1, errors=["bad format"]), False),
    (NormalizeReport(error_count=2, missing=["x"], errors=["y"]), False),
    (NormalizeReport(resized=2, setup_errors=["no icons dir"]), False),
])
def test_lenient_pass_policy(report, passed):
    assert report.passed is passed


def test_record_counts_statuses():
    report = NormalizeReport()
    for status in (NormalizeStatus.ALREADY_VALID, NormalizeStatus.RESIZED,
                   NormalizeStatus.RESIZED, NormalizeStatus.FAILED):
        report.record(status)
    assert (report.already_valid, report.resized, report.error_count) == (1, 2, 1)


# --- Whole catalogs ---


def test_normalize_catalogs_counts(repo):
    repo.add("STIR", repo.stir_entry("ok"), size=(64, 64))
    repo.add("STIR", repo.stir_entry("wide"), size=(100, 60))
    repo.add("BEIR", repo.beir_entry("huge"), size=(300, 300))
    repo.write()

    report = normalize_catalogs(repo.specs())
    assert (report.already_valid, report.resized, report.error_count) == (1, 2, 0)
    assert report.passed
    assert _size(repo.icons_dir("STIR") / "wide.png") == (100, 100)
    assert _size(repo.icons_dir("BEIR") / "huge.png") == (128, 128)


def test_missing_icon_is_tolerated(repo):
    repo.add("STIR", repo.stir_entry("ok"))
    repo.add("STIR", repo.stir_entry("ghost"), size=None)
    repo.add("BEIR", repo.beir_entry("fine"))
    repo.write()

    report = normalize_catalogs(repo.specs())
    assert report.missing == [
        f"STIR: Ghost ({repo.icons_dir('STIR') / 'ghost.png'})"
    ]
    assert report.error_count == 1
    assert report.already_valid == 2
    assert report.passed


def test_wrong_format_fails_when_nothing_resized(repo, png):
    repo.add("STIR", repo.stir_entry("ok"))
    repo.add("STIR", repo.stir_entry("photo", icon_path="icons/photo.jpg"), size=None)
    png(repo.icons_dir("STIR") / "photo.jpg", (64, 64))
    repo.write()

    report = normalize_catalogs(repo.specs())
    assert report.errors == ["STIR: Photo - Icon must be PNG format"]
    assert not report.passed


def test_any_resize_passes_despite_failures(repo):
    repo.add("STIR", repo.stir_entry("wide"), size=(100, 60))
    repo.add("STIR", repo.stir_entry("broken"), size=None)
    (repo.icons_dir("STIR") / "broken.png").write_bytes(b"garbage")
    repo.write()

    report = normalize_catalogs(repo.specs(), target_size=64)
    assert report.resized == 1
    assert report.error_count == 1
    assert len(report.errors) == 1
    assert report.passed


def test_missing_icons_directory(repo):
    repo.write()
    repo.icons_dir("STIR").rmdir()

    report = normalize_catalogs(repo.specs())
    assert not report.passed
    assert "STIR icons directory not found" in report.setup_errors[0]
