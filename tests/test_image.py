"""Tests for the Image handle."""

import io
import os
from datetime import datetime
from pathlib import Path

import pytest
import requests

from minimagick.config import MagickSettings
from minimagick.exceptions import (
    DispatchError,
    GenericExecutionError,
    ImageFetchError,
    InvalidInputError,
    MiniMagickError,
)
from minimagick.execution import Executor
from minimagick.image import Image


@pytest.fixture
def temp_image(executor):
    """An image backed by a temporary file, after its validity check."""
    image = Image.read(b"fake-jpeg-data", ".jpg", executor=executor)
    yield image
    image.destroy()


class FakeResponse:
    def __init__(self, content=b"", status_error=None):
        self.content = content
        self._status_error = status_error

    def raise_for_status(self):
        if self._status_error is not None:
            raise self._status_error


# Loading
# -------

def test_read_creates_temp_copy_and_validates(executor, runner):
    image = Image.read(b"fake-jpeg-data", ".jpg", executor=executor)
    try:
        assert image.path.endswith(".jpg")
        assert Path(image.path).read_bytes() == b"fake-jpeg-data"
        assert runner.commands == [f"identify {image.path}"]
    finally:
        image.destroy()


def test_read_accepts_stream_and_extension_without_dot(executor):
    image = Image.read(io.BytesIO(b"png-data"), "png", executor=executor)
    try:
        assert image.path.endswith(".png")
        assert image.to_blob() == b"png-data"
    finally:
        image.destroy()


@pytest.mark.parametrize("data", ["not bytes", 5, None])
def test_read_rejects_non_bytes(executor, runner, data):
    with pytest.raises(TypeError):
        Image.read(data, executor=executor)
    assert runner.calls == []


def test_read_invalid_data_raises_and_removes_temp_file(executor, runner):
    output = "identify: no decode delegate for this image format"
    runner.queue(exit_status=1, output=output)

    with pytest.raises(InvalidInputError) as excinfo:
        Image.read(b"garbage", ".jpg", executor=executor)

    assert excinfo.value.output == output
    temp_path = runner.commands[0].split(" ", 1)[1]
    assert not os.path.exists(temp_path)


def test_open_local_file_leaves_original_untouched(executor, runner, image_file):
    image = Image.open(image_file, executor=executor)
    try:
        assert image.path != str(image_file)
        assert image.path.endswith(".jpg")
        assert image.to_blob() == image_file.read_bytes()
    finally:
        image.destroy()

    assert image_file.exists()


def test_open_url_downloads_with_configured_timeout(runner, monkeypatch):
    executor = Executor(MagickSettings(http_timeout=7), runner=runner)
    calls = []

    def fake_get(url, timeout):
        calls.append((url, timeout))
        return FakeResponse(content=b"remote-data")

    monkeypatch.setattr(requests, "get", fake_get)

    image = Image.open("https://example.com/images/cat.gif?size=large", executor=executor)
    try:
        assert calls == [("https://example.com/images/cat.gif?size=large", 7)]
        assert image.path.endswith(".gif")
        assert image.to_blob() == b"remote-data"
    finally:
        image.destroy()


def test_open_url_failure_raises_fetch_error(executor, runner, monkeypatch):
    def fake_get(url, timeout):
        return FakeResponse(status_error=requests.exceptions.HTTPError("404 Not Found"))

    monkeypatch.setattr(requests, "get", fake_get)

    with pytest.raises(ImageFetchError, match="404"):
        Image.open("https://example.com/missing.jpg", executor=executor)
    assert runner.calls == []


def test_valid_is_false_for_invalid_input(executor, runner, image_file):
    runner.queue(exit_status=1, output="did not return an image")

    assert not Image(image_file, executor=executor).valid()


def test_valid_propagates_generic_errors(executor, runner, image_file):
    runner.queue(exit_status=127, output="identify: not found")

    with pytest.raises(GenericExecutionError):
        Image(image_file, executor=executor).valid()


# Attributes
# ----------

def test_width_height_and_dimensions(executor, runner, image_file):
    image = Image(image_file, executor=executor)
    runner.queue(output="50\n")
    runner.queue(output="41\n41\n")
    runner.queue(output="50 41\n")

    assert image["width"] == 50
    assert image["height"] == 41
    assert image["dimensions"] == [50, 41]
    assert runner.commands[0] == f'identify -format "%w\\\\n" {image_file}'


def test_format_attribute_uses_first_frame(executor, runner, image_file):
    runner.queue(output="GIF\nGIF\nGIF\n")

    assert Image(image_file, executor=executor)["format"] == "GIF"


def test_size_reads_file_system(executor, runner, image_file):
    assert Image(image_file, executor=executor)["size"] == image_file.stat().st_size
    assert runner.calls == []


def test_exif_value(executor, runner, image_file):
    runner.queue(output="Canon EOS 5D\n")
    image = Image(image_file, executor=executor)

    assert image["EXIF:Model"] == "Canon EOS 5D"
    assert runner.commands == [f'identify -format "%[EXIF:Model]" {image_file}']


def test_exif_character_data_is_decoded(executor, runner, image_file):
    runner.queue(output="48, 50, 50, 48")

    assert Image(image_file, executor=executor)["EXIF:ExifVersion"] == "0220"


def test_exif_text_with_commas_is_returned_as_is(executor, runner, image_file):
    runner.queue(output="Canon, Inc.")

    assert Image(image_file, executor=executor)["EXIF:Make"] == "Canon, Inc."


def test_original_at(executor, runner, image_file):
    runner.queue(output="2005:02:23 23:17:24")

    assert Image(image_file, executor=executor)["original_at"] == datetime(2005, 2, 23, 23, 17, 24)


def test_original_at_missing_is_none(executor, runner, image_file):
    runner.queue(output="")

    assert Image(image_file, executor=executor)["original_at"] is None


def test_other_attributes_pass_format_string_through(executor, runner, image_file):
    runner.queue(output="sRGB\n")
    image = Image(image_file, executor=executor)

    assert image["%[colorspace]"] == "sRGB"
    assert runner.commands == [f'identify -format "%[colorspace]" {image_file}']


# Processing
# ----------

def test_mogrify_appends_path(executor, runner, image_file):
    image = Image(image_file, executor=executor)

    image.mogrify("-resize", "50%")
    image << "-strip"

    assert runner.commands == [
        f"mogrify -resize 50% {image_file}",
        f"mogrify -strip {image_file}",
    ]


def test_dynamic_options_run_mogrify(executor, runner, image_file):
    image = Image(image_file, executor=executor)

    result = image.resize("50%").auto_orient()

    assert result is image
    assert runner.commands == [
        f'mogrify -resize "50%" {image_file}',
        f"mogrify -auto-orient {image_file}",
    ]


def test_dynamic_unknown_option_raises_without_running(executor, runner, image_file):
    image = Image(image_file, executor=executor)

    with pytest.raises(DispatchError):
        image.resise("50%")
    assert not hasattr(image, "bogus")
    assert runner.calls == []


def test_combine_options_runs_one_command(executor, runner, image_file):
    image = Image(image_file, executor=executor)

    with image.combine_options() as c:
        c.thumbnail("300x500>")
        c.background("white")

    assert runner.commands == [
        f'mogrify -thumbnail "300x500>" -background "white" {image_file}'
    ]


def test_combine_options_skips_command_on_error(executor, runner, image_file):
    image = Image(image_file, executor=executor)

    with pytest.raises(DispatchError):
        with image.combine_options() as c:
            c.resize("50%")
            c.format("png")

    assert runner.calls == []


def test_combine_options_uses_processor_prefix(runner, image_file):
    image = Image(image_file, executor=Executor(MagickSettings(processor="gm"), runner=runner))

    image.strip()

    assert runner.commands == [f"gm mogrify -strip {image_file}"]


def test_collapse(executor, runner, image_file):
    Image(image_file, executor=executor).collapse()

    assert runner.commands == [f"mogrify -quality 100 {image_file}[0]"]


def test_write_copies_and_verifies(executor, runner, image_file, tmp_path):
    output = tmp_path / "out.jpg"

    Image(image_file, executor=executor).write(output)

    assert output.read_bytes() == image_file.read_bytes()
    assert runner.commands == [f"identify {output}"]


# Format changes
# --------------

def test_format_renames_working_file(executor, runner, image_file):
    converted = image_file.with_suffix(".png")
    runner.on_run = lambda command: converted.write_bytes(b"png")
    image = Image(image_file, executor=executor)

    image.format("png")

    assert runner.commands == [f"mogrify -format png {image_file}"]
    assert image.path == str(converted)
    assert converted.exists()
    assert not image_file.exists()


def test_format_moves_temp_file_ownership(executor, runner, temp_image):
    old_path = Path(temp_image.path)
    converted = old_path.with_suffix(".png")
    runner.on_run = lambda command: converted.write_bytes(b"png")

    temp_image.format("png")

    assert not old_path.exists()
    assert converted.exists()
    temp_image.destroy()
    assert not converted.exists()


def test_format_picks_page_and_removes_page_files(executor, runner, tmp_path):
    source = tmp_path / "anim.gif"
    source.write_bytes(b"gif")
    pages = [tmp_path / f"anim-{n}.png" for n in range(3)]

    def write_pages(command):
        for n, page in enumerate(pages):
            page.write_bytes(f"page {n}".encode())

    runner.on_run = write_pages
    image = Image(source, executor=executor)

    image.format("png", page=1)

    assert Path(image.path).read_bytes() == b"page 1"
    assert not any(page.exists() for page in pages)


def test_format_without_output_raises(executor, runner, image_file):
    image = Image(image_file, executor=executor)

    with pytest.raises(MiniMagickError, match="Unable to format to png"):
        image.format("png")


def test_builder_format_is_rejected_on_image(executor, runner, image_file):
    image = Image(image_file, executor=executor)

    with pytest.raises(DispatchError):
        with image.combine_options() as c:
            c.add_option("format", "png")


# Composite
# ---------

def test_composite_creates_new_image(executor, runner, temp_image, image_file):
    overlay = Image(image_file, executor=executor)

    result = temp_image.composite(overlay, "png", configure=lambda c: c.gravity("center"))
    try:
        assert result.path.endswith(".png")
        assert result.path != temp_image.path
        assert runner.commands[-1] == (
            f'composite -gravity "center" {image_file} {temp_image.path} {result.path}'
        )
    finally:
        result.destroy()
    assert not os.path.exists(result.path)


def test_composite_failure_releases_output(executor, runner, temp_image, image_file):
    runner.queue(exit_status=1, output="composite: unable to open image")

    with pytest.raises(GenericExecutionError):
        temp_image.composite(Image(image_file, executor=executor))

    output_path = runner.commands[-1].split()[-1]
    assert not os.path.exists(output_path)


# Cleanup
# -------

def test_failed_command_releases_temp_file(executor, runner, temp_image):
    runner.queue(exit_status=1, output="mogrify: unrecognized option '-bogus'")

    with pytest.raises(GenericExecutionError) as excinfo:
        temp_image.mogrify("-bogus")

    assert excinfo.value.exit_status == 1
    assert not os.path.exists(temp_image.path)
    temp_image.destroy()


def test_destroy_is_idempotent(temp_image):
    temp_image.destroy()
    temp_image.destroy()

    assert not os.path.exists(temp_image.path)


def test_destroy_leaves_unowned_files(executor, image_file):
    Image(image_file, executor=executor).destroy()

    assert image_file.exists()


def test_context_manager_destroys(executor):
    with Image.read(b"data", ".jpg", executor=executor) as image:
        path = image.path
        assert os.path.exists(path)

    assert not os.path.exists(path)
