from pathlib import Path

import pytest

from create_gallery import (
    gen_link,
    is_suffixed,
    list_images,
    page_filename,
    suffix_filename,
    thumb_filename,
)
from conftest import save_jpeg, save_png


def test_suffix_filename_keeps_directory_and_extension():
    assert suffix_filename("/a/b/c.jpg", "thumb") == Path("/a/b/c-thumb.jpg")
    assert suffix_filename("pics/x.y.png", "page") == Path("pics/x.y-page.png")


def test_thumb_and_page_names_differ_and_are_stable():
    f = "/photos/sunset.jpg"
    assert thumb_filename(f) != page_filename(f)
    assert thumb_filename(f) == thumb_filename(f)
    assert page_filename(f) == page_filename(f)


@pytest.mark.parametrize("name, expected", [
    ("photo-thumb.jpg", True),
    ("photo-page.png", True),
    ("dir/a-thumbnail.jpg", True),
    ("photo.jpg", False),
    ("thumb.jpg", False),
    ("my-pagoda.jpg", False),
    ("dir-thumb/photo.jpg", False),
])
def test_is_suffixed(name, expected):
    assert is_suffixed(name) is expected


def test_gen_link_without_url():
    assert gen_link("", "/a/b/c.jpg", False) == "c.jpg"
    assert gen_link("", "/a/b/c.jpg", True) == "c.html"
    assert gen_link("", "/a/b/c-thumb.png", False) == "c-thumb.png"


def test_gen_link_with_url():
    assert gen_link("http://ex.com", "/a/b/c.jpg", False) == "http://ex.com/a/b/c.jpg"
    assert gen_link("http://ex.com/", "/a/b/c.jpg", True) == "http://ex.com/a/b/c.html"
    assert gen_link("/gallery", "photos/trip/c.png", False) == "/gallery/photos/trip/c.png"
    assert gen_link("http://ex.com", "./c.jpg", False) == "http://ex.com/c.jpg"


def test_gen_link_relative_to_site_root():
    link = gen_link("http://ex.com", "/srv/site/photos/trip/c.jpg", True, "/srv/site")
    assert link == "http://ex.com/photos/trip/c.html"


def test_list_images_order_and_filtering(tmp_path):
    save_png(tmp_path / "a.png")
    save_jpeg(tmp_path / "z.jpg")
    save_jpeg(tmp_path / "m.jpg")
    save_jpeg(tmp_path / "m-thumb.jpg")
    save_png(tmp_path / "a-page.png")
    save_jpeg(tmp_path / "upper.JPG")
    save_jpeg(tmp_path / ".hidden.jpg")
    (tmp_path / "notes.txt").write_text("not a picture")
    (tmp_path / "sub.jpg").mkdir()

    names = [f.name for f in list_images(tmp_path)]

    assert names == ["m.jpg", "z.jpg", "a.png"]


def test_list_images_empty_directory(tmp_path):
    assert list_images(tmp_path) == []
