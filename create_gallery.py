# /// script
# dependencies = ["pillow", "jinja2"]
# ///
"""
create_gallery: Build a Jekyll photo gallery from directories of pictures.

Usage:
    uv run --script create_gallery.py [--pages] [--url URL] [--geometry WxH] <directory> ...

For every directory given, writes a thumbnail next to each .jpg/.png picture,
an index.textile listing page and (with --pages) one .textile page per picture.
"""

import argparse
import os
import re
import shlex
import subprocess
import sys
from datetime import datetime
from fractions import Fraction
from pathlib import Path

from PIL import ExifTags, Image, UnidentifiedImageError
from jinja2 import Environment
from markupsafe import Markup

_jinja_env = Environment(
    autoescape=True,
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=True,
)
Template = _jinja_env.from_string

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

DEFAULT_GEOMETRY = "210x150"
DEFAULT_CONVERTER = "convert"   # ImageMagick; "magick" on IM7-only installs
PILLOW_CONVERTER = "pillow"     # resize in-process instead of shelling out

IMAGE_EXTENSIONS = (".jpg", ".png")   # case-sensitive, in enumeration order
JPEG_EXTENSION = ".jpg"
TEXT_EXTENSION = ".textile"
PAGE_EXTENSION = ".html"
INDEX_NAME = "index"

GENERATED_MARKERS = ("-thumb", "-page")

EXIF_DATE_FORMAT = "%Y:%m:%d %H:%M:%S"
GEOMETRY_RE = re.compile(r"^(\d+)x(\d+)$")

# ---------------------------------------------------------------------------
# Filename utilities
# ---------------------------------------------------------------------------

def suffix_filename(file, suffix: str) -> Path:
    """Sibling of `file` with "-suffix" appended to the stem: a/b.jpg -> a/b-thumb.jpg"""
    file = Path(file)
    return file.with_name(f"{file.stem}-{suffix}{file.suffix}")


def thumb_filename(file) -> Path:
    return suffix_filename(file, "thumb")


def page_filename(file) -> Path:
    return suffix_filename(file, "page")


def is_suffixed(file) -> bool:
    """True if the file name carries one of the markers used for generated files.

    Generated files are never converted again nor listed in the gallery. A
    picture whose own name happens to contain "-thumb" or "-page" is skipped
    as well.
    """
    name = Path(file).name
    return any(marker in name for marker in GENERATED_MARKERS)


def gen_link(url: str, file, gen_page: bool, site_root=None) -> str:
    """Reference to `file` suitable for an href/src attribute.

    With an empty `url` the link is the bare file name, good for pages living
    in the same directory as the pictures. Otherwise the directory of `file`
    is appended to `url`; it is taken relative to `site_root` when one is
    given, and as typed on the command line when not. With `gen_page` the
    extension becomes .html.

        gen_link("", "/a/b/c.jpg", False)                  -> "c.jpg"
        gen_link("", "/a/b/c.jpg", True)                   -> "c.html"
        gen_link("http://ex.com", "/a/b/c.jpg", False)     -> "http://ex.com/a/b/c.jpg"
        gen_link("http://ex.com/", "/a/b/c.jpg", True, "/a") -> "http://ex.com/b/c.html"
    """
    file = Path(file)
    name = file.stem + (PAGE_EXTENSION if gen_page else file.suffix)
    if not url:
        return name

    directory = file.parent
    if site_root is not None:
        directory = Path(os.path.relpath(directory, site_root))
    parts = [p for p in directory.as_posix().split("/") if p and p != "."]

    return url + ("" if url.endswith("/") else "/") + "/".join(parts + [name])


def list_images(gallery) -> list[Path]:
    """Source pictures directly inside `gallery`: .jpg files first, then .png, each by name."""
    gallery = Path(gallery)
    images = []
    for ext in IMAGE_EXTENSIONS:
        for f in sorted(gallery.glob(f"*{ext}")):
            # glob may fold case on some platforms; extensions are lower-case only
            if f.suffix != ext or not f.is_file():
                continue
            if f.name.startswith(".") or is_suffixed(f):
                continue
            images.append(f)
    return images


def gallery_title(gallery) -> str:
    # abspath, not resolve: a symlinked gallery keeps the name it was given
    return Path(os.path.abspath(gallery)).name

# ---------------------------------------------------------------------------
# Step 1: Thumbnails
# ---------------------------------------------------------------------------

def parse_geometry(geometry: str) -> tuple[int, int]:
    """Parse "WIDTHxHEIGHT" into a (width, height) bounding box."""
    m = GEOMETRY_RE.match(geometry.strip())
    if not m or int(m.group(1)) == 0 or int(m.group(2)) == 0:
        raise ValueError(f"invalid geometry {geometry!r}, expected WIDTHxHEIGHT (e.g. 210x150)")
    return int(m.group(1)), int(m.group(2))


def make_thumbnail(src: Path, dst: Path, size: tuple[int, int]):
    """Shrink `src` to fit within `size`, keeping aspect ratio and format."""
    with Image.open(src) as img:
        img.thumbnail(size, Image.LANCZOS)
        if dst.suffix == JPEG_EXTENSION:
            if img.mode not in ("RGB", "L"):
                img = img.convert("RGB")
            img.save(dst, "JPEG", quality=85)
        else:
            img.save(dst, "PNG")


def convert_thumbnail(src: Path, dst: Path, geometry: str, converter: str = DEFAULT_CONVERTER):
    """Write the thumbnail of `src` to `dst`.

    Shells out to `converter` (ImageMagick's convert by default) and waits
    for it. Raises CalledProcessError on a non-zero exit and OSError when the
    converter cannot be started.
    """
    if converter == PILLOW_CONVERTER:
        make_thumbnail(src, dst, parse_geometry(geometry))
        return

    cmd = shlex.split(converter) + ["-thumbnail", geometry, str(src), str(dst)]
    subprocess.run(cmd, capture_output=True, text=True, check=True)


def generate_thumbs(gallery, geometry: str = DEFAULT_GEOMETRY,
                    converter: str = DEFAULT_CONVERTER) -> list[Path]:
    """Create one thumbnail per source picture. Returns the pictures that failed."""
    images = list_images(gallery)
    failed = []

    for i, file in enumerate(images):
        try:
            convert_thumbnail(file, thumb_filename(file), geometry, converter)
        except subprocess.CalledProcessError as e:
            detail = (e.stderr or "").strip() or f"exit status {e.returncode}"
            print(f"  [{i+1}/{len(images)}] Thumb failed for {file.name}: {detail}")
            failed.append(file)
        except OSError as e:
            print(f"  [{i+1}/{len(images)}] Thumb failed for {file.name}: {e}")
            failed.append(file)

    print(f"  Wrote {len(images) - len(failed)} thumbnails ({geometry})"
          + (f", {len(failed)} failed" if failed else ""))
    return failed

# ---------------------------------------------------------------------------
# Step 2: EXIF data
# ---------------------------------------------------------------------------

EXIF_HTML_TEMPLATE = Template("""\
<div class="exif">
  {{ date_time }}
  model: {{ model }}
  e: {{ exposure }} f: {{ aperture }}
  size: {{ width }} x {{ height }}
</div>""")

EXIF_YAML_TEMPLATE = Template("""\
{% autoescape false %}
date_time: {{ date_time }}
model: {{ model }}
exposure: {{ exposure }}
aperture: {{ aperture }}
size: {{ width }} x {{ height }}
{%- endautoescape %}""")


def format_date_time(value) -> str:
    if value is None:
        return ""
    value = str(value).strip()
    try:
        return str(datetime.strptime(value, EXIF_DATE_FORMAT))
    except ValueError:
        return value


def format_exposure(value) -> str:
    """Exposure time as a fraction of a second, e.g. "1/200"."""
    if value is None:
        return ""
    denominator = getattr(value, "denominator", None)
    if not denominator:
        return str(value)
    exposure = Fraction(int(value.numerator), int(denominator))
    return f"{exposure.numerator}/{exposure.denominator}"


def format_aperture(value) -> str:
    if value is None:
        return ""
    return str(float(value))


def exif_data(file) -> dict | None:
    """Basic capture data of a .jpg picture, None for any other extension.

    A .jpg file that is not a decodable JPEG raises UnidentifiedImageError.
    """
    file = Path(file)
    if file.suffix != JPEG_EXTENSION:
        return None

    with Image.open(file) as img:
        if img.format != "JPEG":
            raise UnidentifiedImageError(f"{file} is not a JPEG file")
        width, height = img.size
        exif = img.getexif()
        details = exif.get_ifd(ExifTags.IFD.Exif)

        date_time = exif.get(ExifTags.Base.DateTime) or details.get(ExifTags.Base.DateTimeOriginal)
        model = exif.get(ExifTags.Base.Model)

        return {
            "date_time": format_date_time(date_time),
            "model": str(model).strip() if model is not None else "",
            "exposure": format_exposure(details.get(ExifTags.Base.ExposureTime)),
            "aperture": format_aperture(details.get(ExifTags.Base.FNumber)),
            "width": width,
            "height": height,
        }


def exif_data_to_html(file) -> str:
    data = exif_data(file)
    if data is None:
        return ""
    return EXIF_HTML_TEMPLATE.render(**data)


def exif_data_to_yaml(file) -> str:
    data = exif_data(file)
    if data is None:
        return ""
    return EXIF_YAML_TEMPLATE.render(**data)

# ---------------------------------------------------------------------------
# Step 3: Gallery index
# ---------------------------------------------------------------------------

# gallerific compatible markup: ul.gallery > li > (a > img.thumb | div.caption)
INDEX_TEMPLATE = Template("""\
{% autoescape false %}
---
title: {{ title }}
layout: gallery
---
{% endautoescape %}
<ul class="gallery">
{% for image in images %}
  <li>
    <a href="{{ image.href }}">
      <img src="{{ image.thumb }}" class="thumb">
    </a>
    <div class="caption">
      <span class="title">{{ image.name }}</span> <br />
{% if image.exif %}
      {{ image.exif }}
{% endif %}
    </div>
  </li>
{% endfor %}
</ul>
""")


def generate_index(gallery, url: str = "", gen_page: bool = False, site_root=None) -> Path:
    """Write index.textile listing every picture with its thumbnail and EXIF data."""
    gallery = Path(gallery)
    images = []
    for file in list_images(gallery):
        images.append({
            "href": gen_link(url, file, gen_page, site_root),
            "thumb": gen_link(url, thumb_filename(file), False, site_root),
            "name": file.name,
            "exif": Markup(exif_data_to_html(file)),
        })

    index_path = gallery / (INDEX_NAME + TEXT_EXTENSION)
    index_path.write_text(
        INDEX_TEMPLATE.render(title=gallery_title(gallery), images=images),
        encoding="utf-8",
    )
    print(f"  Wrote {index_path.name} ({len(images)} photos)")
    return index_path

# ---------------------------------------------------------------------------
# Step 4: Picture pages
# ---------------------------------------------------------------------------

PAGE_TEMPLATE = Template("""\
{% autoescape false %}
---
title: {{ title }}
layout: gallery_page
img: {{ img }}
{% if prev_page %}
prev: {{ prev_page }}
{% endif %}
{% if next_page %}
next: {{ next_page }}
{% endif %}
gallery: "{{ gallery }}"
gallery_index: index.html
index: {{ index }}
total: {{ total }}
{% if exif %}
{{ exif }}
{% endif %}
---
{% endautoescape %}
""")


def generate_pages(gallery, url: str = "", site_root=None) -> list[Path]:
    """Write one .textile page per picture, linked to its neighbours in gallery order."""
    gallery = Path(gallery)
    pages = list_images(gallery)
    title = gallery_title(gallery)
    written = []

    for i, page in enumerate(pages):
        prev_page = gen_link(url, pages[i - 1], True, site_root) if i > 0 else None
        next_page = gen_link(url, pages[i + 1], True, site_root) if i < len(pages) - 1 else None

        # same name as the picture, with .textile instead of the image extension
        page_path = gallery / (page.stem + TEXT_EXTENSION)
        page_path.write_text(
            PAGE_TEMPLATE.render(
                title=page.name,
                img=gen_link(url, page, False, site_root),
                prev_page=prev_page,
                next_page=next_page,
                gallery=title,
                index=i + 1,
                total=len(pages),
                exif=exif_data_to_yaml(page),
            ),
            encoding="utf-8",
        )
        written.append(page_path)

    print(f"  Wrote {len(written)} photo pages")
    return written

# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def build_gallery(gallery, *, geometry: str = DEFAULT_GEOMETRY, url: str = "",
                  gen_page: bool = False, converter: str = DEFAULT_CONVERTER,
                  site_root=None) -> list[Path]:
    """Run every step for one directory. Returns the pictures whose thumbnail failed."""
    gallery = Path(gallery)
    print(f"Gallery {gallery}:")
    failed = generate_thumbs(gallery, geometry, converter)
    generate_index(gallery, url, gen_page, site_root)
    if gen_page:
        generate_pages(gallery, url, site_root)
    return failed


HELP_EPILOG = """\
Input:  <directory> ... one or more directories with JPG or PNG pictures
Output: a set of Jekyll files to present the pictures as a gallery

Some examples of thumb geometries: 330x220, 210x150 (default), 90x90
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="create_gallery",
        description="Generate a Jekyll gallery from directories containing pictures.",
        epilog=HELP_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("directories", nargs="*", metavar="directory",
                        help="directory with the pictures of one gallery")
    parser.add_argument("-g", "--geometry", default=DEFAULT_GEOMETRY, metavar="NNNxMMM",
                        help="generate thumbnails of the given geometry (default: %(default)s)")
    parser.add_argument("--pages", action="store_true",
                        help="generate one page per picture, rather than having "
                             "the gallery point directly to the pictures")
    parser.add_argument("--url", default="",
                        help="make all links absolute, prefixed with URL")
    parser.add_argument("--root", default=None, metavar="DIR",
                        help="site root the --url links are relative to "
                             "(default: the current directory)")
    parser.add_argument("--converter", default=DEFAULT_CONVERTER, metavar="CMD",
                        help="image converter command, or 'pillow' to resize "
                             "in-process (default: %(default)s)")
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.directories:
        print("Missing <directory> argument (try --help)")
        return 0

    if args.converter == PILLOW_CONVERTER:
        try:
            parse_geometry(args.geometry)
        except ValueError as e:
            parser.error(str(e))

    site_root = Path(args.root) if args.root else None
    failed = []
    for directory in args.directories:
        failed += build_gallery(
            Path(directory),
            geometry=args.geometry,
            url=args.url,
            gen_page=args.pages,
            converter=args.converter,
            site_root=site_root,
        )

    print(f"\nDone! {len(args.directories)} galleries written"
          + (f", {len(failed)} thumbnails failed" if failed else ""))
    return 0


if __name__ == "__main__":
    sys.exit(main())
