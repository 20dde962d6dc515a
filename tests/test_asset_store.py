from import_engine.asset_store import AssetStore
from import_engine.image_resolver import ResolvedImage
from import_engine.picture_source import PictureKind


def test_store_writes_under_kind_folder(public_dir, png_bytes):
    store = AssetStore.for_kind("products")
    asset = store.store(ResolvedImage(PictureKind.DATA_URI, png_bytes, "image/png", ".png"))

    assert asset.public_path.startswith("/uploads/products/")
    assert asset.public_path.endswith(".png")
    on_disk = public_dir / asset.public_path.lstrip("/")
    assert on_disk.read_bytes() == png_bytes
    assert asset.size_bytes == len(png_bytes)
    assert (asset.width, asset.height) == (4, 3)


def test_same_image_twice_gives_two_files(public_dir, png_bytes):
    store = AssetStore.for_kind("categories")
    image = ResolvedImage(PictureKind.DATA_URI, png_bytes, "image/png", ".png")
    first, second = store.store(image), store.store(image)
    assert first.public_path != second.public_path
    assert len(list((public_dir / "uploads" / "categories").iterdir())) == 2


def test_extension_sniffed_when_unknown(png_bytes):
    store = AssetStore.for_kind("products")
    asset = store.store(ResolvedImage(PictureKind.REMOTE_URL, png_bytes, "", ""))
    assert asset.public_path.endswith(".png")
    assert asset.content_type == "image/png"


def test_svg_has_no_dimensions():
    svg = b"<svg xmlns='http://www.w3.org/2000/svg'></svg>"
    asset = AssetStore.for_kind("products").store(
        ResolvedImage(PictureKind.BARE_FILENAME, svg, "image/svg+xml", ".svg"))
    assert asset.public_path.endswith(".svg")
    assert asset.width is None and asset.height is None


def test_unknown_bytes_get_bin_extension():
    asset = AssetStore.for_kind("products").store(
        ResolvedImage(PictureKind.REMOTE_URL, b"\x00\x01\x02", "", ""))
    assert asset.public_path.endswith(".bin")
    assert asset.content_type == "application/octet-stream"


def test_pass_through_reference_writes_nothing(public_dir):
    asset = AssetStore.for_kind("products").store(
        ResolvedImage(PictureKind.ALREADY_STORED, public_path="/uploads/products/x.png"))
    assert asset.public_path == "/uploads/products/x.png"
    assert not (public_dir / "uploads").exists()
