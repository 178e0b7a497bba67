"""Image directory listing and public paths"""
import logging

import pytest

from asset_cache import AssetDirectory, AssetFile, build_assets, public_path_for


@pytest.mark.parametrize("filename", ['a.png', 'b.JPG', 'c.jpeg', 'd.webp', 'e.gif', 'f.svg'])
def test_whitelisted_extensions(filename):
    assert AssetFile.from_filename(filename) is not None


@pytest.mark.parametrize("filename", ['notes.txt', 'noext', '.png', '', None, 'archive.png.zip'])
def test_rejected_filenames(filename):
    assert AssetFile.from_filename(filename) is None


def test_asset_fields():
    asset = AssetFile.from_filename('sweetApple.JPG')
    assert asset.basename == 'sweetApple'
    assert asset.extension == '.JPG'
    assert asset.public_path == '/productsPage/sweetApple.JPG'


def test_public_path_encoding():
    assert public_path_for('shineMuscat.png') == '/productsPage/shineMuscat.png'
    assert public_path_for('불고기.png') == '/productsPage/%EB%B6%88%EA%B3%A0%EA%B8%B0.png'
    assert public_path_for('sweet apple.png', '/img/') == '/img/sweet%20apple.png'


def test_build_assets_sorted_and_unique():
    assets = build_assets(['b.png', 'a.png', 'b.png', 'readme.md'])
    assert [a.filename for a in assets] == ['a.png', 'b.png']


def test_directory_listing_is_cached(tmp_path):
    (tmp_path / 'b.png').write_bytes(b'')
    (tmp_path / 'a.jpg').write_bytes(b'')
    (tmp_path / 'notes.txt').write_text('x')
    (tmp_path / 'sub.png').mkdir()

    directory = AssetDirectory(str(tmp_path))
    assert [a.filename for a in directory.list_assets()] == ['a.jpg', 'b.png']

    (tmp_path / 'c.png').write_bytes(b'')
    assert len(directory.list_assets()) == 2

    directory.invalidate()
    assert [a.filename for a in directory.list_assets()] == ['a.jpg', 'b.png', 'c.png']


def test_listing_returns_copy(tmp_path):
    (tmp_path / 'a.png').write_bytes(b'')
    directory = AssetDirectory(str(tmp_path))
    directory.list_assets().clear()
    assert len(directory.list_assets()) == 1


def test_missing_directory_is_logged_and_retried(tmp_path, caplog):
    path = tmp_path / 'images'
    directory = AssetDirectory(str(path))

    with caplog.at_level(logging.ERROR, logger='asset_cache'):
        assert directory.list_assets() == []
    assert 'Failed to read image directory' in caplog.text

    path.mkdir()
    (path / 'a.png').write_bytes(b'')
    assert [a.filename for a in directory.list_assets()] == ['a.png']
