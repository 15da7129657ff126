import pytest

from pkgmirror.domain.package_utils import decode_package_name, is_package_file


@pytest.mark.parametrize(
    "filename, expected",
    [
        ("pkgname-1.2.3-1-x86_64.pkg.tar.zst", "pkgname"),
        ("lib32-glibc-2.39-1-x86_64.pkg.tar.zst", "lib32-glibc"),
        ("python-foo-bar-0.1.0-3-any.pkg.tar.zst", "python-foo-bar"),
        ("foo-1:2.0-1-x86_64.pkg.tar.zst", "foo"),
    ],
)
def test_decode_strips_last_three_fields(filename, expected):
    assert decode_package_name(filename) == expected


@pytest.mark.parametrize("filename", ["", "foo", "foo-1.0", "foo-1.0-1"])
def test_decode_short_names_fall_back_to_whole_filename(filename):
    assert decode_package_name(filename) == filename


def test_decode_known_limitation_with_hyphenated_version():
    # The version field is taken to be hyphen-free; a hyphen inside it shifts the split.
    assert decode_package_name("foo-1.0-rc1-1-x86_64.pkg.tar.zst") == "foo-1.0"


def test_is_package_file():
    assert is_package_file("foo-1.0-1-x86_64.pkg.tar.zst")
    assert not is_package_file("alice.db.tar.gz")
    assert not is_package_file("foo-1.0-1-x86_64.pkg.tar.zst.sig")
