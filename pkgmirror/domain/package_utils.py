PACKAGE_SUFFIX = "pkg.tar.zst"


def decode_package_name(filename: str) -> str:
    """
    Return the logical package name of an artifact filename.

    `<name>-<version>-<release>-<arch>.<ext>` is split from the right and the
    last three fields are dropped, so hyphens inside the name survive:
    `lib32-foo-1.0-1-x86_64.pkg.tar.zst` -> `lib32-foo`.

    Filenames with fewer than four hyphen-separated fields have no name part
    to strip and are returned unchanged.
    """
    parts = filename.rsplit("-", 3)
    if len(parts) < 4:
        return filename
    return parts[0]


def is_package_file(filename: str) -> bool:
    return filename.endswith(PACKAGE_SUFFIX)
