import pytest

from conftest import FakeComparator, pkg
from pkgmirror.domain.errors import ComparatorError
from pkgmirror.services.package_set import reduce_package_list


class TieComparator:
    """Every pair compares equal."""

    async def compare(self, new, old):
        return 0


class BrokenComparator:
    async def compare(self, new, old):
        raise ComparatorError("vercmp missing")


@pytest.mark.asyncio
async def test_one_entry_per_logical_name():
    files = [pkg("a", "1.0"), pkg("b", "1.0"), pkg("a", "1.1"), pkg("c-d", "3"), pkg("b", "0.9")]
    reduced = await reduce_package_list(files, FakeComparator())

    assert set(reduced) == {"a", "b", "c-d"}
    assert reduced == {"a": pkg("a", "1.1"), "b": pkg("b", "1.0"), "c-d": pkg("c-d", "3")}


@pytest.mark.asyncio
async def test_newer_wins_in_ascending_order():
    reduced = await reduce_package_list([pkg("a", "1.0"), pkg("a", "2.0")], FakeComparator())
    assert reduced["a"] == pkg("a", "2.0")


@pytest.mark.asyncio
async def test_newer_wins_in_descending_order():
    reduced = await reduce_package_list([pkg("a", "2.0"), pkg("a", "1.0")], FakeComparator())
    assert reduced["a"] == pkg("a", "2.0")


@pytest.mark.asyncio
async def test_release_number_breaks_version_tie():
    reduced = await reduce_package_list([pkg("a", "1.0", "1"), pkg("a", "1.0", "2")], FakeComparator())
    assert reduced["a"] == pkg("a", "1.0", "2")


@pytest.mark.asyncio
async def test_equal_versions_keep_first_seen():
    first, second = pkg("a", "1.0", arch="x86_64"), pkg("a", "1.0", arch="any")

    assert (await reduce_package_list([first, second], TieComparator()))["a"] == first
    assert (await reduce_package_list([second, first], TieComparator()))["a"] == second


@pytest.mark.asyncio
async def test_comparator_only_called_for_repeated_names():
    comparator = FakeComparator()
    await reduce_package_list([pkg("a", "1"), pkg("b", "1"), pkg("a", "2")], comparator)
    assert comparator.calls == [(pkg("a", "2"), pkg("a", "1"))]


@pytest.mark.asyncio
async def test_empty_input():
    assert await reduce_package_list([], FakeComparator()) == {}


@pytest.mark.asyncio
async def test_comparator_error_propagates():
    with pytest.raises(ComparatorError):
        await reduce_package_list([pkg("a", "1"), pkg("a", "2")], BrokenComparator())
