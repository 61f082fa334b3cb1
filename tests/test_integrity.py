import asyncio

import pytest

from core.integrity import check_workspace_refs
from util.errors import CrossTenantReference, MissingTenant


class _Lookup:
    def __init__(self, workspaces):
        self._workspaces = workspaces
        self.calls = []

    async def find_workspaces(self, doc_ids):
        ids = list(doc_ids)
        self.calls.append(ids)
        return {i: self._workspaces[i] for i in ids if i in self._workspaces}


STORE = {"a": "acme", "b": "acme", "c": "globex"}


@pytest.mark.parametrize("refs", [None, [], ()])
def test_empty_reference_set_passes_without_lookup(refs):
    lookup = _Lookup(STORE)
    asyncio.run(check_workspace_refs(lookup, refs, "acme"))
    assert lookup.calls == []


@pytest.mark.parametrize("workspace", ["", None])
def test_missing_workspace_is_a_programmer_error(workspace):
    with pytest.raises(MissingTenant):
        asyncio.run(check_workspace_refs(_Lookup(STORE), ["a"], workspace))


def test_same_workspace_passes_in_one_batched_read():
    lookup = _Lookup(STORE)
    asyncio.run(check_workspace_refs(lookup, ["a", "b", "a"], "acme"))
    assert lookup.calls == [["a", "b"]]


def test_foreign_reference_fails_and_names_it():
    with pytest.raises(CrossTenantReference) as info:
        asyncio.run(check_workspace_refs(_Lookup(STORE), ["a", "c"], "acme"))
    assert info.value.status_code == 400
    assert info.value.ref_ids == ["c"]
    assert "Invalid references" in info.value.message


def test_missing_targets_are_ignored_by_default():
    asyncio.run(check_workspace_refs(_Lookup(STORE), ["a", "ghost"], "acme"))


def test_strict_mode_rejects_dangling_references():
    with pytest.raises(CrossTenantReference) as info:
        asyncio.run(check_workspace_refs(_Lookup(STORE), ["a", "ghost"], "acme", strict=True))
    assert info.value.ref_ids == ["ghost"]
