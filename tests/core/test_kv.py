# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""Tests for the KV diagnostics store."""

import pytest

from optiloop.core.kv import KV, make_kv


class TestKV:
    def test_preserves_insertion_order(self) -> None:
        kv = make_kv(t=1.0, acc=True, new_be=False)
        assert kv.keys() == ["t", "acc", "new_be"]

    def test_push_chains_and_overwrites(self) -> None:
        kv = KV().push("a", 1).push("b", 2).push("a", 3)
        assert kv.items() == [("a", 3), ("b", 2)]

    def test_merge_returns_new_store(self) -> None:
        base = make_kv(t=1.0, acc=True)
        merged = base.merge(make_kv(acc=False, time=0.5))

        assert merged.as_dict() == {"t": 1.0, "acc": False, "time": 0.5}
        assert base.as_dict() == {"t": 1.0, "acc": True}

    def test_mapping_access(self) -> None:
        kv = make_kv(t=2.0)
        assert kv["t"] == 2.0
        assert "t" in kv
        assert "x" not in kv
        assert kv.get("x", 7) == 7
        assert len(kv) == 1
        assert list(kv) == ["t"]

    def test_missing_key_raises(self) -> None:
        with pytest.raises(KeyError):
            KV()["nope"]

    def test_equality_respects_order(self) -> None:
        assert make_kv(a=1, b=2) == make_kv(a=1, b=2)
        assert make_kv(a=1, b=2) != make_kv(b=2, a=1)

    def test_repr(self) -> None:
        assert repr(make_kv(t=1.5)) == "KV(t=1.5)"
