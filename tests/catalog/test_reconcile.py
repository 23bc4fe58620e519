"""Tests for set reconciliation."""

from dataclasses import dataclass

from catalog_engine.catalog import reconcile


@dataclass
class Row:
    id: str
    sku: str | None


class TestReconcile:
    """Tests for reconcile()."""

    def test_pairs_by_key(self) -> None:
        """Matching keys update, new keys insert, missing keys delete."""
        existing = [Row("1", "A"), Row("2", "B")]
        desired = ["B", "C"]

        result = reconcile(existing, desired, lambda r: r.sku, lambda d: d)

        assert result.to_insert == ["C"]
        assert [(row.id, item) for row, item in result.to_update] == [("2", "B")]
        assert [row.id for row in result.to_delete] == ["1"]

    def test_none_key_never_matches(self) -> None:
        """Unkeyed rows are always replaced."""
        existing = [Row("1", None)]
        desired = [None]

        result = reconcile(existing, desired, lambda r: r.sku, lambda d: d)

        assert result.to_insert == [None]
        assert result.to_update == []
        assert [row.id for row in result.to_delete] == ["1"]

    def test_duplicate_keys_pair_in_order(self) -> None:
        """Each persisted row pairs with at most one desired item."""
        existing = [Row("1", "A"), Row("2", "A"), Row("3", "A")]
        desired = ["A", "A"]

        result = reconcile(existing, desired, lambda r: r.sku, lambda d: d)

        assert [row.id for row, _ in result.to_update] == ["1", "2"]
        assert [row.id for row in result.to_delete] == ["3"]
        assert result.to_insert == []

    def test_identical_sets_only_update(self) -> None:
        """Reconciling a collection with itself inserts and deletes nothing."""
        existing = [Row("1", "A"), Row("2", "B")]

        result = reconcile(existing, ["A", "B"], lambda r: r.sku, lambda d: d)

        assert result.to_insert == []
        assert result.to_delete == []
        assert len(result.to_update) == 2
        assert not result.is_empty

    def test_empty_both_sides(self) -> None:
        """Nothing to do when both sides are empty."""
        assert reconcile([], [], str, str).is_empty
