"""Тесты для Change-Set Resolver.

Coverage:
- INSERT / UPDATE / DELETE / RESTORE → затронутые заказы
- Перенос строки между заказами (оба конца устаревают)
- Orphan-изменения не затрагивают заказы
- Дедупликация и порядок первого появления
- Некорректные записи → InvalidChangeRecord
"""

import pytest

from src.core.domain import ChangeKind, LineItem, LineItemChange
from src.rollup import ChangeSetResolver, InvalidChangeRecord, resolve_affected_orders


def make_item(line_item_id: str, order_id=None, units: int = 1) -> LineItem:
    return LineItem(line_item_id=line_item_id, lot_id="lot-1", units=units, order_id=order_id)


class TestChangeSetResolver:
    """Тесты Change-Set Resolver."""

    def test_empty_batch(self):
        """Пустой batch → пустое множество."""
        result = ChangeSetResolver().resolve([])

        assert result.affected_order_ids == ()
        assert result.is_empty
        assert result.total_changes == 0

    def test_insert_marks_after_order(self):
        result = ChangeSetResolver().resolve([LineItemChange.insert(make_item("li-1", "A"))])

        assert result.affected_order_ids == ("A",)
        assert result.kind_counts[ChangeKind.INSERT] == 1

    def test_delete_marks_before_order(self):
        result = ChangeSetResolver().resolve([LineItemChange.delete(make_item("li-1", "A"))])

        assert result.affected_order_ids == ("A",)
        assert result.kind_counts[ChangeKind.DELETE] == 1

    def test_restore_marks_restored_order(self):
        result = ChangeSetResolver().resolve([LineItemChange.restore(make_item("li-1", "A"))])

        assert result.affected_order_ids == ("A",)
        assert result.kind_counts[ChangeKind.RESTORE] == 1

    def test_update_move_marks_both_orders(self):
        """Перенос A → B: оба заказа устаревают."""
        before = make_item("li-1", "A")
        after = make_item("li-1", "B")

        result = ChangeSetResolver().resolve([LineItemChange.update(before, after)])

        assert result.affected_order_ids == ("A", "B")
        assert result.moved_items == 1

    def test_update_to_orphan_marks_previous_order(self):
        """Строка становится orphan: устаревает прежний заказ."""
        result = ChangeSetResolver().resolve(
            [LineItemChange.update(make_item("li-1", "A"), make_item("li-1", None))]
        )

        assert result.affected_order_ids == ("A",)
        assert result.moved_items == 1

    def test_update_from_orphan_marks_new_order(self):
        result = ChangeSetResolver().resolve(
            [LineItemChange.update(make_item("li-1", None), make_item("li-1", "B"))]
        )

        assert result.affected_order_ids == ("B",)

    def test_orphan_only_batch_is_empty(self):
        """Batch из одних orphan-вставок не затрагивает заказы."""
        changes = [LineItemChange.insert(make_item(f"li-{i}")) for i in range(5)]

        result = ChangeSetResolver().resolve(changes)

        assert result.affected_order_ids == ()
        assert result.orphan_changes == 5
        assert result.kind_counts[ChangeKind.INSERT] == 5

    def test_deduplicates_in_first_seen_order(self):
        changes = [
            LineItemChange.insert(make_item("li-1", "B")),
            LineItemChange.insert(make_item("li-2", "A")),
            LineItemChange.delete(make_item("li-3", "B")),
            LineItemChange.update(make_item("li-4", "C"), make_item("li-4", "A")),
            LineItemChange.insert(make_item("li-5")),
        ]

        result = ChangeSetResolver().resolve(changes)

        assert result.affected_order_ids == ("B", "A", "C")
        assert result.total_changes == 5
        assert result.orphan_changes == 1

    def test_mixed_bulk_counts(self):
        changes = [
            LineItemChange.insert(make_item("li-1", "A")),
            LineItemChange.update(make_item("li-2", "A"), make_item("li-2", "A", units=5)),
            LineItemChange.delete(make_item("li-3", "A")),
            LineItemChange.restore(make_item("li-4", "A")),
        ]

        result = ChangeSetResolver().resolve(changes)

        assert result.affected_order_ids == ("A",)
        assert result.kind_counts == {
            ChangeKind.INSERT: 1,
            ChangeKind.UPDATE: 1,
            ChangeKind.DELETE: 1,
            ChangeKind.RESTORE: 1,
        }
        assert result.moved_items == 0

    def test_convenience_function(self):
        changes = [LineItemChange.insert(make_item("li-1", "A"))]

        assert resolve_affected_orders(changes) == ("A",)


class TestInvalidChangeRecords:
    """Некорректные записи изменений."""

    def test_both_states_absent(self):
        changes = [
            LineItemChange.insert(make_item("li-1", "A")),
            LineItemChange(kind=ChangeKind.UPDATE, before=None, after=None),
        ]

        with pytest.raises(InvalidChangeRecord, match="change #1") as exc_info:
            ChangeSetResolver().resolve(changes)

        assert exc_info.value.index == 1

    def test_before_after_different_items(self):
        change = LineItemChange.update(make_item("li-1", "A"), make_item("li-2", "A"))

        with pytest.raises(InvalidChangeRecord, match="different line items"):
            ChangeSetResolver().resolve([change])

    @pytest.mark.parametrize(
        "kind, has_before, has_after",
        [
            (ChangeKind.DELETE, True, True),
            (ChangeKind.DELETE, False, True),
            (ChangeKind.INSERT, True, True),
            (ChangeKind.INSERT, True, False),
            (ChangeKind.UPDATE, False, True),
            (ChangeKind.UPDATE, True, False),
            (ChangeKind.RESTORE, True, True),
            (ChangeKind.RESTORE, True, False),
        ],
    )
    def test_states_must_match_kind(self, kind, has_before, has_after):
        state = make_item("li-1", "A")
        change = LineItemChange(
            kind=kind,
            before=state if has_before else None,
            after=state if has_after else None,
        )

        with pytest.raises(InvalidChangeRecord, match=f"{kind.value} expects") as exc_info:
            ChangeSetResolver().resolve([LineItemChange.insert(make_item("li-0", "B")), change])

        assert exc_info.value.index == 1

    def test_kind_mismatch_rejected_before_any_order_is_reported(self):
        changes = [
            LineItemChange.insert(make_item("li-1", "A")),
            LineItemChange(kind=ChangeKind.DELETE, before=make_item("li-2", "B"), after=make_item("li-2", "C")),
        ]

        with pytest.raises(InvalidChangeRecord):
            resolve_affected_orders(changes)
