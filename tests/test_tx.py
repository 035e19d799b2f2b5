from dataclasses import dataclass, field

import pytest

from txguard import Ref, Transactional, Tx, transaction
from txguard.exceptions import TransactionClosedError


@dataclass
class Stack(Transactional):
    items: list[int] = field(default_factory=list)

    def add(self, item: int):
        self.items.append(item)

    def pop(self):
        self.items.pop()


class TestTx:
    """
    Implicit revert
    """

    def test_close_without_commit_revert_changes(self):
        values = [1]

        with transaction(values) as tx:
            tx.append(2)
            assert tx == [1, 2]

        assert values == [1]

    def test_close_without_commit_after_removals_revert_changes(self):
        values = [1, 2]

        with transaction(values) as tx:
            tx.pop()
            tx.pop()
            assert tx == []

        assert values == [1, 2]

    def test_close_with_exception_revert_changes(self):
        values = [1]

        with pytest.raises(ValueError):
            with transaction(values) as tx:
                tx.append(2)
                raise ValueError

        assert values == [1]

    def test_close_with_exception_after_commit_keep_changes(self):
        values = [1]

        with pytest.raises(ValueError):
            with transaction(values) as tx:
                tx.append(2)
                tx.commit()
                raise ValueError

        assert values == [1, 2]

    def test_borrowed_value_untouched_while_open(self):
        values = [1]

        with transaction(values) as tx:
            tx.append(2)
            assert values == [1]

        assert values == [1]

    """
    commit
    """

    def test_commit_then_close_keep_changes(self):
        values = [1]

        with transaction(values) as tx:
            tx.append(2)
            assert tx == [1, 2]
            tx.commit()
            assert tx == [1, 2]

        assert values == [1, 2]

    def test_commit_then_more_changes_then_close_keep_all_changes(self):
        values = [1]

        with transaction(values) as tx:
            tx.append(2)
            tx.commit()
            tx.append(3)

        assert values == [1, 2, 3]

    def test_commit_return_self(self):
        with transaction([1]) as tx:
            assert tx.commit() is tx

    def test_commit_twice_keep_latest_baseline(self):
        values = [1]

        with transaction(values) as tx:
            tx.append(2)
            tx.commit()
            tx.append(3)
            tx.commit()
            tx.append(4)
            tx.rollback()
            assert tx == [1, 2, 3]

        assert values == [1, 2, 3]

    def test_commit_keep_identity_of_borrowed_value(self):
        values = [1]
        alias = values

        with transaction(values) as tx:
            tx.append(2)
            tx.commit()

        assert alias == [1, 2]

    """
    rollback
    """

    def test_rollback_then_close_keep_initial_value(self):
        values = [1, 2]

        with transaction(values) as tx:
            tx.append(3)
            assert tx == [1, 2, 3]
            tx.rollback()
            assert tx == [1, 2]

        assert values == [1, 2]

    def test_rollback_after_commit_discard_later_changes_only(self):
        values = [1]

        with transaction(values) as tx:
            tx.append(2)
            tx.commit()
            tx.append(3)
            tx.rollback()
            assert tx == [1, 2]

    def test_rollback_right_after_commit_is_no_op(self):
        values = [1, 2]

        with transaction(values) as tx:
            tx.pop()
            tx.commit()
            tx.rollback()
            assert tx == [1]

    def test_rollback_after_commit_open_new_transaction(self):
        values = [1, 2]

        with transaction(values) as tx:
            tx.pop()
            tx.commit()
            assert tx == [1]
            tx.rollback()
            tx.pop()
            assert tx == []

        assert values == [1]

    def test_rollback_after_commit_then_commit_keep_changes(self):
        values = [1, 2]

        with transaction(values) as tx:
            tx.pop()
            tx.commit()
            tx.rollback()
            tx.pop()
            tx.commit()

        assert values == []

    def test_rollback_return_self(self):
        with transaction([1]) as tx:
            assert tx.rollback() is tx

    """
    State
    """

    def test_is_committed_follow_state_machine(self):
        with transaction([1]) as tx:
            assert tx.is_committed is False
            tx.append(2)
            assert tx.is_committed is False
            tx.commit()
            assert tx.is_committed is True
            tx.append(3)
            assert tx.is_committed is True
            tx.rollback()
            assert tx.is_committed is False
            tx.rollback()
            assert tx.is_committed is False

    def test_is_closed_with_context_manager(self):
        with transaction([1]) as tx:
            assert tx.is_closed is False

        assert tx.is_closed is True

    """
    close
    """

    def test_close_without_context_manager(self):
        values = [1]
        tx = Tx(values)
        tx.append(2)
        tx.commit()
        tx.close()

        assert values == [1, 2]

    def test_close_twice_write_back_once(self):
        values = [1]
        tx = Tx(values)
        tx.append(2)
        tx.close()
        values.append(3)
        tx.close()

        assert values == [1, 3]

    def test_close_when_garbage_collected_revert_changes(self):
        values = [1]
        tx = Tx(values)
        tx.append(2)
        del tx

        assert values == [1]

    def test_use_after_close_raise_transaction_closed_error(self):
        with transaction([1]) as tx:
            pass

        with pytest.raises(TransactionClosedError):
            tx.append(2)

        with pytest.raises(TransactionClosedError):
            tx.commit()

        with pytest.raises(TransactionClosedError):
            tx.rollback()

        with pytest.raises(TransactionClosedError):
            ~tx

    def test_attribute_lookup_after_close_use_default(self):
        with transaction([1]) as tx:
            pass

        assert not hasattr(tx, "append")
        assert getattr(tx, "append", None) is None
        assert tx.is_closed is True

        with pytest.raises(AttributeError):
            tx.append

    def test_enter_after_close_raise_transaction_closed_error(self):
        tx = Tx([1])
        tx.close()

        with pytest.raises(TransactionClosedError):
            with tx:
                pass

    def test_repr_after_close(self):
        tx = Tx([1], name="closed-tx")
        tx.close()

        assert repr(tx) == "<Tx `closed-tx` (closed)>"
        assert isinstance(tx, Tx)

    """
    copier
    """

    def test_copier_used_for_snapshots(self):
        calls = []

        def copier(value: list[int]) -> list[int]:
            calls.append(value)
            return list(value)

        with transaction([1], copier=copier) as tx:
            tx.append(2)
            tx.commit()
            tx.rollback()

        assert len(calls) == 3

    def test_default_copier_is_deep(self):
        values = [[1]]

        with transaction(values) as tx:
            tx[0].append(2)
            assert tx == [[1, 2]]

        assert values == [[1]]

    """
    Transactional
    """

    def test_transactional_with_stack_lifecycle(self):
        s = Stack()
        assert s.items == []
        s.add(1)
        assert s.items == [1]

        with s.tx() as tx:
            tx.add(2)
            assert tx.items == [1, 2]

        assert s.items == [1]

        with s.tx() as tx:
            tx.add(2)
            assert tx.items == [1, 2]
            tx.commit()
            assert tx.items == [1, 2]

        assert s.items == [1, 2]

        with s.tx() as tx:
            tx.add(3)
            assert tx.items == [1, 2, 3]
            tx.rollback()
            assert tx.items == [1, 2]

        assert s.items == [1, 2]

        with s.tx() as tx:
            tx.pop()
            tx.pop()
            assert tx.items == []

        assert s.items == [1, 2]

        with s.tx() as tx:
            tx.pop()
            tx.commit()
            assert tx.items == [1]
            tx.rollback()
            tx.pop()
            assert tx.items == []

        assert s.items == [1]

    def test_transactional_keep_identity(self):
        s = Stack([1])
        items = s.items

        with s.tx() as tx:
            tx.add(2)
            tx.commit()

        assert s.items == [1, 2]
        assert isinstance(s, Stack)
        assert items == [1]

    """
    Ref
    """

    def test_ref_with_immutable_value(self):
        counter = Ref(1)

        with transaction(counter) as tx:
            tx += 1
            assert tx == 2

        assert counter.value == 1

        with transaction(counter) as tx:
            tx += 1
            tx.commit()

        assert counter.value == 2

    def test_assign_return_previous_value(self):
        ref = Ref("a")

        with transaction(ref) as tx:
            previous = tx.assign("b")
            assert previous == "a"
            assert tx == "b"
            tx.commit()

        assert ref.value == "b"
