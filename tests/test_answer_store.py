"""
Tests for the answer store and the multi-select "all" rule.
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from incorpify.schemas.answers import AnswerStore


class TestSingleSelect:

    def test_set_and_overwrite(self):
        store = AnswerStore()
        store.set_single("physical_office", "yes")
        store.set_single("physical_office", "no")
        assert store.get("physical_office") == "no"
        assert len(store) == 1

    def test_missing_answer(self):
        store = AnswerStore()
        assert store.get("physical_office") is None
        assert "physical_office" not in store
        assert store.selection("additional_services") == []


class TestMultiSelectToggle:

    def test_toggle_adds_in_order(self):
        store = AnswerStore()
        store.toggle("additional_services", "insurance")
        store.toggle("additional_services", "bank_account")
        assert store.get("additional_services") == ["insurance", "bank_account"]

    def test_toggle_twice_restores_previous_selection(self):
        store = AnswerStore()
        store.toggle("additional_services", "insurance")
        before = store.to_dict()
        store.toggle("additional_services", "medical")
        store.toggle("additional_services", "medical")
        assert store.to_dict() == before

    def test_toggle_twice_from_empty_removes_entry(self):
        store = AnswerStore()
        store.toggle("additional_services", "medical")
        store.toggle("additional_services", "medical")
        assert "additional_services" not in store

    def test_removing_one_keeps_others(self):
        store = AnswerStore()
        store.toggle("additional_services", "insurance")
        store.toggle("additional_services", "medical")
        store.toggle("additional_services", "insurance")
        assert store.get("additional_services") == ["medical"]

    def test_all_replaces_selection(self):
        store = AnswerStore()
        store.toggle("additional_services", "bank_account")
        result = store.toggle("additional_services", "all")
        assert result == ["all"]
        assert store.get("additional_services") == ["all"]

    def test_other_option_clears_all(self):
        store = AnswerStore()
        store.toggle("additional_services", "all")
        result = store.toggle("additional_services", "medical")
        assert result == ["medical"]

    def test_all_selected_twice_stays_all(self):
        store = AnswerStore()
        store.toggle("additional_services", "all")
        result = store.toggle("additional_services", "all")
        assert result == ["all"]
        assert store.get("additional_services") == ["all"]

    def test_all_after_other_option_then_all_again(self):
        store = AnswerStore()
        store.toggle("additional_services", "insurance")
        store.toggle("additional_services", "all")
        assert store.toggle("additional_services", "all") == ["all"]

    def test_all_invariant_over_toggle_sequence(self):
        store = AnswerStore()
        sequence = ["bank_account", "all", "insurance", "medical", "all", "all",
                    "visa_residency", "all", "bank_account", "insurance"]
        for option_id in sequence:
            selection = store.toggle("additional_services", option_id)
            assert selection == ["all"] or "all" not in selection
            assert len(selection) == len(set(selection))

    def test_without_sentinel_all_is_an_ordinary_option(self):
        store = AnswerStore()
        store.toggle("extras", "a", sentinel=False)
        store.toggle("extras", "all", sentinel=False)
        assert store.get("extras") == ["a", "all"]

    def test_to_dict_returns_copies(self):
        store = AnswerStore()
        store.toggle("additional_services", "medical")
        data = store.to_dict()
        data["additional_services"].append("insurance")
        assert store.get("additional_services") == ["medical"]
