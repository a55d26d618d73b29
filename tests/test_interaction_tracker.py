"""Tests for per-order interaction history and Previously Selected annotation."""

from order_support.conversation.interaction_tracker import PREVIOUSLY_SELECTED_SUFFIX


class TestRecord:
    def test_record_new_label(self, tracker):
        interactions: dict[str, list[str]] = {}
        assert tracker.record(interactions, "A", "Track") is True
        assert interactions == {"A": ["Track"]}

    def test_record_deduplicates(self, tracker):
        interactions: dict[str, list[str]] = {}
        tracker.record(interactions, "A", "Track")
        assert tracker.record(interactions, "A", "Track") is False
        assert interactions["A"] == ["Track"]

    def test_insertion_order_kept(self, tracker):
        interactions: dict[str, list[str]] = {}
        for label in ["Modify", "Track", "Modify", "Cancel"]:
            tracker.record(interactions, "B", label)
        assert interactions["B"] == ["Modify", "Track", "Cancel"]

    def test_scoped_per_order(self, tracker):
        interactions: dict[str, list[str]] = {}
        tracker.record(interactions, "A", "Track")
        tracker.record(interactions, "B", "Modify")
        assert interactions == {"A": ["Track"], "B": ["Modify"]}


class TestAnnotate:
    def test_used_option_annotated(self, tracker):
        result = tracker.annotate(["Track", "Modify"], ["Track"])
        assert result == ["Track" + PREVIOUSLY_SELECTED_SUFFIX, "Modify"]

    def test_unused_options_untouched(self, tracker):
        assert tracker.annotate(["Track", "Modify"], []) == ["Track", "Modify"]

    def test_annotation_never_removes_options(self, tracker):
        options = ["Track", "Modify", "Cancel", "Return"]
        result = tracker.annotate(options, options)
        assert len(result) == len(options)

    def test_exact_label_match_only(self, tracker):
        assert tracker.annotate(["Track"], ["track"]) == ["Track"]

    def test_idempotent(self, tracker):
        once = tracker.annotate(["Track", "Modify", "Return"], ["Track", "Return"])
        twice = tracker.annotate(once, ["Track", "Return"])
        assert once == twice
        assert once[0] == "Track (Previously Selected)"

    def test_already_annotated_label_not_suffixed_again(self, tracker):
        label = "Cancel (Previously Selected)"
        assert tracker.annotate([label], [label]) == [label]

    def test_exempt_labels_never_annotated(self, tracker):
        exempt = ["Order A", "Order B", "Order C", "Back to Order Operations", "Back to Order Selection"]
        assert tracker.annotate(exempt, exempt) == exempt

    def test_exempt_set_contents(self, tracker):
        assert "Order A" in tracker.exempt_labels
        assert "Back to Order Selection" in tracker.exempt_labels
        assert "Track" not in tracker.exempt_labels
