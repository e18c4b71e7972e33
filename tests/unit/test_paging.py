"""
Unit tests for ContinuationTokenPaging.

Covers token resolution (first page, direct hits, previous-response tokens,
closest-page fallback), response folding, total estimation and reset.
"""

import pytest

from gridpager import ContinuationTokenPaging, InvalidArgumentError


def walk(paging, page_size, pages):
    """Fetches pages sequentially: each entry is (record_count, next_token)."""
    previous = None
    for page, (count, next_token) in enumerate(pages):
        used = paging.resolve_request_token(page * page_size, page_size, previous)
        paging.apply_response(page_size, count, next_token, used)
        previous = next_token


class TestFirstPage:
    """Page 0 always starts from the beginning."""

    @pytest.mark.parametrize("page_size", [1, 7, 10, 250])
    def test_first_page_returns_none(self, paging, page_size):
        assert paging.resolve_request_token(0, page_size, "anything") is None
        assert paging.current_virtual_page == 0

    def test_offset_within_first_page_returns_none(self, paging):
        """Any offset below page_size is page 0."""
        assert paging.resolve_request_token(9, 10, "tokA") is None

    def test_first_page_ignores_stored_tokens(self, paging):
        paging.tokens.set(0, "stale")
        paging.tokens.set(1, "t1")
        assert paging.resolve_request_token(0, 10, None) is None


class TestResolveRequestToken:
    """Test the resolution order for pages after the first."""

    def test_forward_hit_via_previous_response(self, paging):
        paging.resolve_request_token(0, 10, None)
        paging.apply_response(10, 20, "tokA", None)

        assert paging.resolve_request_token(10, 10, "tokA") == "tokA"
        assert paging.current_virtual_page == 1

    def test_stored_token_wins_over_previous_token(self, paging):
        paging.tokens.set(2, "tokX")

        assert paging.resolve_request_token(20, 10, "tokY") == "tokX"
        assert paging.current_virtual_page == 2

    def test_previous_token_used_when_nothing_stored(self, paging):
        assert paging.resolve_request_token(50, 10, "tokY") == "tokY"

    def test_empty_previous_token_is_ignored(self, paging):
        paging.tokens.set(4, "t4")
        assert paging.resolve_request_token(30, 10, "") == "t4"

    def test_closest_page_by_distance(self, paging):
        paging.tokens.set(1, "t1")
        paging.tokens.set(4, "t4")

        assert paging.resolve_request_token(30, 10, None) == "t4"

    def test_closest_page_tie_prefers_smaller_index(self, paging):
        paging.tokens.set(1, "t1")
        paging.tokens.set(3, "t3")

        assert paging.resolve_request_token(20, 10, None) == "t1"

    def test_tie_break_does_not_depend_on_insertion_order(self, paging):
        paging.tokens.set(3, "t3")
        paging.tokens.set(1, "t1")

        assert paging.resolve_request_token(20, 10, None) == "t1"

    def test_closest_page_beyond_known_pages(self, paging):
        """Jumping far ahead uses the furthest known token."""
        paging.tokens.set(1, "t1")
        paging.tokens.set(2, "t2")

        assert paging.resolve_request_token(90, 10, None) == "t2"

    def test_visited_page_without_token_returns_none(self, paging):
        paging.tokens.set(2, "t2")
        paging.tokens.set(3, None)

        assert paging.resolve_request_token(30, 10, None) is None

    def test_empty_store_returns_none(self, paging):
        assert paging.resolve_request_token(50, 10, None) is None
        assert paging.current_virtual_page == 5

    def test_backward_jump_after_forward_walk(self, paging):
        """Walked 0..5 forward, then jump back to page 2: its token was recorded on the way."""
        walk(paging, 10, [(10, f"t{page + 1}") for page in range(6)])

        assert paging.resolve_request_token(20, 10, None) == "t2"

    def test_page_index_uses_floor_division(self, paging):
        paging.tokens.set(2, "t2")

        assert paging.resolve_request_token(29, 10, None) == "t2"
        assert paging.current_virtual_page == 2

    @pytest.mark.parametrize(
        "offset,page_size",
        [(-1, 10), (0, 0), (10, -5)],
    )
    def test_invalid_arguments(self, paging, offset, page_size):
        with pytest.raises(InvalidArgumentError):
            paging.resolve_request_token(offset, page_size, None)

    def test_invalid_arguments_leave_current_page(self, paging):
        paging.resolve_request_token(30, 10, None)

        with pytest.raises(InvalidArgumentError):
            paging.resolve_request_token(-10, 10, None)
        assert paging.current_virtual_page == 3


class TestBestTokenForPage:
    """Test the public fallback lookup."""

    def test_direct_token(self, paging):
        paging.tokens.set(3, "t3")
        assert paging.best_token_for_page(3, 10) == "t3"

    def test_closest_token(self, paging):
        paging.tokens.set(1, "t1")
        assert paging.best_token_for_page(6, 10) == "t1"

    def test_does_not_move_current_page(self, paging):
        paging.tokens.set(1, "t1")
        paging.best_token_for_page(6, 10)
        assert paging.current_virtual_page == 0

    def test_rejects_negative_page(self, paging):
        with pytest.raises(InvalidArgumentError, match="requested_page"):
            paging.best_token_for_page(-1, 10)

    def test_rejects_non_positive_page_size(self, paging):
        with pytest.raises(InvalidArgumentError, match="page_size"):
            paging.best_token_for_page(1, 0)


class TestApplyResponse:
    """Test folding responses into the tracker."""

    def test_records_count_and_next_token(self, paging):
        paging.resolve_request_token(0, 10, None)
        paging.apply_response(10, 10, "A")

        assert paging.counts.get(0) == 10
        assert paging.tokens.get(1) == "A"
        assert 0 not in paging.tokens
        assert paging.has_more_pages is True

    def test_records_token_used_for_current_page(self, paging):
        paging.resolve_request_token(20, 10, "B")
        paging.apply_response(10, 10, "C", "B")

        assert paging.tokens.get(2) == "B"
        assert paging.tokens.get(3) == "C"

    def test_latest_count_overwrites(self, paging):
        paging.resolve_request_token(0, 10, None)
        paging.apply_response(10, 10, "A")
        paging.apply_response(10, 7, "A")

        assert paging.counts.get(0) == 7

    def test_missing_next_token_ends_paging(self, paging):
        paging.resolve_request_token(0, 10, None)
        paging.apply_response(10, 4, None)

        assert paging.has_more_pages is False
        assert 1 not in paging.tokens

    def test_empty_next_token_ends_paging(self, paging):
        paging.resolve_request_token(0, 10, None)
        paging.apply_response(10, 4, "")

        assert paging.has_more_pages is False

    def test_has_more_recovers_when_token_reappears(self, paging):
        paging.resolve_request_token(0, 10, None)
        paging.apply_response(10, 10, None)
        paging.apply_response(10, 10, "A")

        assert paging.has_more_pages is True

    def test_negative_record_count_rejected_without_mutation(self, paging):
        paging.resolve_request_token(10, 10, "A")

        with pytest.raises(InvalidArgumentError, match="record_count"):
            paging.apply_response(10, -1, "B", "A")

        assert len(paging.counts) == 0
        assert len(paging.tokens) == 0
        assert paging.has_more_pages is True

    def test_non_positive_page_size_rejected(self, paging):
        with pytest.raises(InvalidArgumentError):
            paging.apply_response(0, 5, None)

    def test_invalid_argument_is_value_error(self, paging):
        with pytest.raises(ValueError):
            paging.apply_response(10, -3, None)


class TestEstimateTotal:
    """Test the total-record estimate exposed to the host."""

    def test_nothing_known(self, paging):
        assert paging.estimate_total(10) == 0

    def test_end_to_end_scenario(self, paging):
        page_size = 10

        assert paging.resolve_request_token(0, page_size, None) is None
        paging.apply_response(page_size, 10, "A", None)
        assert paging.estimate_total(page_size) >= 20

        assert paging.resolve_request_token(10, page_size, "A") == "A"
        paging.apply_response(page_size, 10, "B", "A")
        assert paging.estimate_total(page_size) >= 30

        assert paging.resolve_request_token(20, page_size, "B") == "B"
        paging.apply_response(page_size, 5, None, "B")
        assert paging.has_more_pages is False
        assert paging.estimate_total(page_size) == 25

    def test_monotonic_while_more_pages(self, paging):
        estimates = []
        previous = None
        for page in range(6):
            used = paging.resolve_request_token(page * 10, 10, previous)
            previous = f"t{page + 1}"
            paging.apply_response(10, 10 if page % 2 else 3, previous, used)
            estimates.append(paging.estimate_total(10))

        # Going back and re-fetching a page that now returns fewer records
        used = paging.resolve_request_token(10, 10, None)
        paging.apply_response(10, 1, "t2", used)
        estimates.append(paging.estimate_total(10))

        assert estimates == sorted(estimates)

    def test_exact_at_end(self, paging):
        walk(paging, 10, [(10, "A"), (10, "B"), (10, "C"), (3, None)])

        assert paging.estimate_total(10) == 33
        assert paging.estimated_total_records == 33

    def test_estimate_never_undershoots_proven_pages(self, paging):
        walk(paging, 10, [(2, "A"), (2, "B")])

        # Pages 0 and 1 exist and page 2 is known to exist
        assert paging.estimate_total(10) == 30

    def test_explicit_total_wins(self, paging):
        walk(paging, 10, [(10, "A"), (5, None)])
        paging.explicit_total = 400

        assert paging.estimate_total(10) == 400

    def test_zero_explicit_total_is_ignored(self, paging):
        walk(paging, 10, [(10, "A"), (5, None)])
        paging.explicit_total = 0

        assert paging.estimate_total(10) == 15

    def test_negative_explicit_total_rejected(self, paging):
        with pytest.raises(InvalidArgumentError):
            paging.explicit_total = -1


class TestLastKnownPage:
    """Once the end of the data is seen, the total stays exact while navigating back."""

    def test_unknown_until_a_page_ends_paging(self, paging):
        walk(paging, 10, [(10, "A"), (10, "B")])
        assert paging.last_known_page is None

    def test_recorded_when_paging_ends(self, paging):
        walk(paging, 10, [(10, "A"), (10, "B"), (5, None)])
        assert paging.last_known_page == 2

    def test_total_stays_exact_after_going_back(self, paging):
        walk(paging, 10, [(10, "A"), (10, "B"), (5, None)])

        used = paging.resolve_request_token(10, 10, None)
        paging.apply_response(10, 10, "B", used)

        assert paging.has_more_pages is True
        assert paging.last_known_page == 2
        assert paging.estimate_total(10) == 25
        assert paging.estimated_total_records == 25

    def test_refetched_page_updates_exact_total(self, paging):
        walk(paging, 10, [(10, "A"), (10, "B"), (5, None)])

        # A row was deleted from page 0 since it was first fetched
        paging.resolve_request_token(0, 10, None)
        paging.apply_response(10, 9, "A")

        assert paging.estimate_total(10) == 24

    def test_cleared_when_last_page_grows_a_successor(self, paging):
        walk(paging, 10, [(10, "A"), (10, None)])
        assert paging.last_known_page == 1

        used = paging.resolve_request_token(10, 10, None)
        paging.apply_response(10, 10, "B", used)

        assert paging.last_known_page is None
        assert paging.estimate_total(10) == 30

    def test_cleared_by_reset(self, paging):
        walk(paging, 10, [(10, "A"), (5, None)])

        paging.reset()

        assert paging.last_known_page is None


class TestVirtualStart:
    def test_virtual_start_follows_current_page(self, paging):
        paging.resolve_request_token(45, 15, None)
        assert paging.virtual_start(15) == 45

    def test_virtual_start_rejects_bad_page_size(self, paging):
        with pytest.raises(InvalidArgumentError):
            paging.virtual_start(0)


class TestReset:
    """reset() returns the tracker to its initial state."""

    def test_reset_clears_everything(self, paging):
        walk(paging, 10, [(10, "A"), (10, "B"), (5, None)])
        paging.explicit_total = 99

        paging.reset()

        assert paging.current_virtual_page == 0
        assert paging.has_more_pages is True
        assert paging.estimated_total_records == 0
        assert paging.explicit_total == 0
        assert len(paging.tokens) == 0
        assert len(paging.counts) == 0
        assert paging.estimate_total(10) == 0

    def test_reset_behaves_like_fresh_tracker(self, paging):
        walk(paging, 10, [(10, "A"), (10, "B"), (5, None)])
        paging.reset()
        fresh = ContinuationTokenPaging()

        def scenario(tracker):
            results = [tracker.resolve_request_token(30, 10, None)]
            tracker.apply_response(10, 10, "X")
            results.append(tracker.resolve_request_token(40, 10, None))
            tracker.apply_response(10, 8, None, "X")
            results.append(tracker.resolve_request_token(20, 10, None))
            results.append(tracker.estimate_total(10))
            results.append(tracker.has_more_pages)
            results.append(tracker.current_virtual_page)
            return results

        assert scenario(paging) == scenario(fresh)

    def test_reset_is_idempotent(self, paging):
        paging.reset()
        paging.reset()
        assert repr(paging) == repr(ContinuationTokenPaging())
