"""Tests for server-side listing queries."""

from listingproxy.models.listing import CacheSnapshot, Listing
from listingproxy.search import broker_search_text, query_listings
from listingproxy.views.builder import index_brokers


def ids(listings) -> list:
    return [l.id for l in listings]


class TestQueryListings:
    """Test search and type filtering."""

    def test_no_filters_returns_everything_in_order(self, snapshot: CacheSnapshot):
        assert ids(query_listings(snapshot)) == [101, 102, 103, 104]

    def test_type_and_search_combine(self, snapshot: CacheSnapshot):
        """Type 3 with "warehouse" excludes the retail pad and the flex building."""
        results = query_listings(snapshot, search="warehouse", type_id="3")
        assert ids(results) == [101]

    def test_search_alone_matches_any_type(self, snapshot: CacheSnapshot):
        assert ids(query_listings(snapshot, search="warehouse")) == [101, 104]

    def test_type_alone(self, snapshot: CacheSnapshot):
        assert ids(query_listings(snapshot, type_id="3")) == [101, 103]

    def test_search_is_case_insensitive_and_trimmed(self, snapshot: CacheSnapshot):
        assert ids(query_listings(snapshot, search="  STOCKTON ")) == [101]

    def test_blank_search_is_ignored(self, snapshot: CacheSnapshot):
        assert len(query_listings(snapshot, search="   ")) == 4

    def test_search_matches_zip(self, snapshot: CacheSnapshot):
        assert ids(query_listings(snapshot, search="94105")) == [102]

    def test_no_match(self, snapshot: CacheSnapshot):
        assert query_listings(snapshot, search="lighthouse") == []

    def test_unknown_type(self, snapshot: CacheSnapshot):
        assert query_listings(snapshot, type_id="42") == []

    def test_snapshot_not_modified(self, snapshot: CacheSnapshot):
        before = snapshot.model_copy()
        results = query_listings(snapshot, search="warehouse", type_id="3")
        results.clear()

        assert snapshot == before
        assert snapshot.count == 4

    def test_empty_snapshot(self):
        assert query_listings(CacheSnapshot.empty(), search="anything") == []


class TestBrokerSearch:
    """Test matching on broker names."""

    def test_matches_broker_name_with_index(self, snapshot: CacheSnapshot, raw_brokers):
        brokers = index_brokers(raw_brokers)
        assert ids(query_listings(snapshot, search="ortega", brokers=brokers)) == [101, 102]

    def test_matches_broker_email(self, snapshot: CacheSnapshot, raw_brokers):
        brokers = index_brokers(raw_brokers)
        assert ids(query_listings(snapshot, search="dana@", brokers=brokers)) == [101]

    def test_no_index_no_broker_match(self, snapshot: CacheSnapshot):
        assert query_listings(snapshot, search="ortega") == []

    def test_falls_back_to_broker_display_field(self):
        listing = Listing(id=1, brokerDisplay="Jamie Fox")
        snap = CacheSnapshot(listings=(listing,))

        assert broker_search_text(listing) == "Jamie Fox"
        assert ids(query_listings(snap, search="jamie")) == [1]

    def test_unresolved_broker_ids_ignored(self, raw_brokers, flex_listing):
        listing = Listing.model_validate(flex_listing)
        assert broker_search_text(listing, index_brokers(raw_brokers)) == ""
