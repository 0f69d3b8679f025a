"""
Tests for the in-process route cache.
"""

import pytest

from invoice_dashboard.utils.route_cache import RouteCache


class TestRouteCache:

    def test_get_returns_cached_variant(self):
        cache = RouteCache()
        cache.set("/dashboard/invoices", ("user-1", "", 1), "page one")

        assert cache.get("/dashboard/invoices", ("user-1", "", 1)) == "page one"
        assert cache.get("/dashboard/invoices", ("user-1", "", 2)) is None

    def test_revalidate_drops_every_variant_of_the_path(self):
        cache = RouteCache()
        cache.set("/dashboard/invoices", ("user-1", "", 1), "a")
        cache.set("/dashboard/invoices", ("user-2", "lee", 3), "b")
        cache.set("/dashboard/customers", ("user-1",), "c")

        evicted = cache.revalidate_path("/dashboard/invoices")

        assert evicted == 2
        assert cache.get("/dashboard/invoices", ("user-1", "", 1)) is None
        assert cache.get("/dashboard/invoices", ("user-2", "lee", 3)) is None
        assert cache.get("/dashboard/customers", ("user-1",)) == "c"

    def test_paths_are_normalized(self):
        cache = RouteCache()
        cache.set("/dashboard/invoices/", "k", "value")

        assert cache.get("/dashboard/invoices?page=2", "k") == "value"
        assert cache.revalidate_path("/dashboard/invoices") == 1

    def test_revalidating_unknown_path_is_a_no_op(self):
        assert RouteCache().revalidate_path("/nowhere") == 0

    def test_full_path_drops_least_recently_used_variant(self):
        cache = RouteCache(max_entries=2)
        cache.set("/dashboard/invoices", ("user-1", "", 1), "a")
        cache.set("/dashboard/invoices", ("user-1", "", 2), "b")
        # Reading page 1 makes page 2 the oldest
        assert cache.get("/dashboard/invoices", ("user-1", "", 1)) == "a"

        cache.set("/dashboard/invoices", ("user-1", "", 3), "c")

        assert cache.get("/dashboard/invoices", ("user-1", "", 2)) is None
        assert cache.get("/dashboard/invoices", ("user-1", "", 1)) == "a"
        assert cache.get("/dashboard/invoices", ("user-1", "", 3)) == "c"

    def test_many_distinct_queries_stay_bounded(self):
        cache = RouteCache(max_entries=5)
        for i in range(100):
            cache.set("/dashboard/invoices", ("user-1", f"q{i}", 1), i)

        assert cache.revalidate_path("/dashboard/invoices") == 5

    def test_max_entries_must_be_positive(self):
        with pytest.raises(ValueError):
            RouteCache(max_entries=0)
