"""Tests for the RemoteListing working set."""

import threading

from swiftly.sync.state import RemoteListing


class TestRemoteListing:
    """Tests for RemoteListing."""

    def test_discard_present_name(self):
        listing = RemoteListing({"a.txt", "b.txt"})
        assert listing.discard("a.txt") is True
        assert "a.txt" not in listing
        assert len(listing) == 1

    def test_discard_absent_name(self):
        """Test that discarding an unknown name is a no-op."""
        listing = RemoteListing({"a.txt"})
        assert listing.discard("missing.txt") is False
        assert len(listing) == 1

    def test_stale_is_sorted(self):
        listing = RemoteListing(["z", "a", "m/b"])
        assert listing.stale() == ["a", "m/b", "z"]
        assert list(listing) == ["a", "m/b", "z"]

    def test_empty_listing(self):
        listing = RemoteListing()
        assert len(listing) == 0
        assert listing.stale() == []

    def test_concurrent_discard(self):
        """Test that concurrent removals never lose or double count a name."""
        names = [f"obj-{i}" for i in range(2000)]
        listing = RemoteListing(names)
        hits = []
        hits_lock = threading.Lock()

        def remove(chunk):
            found = sum(1 for name in chunk if listing.discard(name))
            with hits_lock:
                hits.append(found)

        # Every name is removed by two threads; only one may succeed
        threads = [
            threading.Thread(target=remove, args=(names[i::4],)) for i in range(4)
        ] + [threading.Thread(target=remove, args=(names[i::4],)) for i in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sum(hits) == len(names)
        assert len(listing) == 0
