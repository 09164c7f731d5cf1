"""Tests for Episode, Pod and the episode sort policy."""

import dataclasses
from datetime import UTC, datetime, timedelta

import pytest

from podboard.pods.models import MAX_EPISODES, Episode, Pod, sort_episodes


def jan(day: int) -> datetime:
    return datetime(2024, 1, day, 12, 0, tzinfo=UTC)


class TestEpisode:
    """Tests for the Episode dataclass."""

    def test_defaults(self):
        """Test optional fields default to empty."""
        episode = Episode(title="Ep 1", url="https://example.com/1.mp3")
        assert episode.subtitle == ""
        assert episode.published is None

    def test_is_immutable(self):
        """Test episodes can't be mutated after creation."""
        episode = Episode(title="Ep 1", url="https://example.com/1.mp3")
        with pytest.raises(dataclasses.FrozenInstanceError):
            episode.title = "changed"


class TestSortEpisodes:
    """Tests for the most-recent-first sort policy."""

    def test_sorts_by_date_descending(self, make_episode):
        """Test dated episodes are ordered newest first."""
        episodes = [make_episode(f"Ep {d}", published=jan(d)) for d in (3, 1, 5, 2)]

        result = sort_episodes(episodes)

        assert [ep.published.day for ep in result] == [5, 3, 2, 1]

    def test_undated_episodes_sort_by_title_descending(self, make_episode):
        """Test episodes without dates fall back to descending title."""
        episodes = [make_episode(t) for t in ("Bravo", "Alpha", "Charlie")]

        result = sort_episodes(episodes)

        assert [ep.title for ep in result] == ["Charlie", "Bravo", "Alpha"]

    def test_dated_before_undated(self, make_episode):
        """Test episodes with a date come before episodes without one."""
        undated = make_episode("Zulu")
        dated = make_episode("Alpha", published=jan(1))

        result = sort_episodes([undated, dated])

        assert result == [dated, undated]

    def test_date_ties_broken_by_title(self, make_episode):
        """Test equal dates are ordered by descending title."""
        a = make_episode("A", published=jan(2))
        b = make_episode("B", published=jan(2))

        assert sort_episodes([a, b]) == [b, a]

    def test_order_is_total(self, make_episode):
        """Test identical titles and dates are ordered by URL."""
        first = make_episode("Same", url="https://example.com/a.mp3")
        second = make_episode("Same", url="https://example.com/b.mp3")

        assert sort_episodes([first, second]) == sort_episodes([second, first])
        assert sort_episodes([first, second])[0] == second

    def test_naive_dates_compare_as_utc(self, make_episode):
        """Test naive datetimes don't break comparison with aware ones."""
        naive = make_episode("Naive", published=datetime(2024, 1, 3))
        aware = make_episode("Aware", published=jan(2))

        assert sort_episodes([aware, naive]) == [naive, aware]

    def test_empty(self):
        """Test sorting nothing returns an empty list."""
        assert sort_episodes([]) == []


class TestPod:
    """Tests for Pod state and refresh."""

    def test_initial_state(self, static_parser):
        """Test a new pod has no episodes and a current timestamp."""
        before = datetime.now(UTC)
        pod = Pod("Kodsnack", static_parser())

        assert pod.episodes == ()
        assert pod.last_update >= before

    def test_empty_name_rejected(self, static_parser):
        """Test a pod needs a name."""
        with pytest.raises(ValueError):
            Pod("", static_parser())

    def test_refresh_sorts_and_stores(self, static_parser, make_episode):
        """Test refresh stores parser output most recent first."""
        episodes = [make_episode(f"Ep {d}", published=jan(d)) for d in (1, 3, 2)]
        pod = Pod("Go Time", static_parser(episodes))

        state = pod.refresh()

        assert [ep.title for ep in pod.episodes] == ["Ep 3", "Ep 2", "Ep 1"]
        assert state is pod.state

    def test_refresh_caps_episode_count(self, static_parser, make_episode):
        """Test no more than MAX_EPISODES are kept."""
        episodes = [make_episode(f"Ep {i:02d}") for i in range(MAX_EPISODES + 5)]
        pod = Pod("Big", static_parser(episodes))

        pod.refresh()

        assert len(pod.episodes) == MAX_EPISODES

    def test_refresh_updates_timestamp(self, static_parser):
        """Test every refresh records a new timestamp."""
        pod = Pod("Pod", static_parser())
        first = pod.last_update

        pod.refresh()

        assert pod.last_update >= first
        assert datetime.now(UTC) - pod.last_update < timedelta(seconds=5)

    def test_refresh_replaces_previous_episodes(self, static_parser, make_episode):
        """Test refresh discards the old list rather than merging."""
        parser = static_parser([make_episode("Old")])
        pod = Pod("Pod", parser)
        pod.refresh()

        parser._episodes = [make_episode("New")]
        pod.refresh()

        assert [ep.title for ep in pod.episodes] == ["New"]

    def test_refresh_never_raises(self, static_parser, make_episode, caplog):
        """Test a parser exception leaves the pod empty with a new timestamp."""
        parser = static_parser([make_episode("Old")])
        pod = Pod("Broken", parser)
        pod.refresh()
        old_update = pod.last_update

        parser._error = RuntimeError("boom")
        pod.refresh()

        assert pod.episodes == ()
        assert pod.last_update >= old_update
        assert "Parser for 'Broken' failed" in caplog.text

    def test_refresh_is_idempotent(self, static_parser, make_episode):
        """Test refreshing twice with unchanged upstream gives the same list."""
        episodes = [
            make_episode("B", published=jan(4)),
            make_episode("A"),
            make_episode("C", published=jan(4)),
            make_episode("D", published=jan(9)),
        ]
        pod = Pod("Pod", static_parser(episodes))

        pod.refresh()
        first = pod.episodes
        pod.refresh()

        assert pod.episodes == first
