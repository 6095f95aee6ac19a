"""Tests for core data models."""

from datetime import date

import pytest  # type: ignore[import-not-found]

from flow_tracker.core.models import (
    SPACE_COLORS,
    AppSettings,
    AppState,
    RunningApp,
    TimeEntry,
    TrackingSpace,
    format_day,
)


class TestTrackingSpace:
    """Test TrackingSpace model."""

    def test_create_space_defaults(self) -> None:
        """Test creating a space with defaults."""
        space = TrackingSpace(name="Deep Work")

        assert space.name == "Deep Work"
        assert space.id
        assert space.apps == []
        assert space.is_active is False
        assert space.color == SPACE_COLORS[0]

    def test_ids_are_unique(self) -> None:
        """Test that each space gets its own id."""
        assert TrackingSpace(name="A").id != TrackingSpace(name="B").id

    @pytest.mark.parametrize(  # type: ignore[misc]
        "pattern,observed",
        [
            ("chrome", "Google Chrome"),
            ("Google Chrome Canary", "Google Chrome"),
            ("CODE", "code"),
            ("Terminal", "Terminal"),
        ],
    )
    def test_tracks_matches_either_direction(self, pattern: str, observed: str) -> None:
        """Test fuzzy matching in both directions, ignoring case."""
        space = TrackingSpace(name="S", apps=[pattern])
        assert space.tracks(observed)

    def test_tracks_rejects_unrelated_app(self) -> None:
        """Test that unrelated apps do not match."""
        space = TrackingSpace(name="S", apps=["chrome", "Code"])
        assert not space.tracks("Slack")

    def test_tracks_with_no_apps(self) -> None:
        """Test that a space without apps tracks nothing."""
        assert not TrackingSpace(name="S").tracks("Code")

    def test_to_dict_uses_camel_case(self) -> None:
        """Test serialization keys."""
        space = TrackingSpace(name="S", id="abc", apps=["Code"], is_active=True, color="#000000")
        assert space.to_dict() == {
            "id": "abc",
            "name": "S",
            "apps": ["Code"],
            "isActive": True,
            "color": "#000000",
        }

    def test_from_dict_fills_missing_fields(self) -> None:
        """Test deserialization of a minimal record."""
        space = TrackingSpace.from_dict({"id": "abc", "name": "S"})

        assert space.apps == []
        assert space.is_active is False
        assert space.color == SPACE_COLORS[0]


class TestTimeEntry:
    """Test TimeEntry model."""

    def test_key(self) -> None:
        """Test entry identity."""
        entry = TimeEntry(space_id="s", app_name="Code", date="2026-10-19", duration=5)
        assert entry.key == ("s", "Code", "2026-10-19")

    def test_round_trip(self) -> None:
        """Test serialization keys and round trip."""
        entry = TimeEntry(space_id="s", app_name="Code", date="2026-10-19", duration=5)
        data = entry.to_dict()

        assert data == {"spaceId": "s", "appName": "Code", "date": "2026-10-19", "duration": 5}
        assert TimeEntry.from_dict(data) == entry

    def test_negative_duration_is_clamped(self) -> None:
        """Test that a negative stored duration loads as zero."""
        entry = TimeEntry.from_dict(
            {"spaceId": "s", "appName": "Code", "date": "2026-10-19", "duration": -3}
        )
        assert entry.duration == 0


class TestAppState:
    """Test the application document."""

    def test_add_duration_creates_entry(self) -> None:
        """Test first addition creates the entry."""
        state = AppState()
        entry = state.add_duration("s", "Code", "2026-10-19", 3)

        assert entry.duration == 3
        assert state.entries == [entry]

    def test_add_duration_accumulates(self) -> None:
        """Test that additions to the same key accumulate in one entry."""
        state = AppState()
        state.add_duration("s", "Code", "2026-10-19", 3)
        state.add_duration("s", "Code", "2026-10-19", 2)

        assert len(state.entries) == 1
        assert state.entries[0].duration == 5

    def test_add_duration_separates_days_and_apps(self) -> None:
        """Test that each (space, app, day) has its own entry."""
        state = AppState()
        state.add_duration("s", "Code", "2026-10-18", 1)
        state.add_duration("s", "Code", "2026-10-19", 1)
        state.add_duration("s", "Terminal", "2026-10-19", 1)
        state.add_duration("t", "Code", "2026-10-19", 1)

        assert len(state.entries) == 4

    def test_add_duration_rejects_non_positive(self) -> None:
        """Test that zero or negative additions are refused."""
        with pytest.raises(ValueError):
            AppState().add_duration("s", "Code", "2026-10-19", 0)

    def test_active_space(self) -> None:
        """Test finding the active space."""
        active = TrackingSpace(name="B", is_active=True)
        state = AppState(spaces=[TrackingSpace(name="A"), active])

        assert state.active_space is active
        assert AppState().active_space is None

    def test_get_space(self) -> None:
        """Test lookup by id."""
        space = TrackingSpace(name="A")
        state = AppState(spaces=[space])

        assert state.get_space(space.id) is space
        assert state.get_space("missing") is None

    def test_round_trip(self) -> None:
        """Test document serialization."""
        state = AppState(
            spaces=[TrackingSpace(name="A", apps=["Code"])],
            entries=[TimeEntry(space_id="s", app_name="Code", date="2026-10-19", duration=1)],
            settings=AppSettings(enable_dnd=True, muted_apps=["Slack"]),
        )
        data = state.to_dict()

        assert data["settings"] == {"enableDND": True, "mutedApps": ["Slack"]}
        assert AppState.from_dict(data) == state

    def test_from_empty_dict(self) -> None:
        """Test that an empty document loads as defaults."""
        assert AppState.from_dict({}) == AppState()


class TestHelpers:
    """Test small helpers."""

    def test_format_day(self) -> None:
        assert format_day(date(2026, 1, 5)) == "2026-01-05"

    def test_running_app_to_dict(self) -> None:
        assert RunningApp("Code", 12).to_dict() == {"name": "Code", "processId": 12}
