"""Tests for entity identity, snapshots and the PresenceAware wrapper."""

from types import SimpleNamespace

import pytest

from conftest import START, Member
from users_online.entities import PresenceAware, build_snapshot, resolve_identity
from users_online.exceptions import InvalidIdentity


class TestResolveIdentity:
    def test_pk_preferred_over_id(self):
        assert resolve_identity(SimpleNamespace(pk=5, id=9)) == "5"

    def test_id_fallback(self):
        assert resolve_identity(SimpleNamespace(id=9)) == "9"

    def test_mapping(self):
        assert resolve_identity({"id": "abc"}) == "abc"

    def test_custom_hook(self):
        class Device:
            def get_presence_id(self):
                return "device-7"

        assert resolve_identity(Device()) == "device-7"

    def test_zero_is_an_identifier(self):
        assert resolve_identity(SimpleNamespace(id=0)) == "0"

    @pytest.mark.parametrize(
        "entity",
        [None, SimpleNamespace(), SimpleNamespace(id=None), SimpleNamespace(id=""), SimpleNamespace(id="   "), {}, {"id": None}],
    )
    def test_invalid(self, entity):
        with pytest.raises(InvalidIdentity):
            resolve_identity(entity)

    def test_unsaved_model_instance(self):
        from django.contrib.auth.models import User

        with pytest.raises(InvalidIdentity) as excinfo:
            resolve_identity(User(username="ada"))
        assert excinfo.value.hint


class TestBuildSnapshot:
    def test_only_configured_fields(self):
        member = Member(1, "Ada", "ada@example.com")
        assert build_snapshot(member, ["id", "name"]) == {"id": 1, "name": "Ada"}

    def test_missing_fields_omitted(self):
        assert build_snapshot(SimpleNamespace(id=1), ["id", "name", "email"]) == {"id": 1}

    def test_field_order_follows_configuration(self):
        member = Member(1, "Ada", "ada@example.com")
        assert list(build_snapshot(member, ["email", "id"])) == ["email", "id"]

    def test_mapping_entity(self):
        entity = {"id": 1, "name": "Ada", "token": "secret"}
        assert build_snapshot(entity, ["id", "name"]) == {"id": 1, "name": "Ada"}

    def test_methods_not_called(self):
        entity = SimpleNamespace(id=1, name=lambda: "boom")
        assert build_snapshot(entity, ["id", "name"]) == {"id": 1}

    def test_none_values_kept(self):
        assert build_snapshot(SimpleNamespace(id=1, name=None), ["id", "name"]) == {"id": 1, "name": None}


class TestPresenceAware:
    def test_wraps_tracker_operations(self, tracker, clock):
        online = PresenceAware(Member(1, "Ada"), tracker)

        assert online.cache_key == "UserOnline-1"
        assert online.is_online() is False

        assert online.mark_online(60) is True
        assert online.is_online() is True
        assert online.last_seen_at() == int(START)
        assert online.snapshot().snapshot["name"] == "Ada"

        online.go_offline()
        assert online.is_online() is False

    def test_default_duration(self, tracker, clock):
        online = PresenceAware(Member(1), tracker)
        online.mark_online()
        clock.advance(300)
        assert online.is_online() is False

    def test_uses_process_tracker_by_default(self, tracker):
        from users_online.backends.registry import set_presence_tracker

        set_presence_tracker(tracker)
        assert PresenceAware(Member(1)).tracker is tracker
