from datetime import datetime, timezone

import pytest

from authbridge.clients.http import HttpProfile
from authbridge.clients.oauth import TwitterProfile
from authbridge.core.converters import (
    AttributesDefinition,
    Color,
    DateConverter,
    Gender,
    GenderConverter,
    Locale,
    convert_boolean,
    convert_color,
    convert_integer,
    convert_locale,
)
from authbridge.core.profile import (
    CommonProfile,
    OAuthProfile,
    UserProfile,
    build_profile,
    is_typed_id_of,
    profile_from_session,
)


class TestConverters:
    @pytest.mark.parametrize(
        "raw, expected",
        [(True, True), ("true", True), ("0", False), (1, True), ("maybe", None), (None, None)],
    )
    def test_boolean(self, raw, expected):
        assert convert_boolean(raw) is expected

    def test_integer(self):
        assert convert_integer("42") == 42
        assert convert_integer(True) is None
        assert convert_integer("4x") is None

    def test_locale(self):
        assert convert_locale("fr_FR") == Locale("fr", "FR")
        assert convert_locale("en-us") == Locale("en", "US")
        assert convert_locale("de") == Locale("de")
        assert str(Locale("fr", "FR")) == "fr_FR"
        assert convert_locale("not a locale") is None

    def test_color(self):
        assert convert_color("C0DEED") == Color(0xC0, 0xDE, 0xED)
        assert convert_color("#333333") == Color(0x33, 0x33, 0x33)
        assert str(Color(1, 2, 255)) == "0102FF"
        assert convert_color("xyz") is None

    def test_date_with_format(self):
        converter = DateConverter("%a %b %d %H:%M:%S %z %Y")
        value = converter("Fri Feb 10 11:10:24 +0000 2012")
        assert value == datetime(2012, 2, 10, 11, 10, 24, tzinfo=timezone.utc)

    def test_date_falls_back_to_iso(self):
        value = DateConverter("%d/%m/%Y")("2012-02-10T11:10:24Z")
        assert value == datetime(2012, 2, 10, 11, 10, 24, tzinfo=timezone.utc)
        assert DateConverter()("yesterday") is None

    def test_gender(self):
        converter = GenderConverter("m", "f")
        assert converter("M") is Gender.MALE
        assert converter("f") is Gender.FEMALE
        assert converter("other") is Gender.UNSPECIFIED

    def test_unknown_attribute_passes_through(self):
        definition = AttributesDefinition(count=convert_integer)
        assert definition.convert("count", "3") == 3
        assert definition.convert("other", "3") == "3"


class TestUserProfile:
    def test_typed_id(self):
        profile = HttpProfile(id="alice")
        assert profile.typed_id == "HttpProfile#alice"
        assert is_typed_id_of(profile.typed_id, HttpProfile)
        assert not is_typed_id_of(profile.typed_id, TwitterProfile)

    def test_set_id_strips_type_prefix(self):
        profile = HttpProfile()
        profile.set_id("HttpProfile#bob")
        assert profile.id == "bob"

    def test_set_id_accepts_numbers(self):
        profile = UserProfile(id=12345)
        assert profile.id == "12345"

    def test_attributes_are_read_only(self):
        profile = CommonProfile(id="1", attributes={"email": "a@example.org"})
        with pytest.raises(TypeError):
            profile.attributes["email"] = "b@example.org"
        assert profile.email == "a@example.org"

    def test_none_values_are_skipped(self):
        profile = CommonProfile(id="1")
        profile.add_attribute("email", None)
        assert "email" not in profile.attributes

    def test_gender_defaults_to_unspecified(self):
        assert CommonProfile(id="1").gender is Gender.UNSPECIFIED

    def test_roles_and_permissions_are_unique(self):
        profile = UserProfile(id="1")
        profile.add_role("admin")
        profile.add_role("admin")
        profile.add_permission("read")
        assert profile.roles == ["admin"]
        assert profile.permissions == ["read"]

    def test_access_token_not_in_repr(self):
        profile = OAuthProfile(id="1")
        profile.access_token = "secret-token"
        assert profile.access_token == "secret-token"
        assert "secret-token" not in repr(profile)


class TestBuildProfile:
    def test_rebuilds_registered_class(self):
        profile = build_profile("TwitterProfile#42", {"screen_name": "jack", "lang": "en"})
        assert isinstance(profile, TwitterProfile)
        assert profile.id == "42"
        assert profile.username == "jack"
        assert profile.locale == Locale("en")

    @pytest.mark.parametrize("typed_id", ["", "no-separator", "UnknownProfile#1"])
    def test_returns_none_for_unusable_ids(self, typed_id):
        assert build_profile(typed_id, {}) is None

    def test_session_round_trip_keeps_typed_values(self):
        profile = TwitterProfile(id="42")
        profile.add_attributes({
            "created_at": "Fri Feb 10 11:10:24 +0000 2012",
            "profile_link_color": "0084B4",
            "verified": "true",
        })
        profile.add_role("reader")
        profile.remembered = True

        restored = profile_from_session(profile.to_session())

        assert restored == profile
        assert restored.get_attribute("profile_link_color") == Color(0x00, 0x84, 0xB4)
        assert restored.get_attribute("created_at") == profile.get_attribute("created_at")
        assert restored.roles == ["reader"]
        assert restored.remembered is True

    def test_empty_session_data(self):
        assert profile_from_session(None) is None
        assert profile_from_session({}) is None
