"""Family registry: create, lookup, join, local/remote reconciliation."""

import re

import pytest

from conftest import run
from cleanquest.schemas.auth import SessionUser
from cleanquest.schemas.family import DAYS, DayAvailability, Strength
from cleanquest.services.family_service import FamilyNameRequired
from cleanquest.stores.local_store import FAMILIES_KEY
from cleanquest.utils.links import build_share_link, parse_join_code
from cleanquest.utils.security import generate_family_code


def test_generated_codes_are_six_uppercase_alphanumerics():
    for _ in range(200):
        assert re.fullmatch(r"[A-Z0-9]{6}", generate_family_code())


def test_create_then_lookup_returns_empty_family(device):
    family, link = run(device.families.create("Smiths"))

    assert re.fullmatch(r"[A-Z0-9]{6}", family.code)
    assert link == f"https://cleanquest.test?join={family.code}"

    found = run(device.families.lookup(family.code))
    assert found is not None
    assert found.members == []
    assert found.admin == ""
    assert found.name == "Smiths"


def test_create_publishes_to_remote_and_local(device, registry):
    family, _ = run(device.families.create("Smiths"))

    assert run(registry.read(f"families/{family.code}"))["id"] == family.id
    assert family.code in device.local.get_json(FAMILIES_KEY)


def test_create_succeeds_with_remote_down(device, registry):
    registry.online = False
    family, _ = run(device.families.create("Offline family"))

    registry.online = True
    assert run(registry.read(f"families/{family.code}")) is None
    registry.online = False
    assert run(device.families.lookup(family.code)) == family


def test_create_rejects_blank_name(device):
    with pytest.raises(FamilyNameRequired):
        run(device.families.create("   "))


def test_other_device_joins_with_lowercase_code(make_device):
    device_a = make_device("a")
    device_b = make_device("b")
    family, _ = run(device_a.families.create("Smiths"))

    joined = run(device_b.families.join(family.code.lower()))

    assert joined == family
    assert [f.code for f in device_b.families.local_families()] == [family.code]


def test_join_unknown_code_is_not_found(device):
    assert run(device.families.join("ZZZZZZ")) is None
    assert run(device.families.lookup("")) is None
    assert device.families.local_families() == []


def test_lookup_falls_back_to_local_directory(make_device, registry):
    device_a = make_device("a")
    device_b = make_device("b")
    family, _ = run(device_a.families.create("Smiths"))
    run(device_b.families.join(family.code))

    registry.online = False
    assert run(device_b.families.lookup(family.code)) == family


def test_lookup_falls_back_when_remote_times_out(make_device, registry):
    device = make_device("slow", remote_timeout_seconds=0.05)
    family, _ = run(device.families.create("Smiths"))

    registry.latency = 0.5
    assert run(device.families.lookup(family.code)) == family


def test_remote_only_family_unknown_while_offline(make_device, registry):
    device_a = make_device("a")
    device_b = make_device("b")
    family, _ = run(device_a.families.create("Smiths"))

    registry.online = False
    assert run(device_b.families.lookup(family.code)) is None


def test_remote_hit_refreshes_local_cache(make_device):
    device_a = make_device("a")
    device_b = make_device("b")
    family, _ = run(device_a.families.create("Smiths"))
    run(device_b.families.join(family.code))

    user = SessionUser(id="usr_a", username="alice", age=40)
    run(device_a.members.attach(family, user, [], []))

    # lookup alone (no join) updates device B's cached copy
    run(device_b.families.lookup(family.code))
    cached = device_b.families.local_lookup(family.code)
    assert [m.username for m in cached.members] == ["alice"]


def test_local_round_trip_keeps_nested_member_fields(device, registry):
    family, _ = run(device.families.create("Smiths"))
    user = SessionUser(id="usr_a", username="alice", age=41)
    availability = [
        DayAvailability(day="monday", hours=["18-24", "06-12"]),
        DayAvailability(day="sunday", hours=["12-18"]),
    ]
    strengths = [Strength(id="1", name="Cleaning", rating=5), Strength(id="2", name="Cooking")]
    saved = run(device.members.attach(family, user, availability, strengths))

    registry.online = False
    found = run(device.families.lookup(saved.code))

    assert found == saved
    assert found.members[0].availability[0].hours == ["06-12", "18-24"]
    assert found.members[0].availability[6].hours == ["12-18"]
    assert found.members[0].strengths[0].rating == 5
    assert found.created_at == saved.created_at


def test_malformed_remote_record_fails_closed(device, registry):
    run(registry.write("families/BAD123", {"id": "x", "name": "Broken", "members": "nope"}))
    assert run(device.families.lookup("bad123")) is None


def test_malformed_local_entry_is_skipped(device):
    family, _ = run(device.families.create("Smiths"))
    directory = device.local.get_json(FAMILIES_KEY)
    directory["JUNK00"] = {"code": "lowercase!"}
    device.local.set_json(FAMILIES_KEY, directory)

    assert [f.code for f in device.families.local_families()] == [family.code]
    assert device.families.local_lookup("JUNK00") is None


def test_legacy_record_is_readable(device, registry):
    run(registry.write("families/AB12CD", {
        "id": "1718000000000",
        "name": "Müller",
        "code": "AB12CD",
        "admin": "",
        "members": [],
        "createdAt": "2024-06-10T08:00:00.000Z",
    }))
    found = run(device.families.join("ab12cd"))
    assert found.name == "Müller"
    assert found.created_at.year == 2024


def test_legacy_member_with_german_day_names_is_readable(device, registry):
    german_days = ["Montag", "Dienstag", "Mittwoch", "Donnerstag", "Freitag", "Samstag", "Sonntag"]
    run(registry.write("families/AB12CD", {
        "id": "1718000000000",
        "name": "Müller",
        "code": "AB12CD",
        "admin": "1718000000001",
        "members": [{
            "id": "1718000000001",
            "username": "oma",
            "age": 70,
            "availability": [
                {"day": day, "hours": ["18-24", "06-12"] if day == "Montag" else []}
                for day in german_days
            ],
            "strengths": [
                {"id": "1", "name": "Putzen", "rating": 3},
                {"id": "2", "name": "Kochen", "rating": 5},
            ],
        }],
        "createdAt": "2024-06-10T08:00:00.000Z",
    }))

    found = run(device.families.join("ab12cd"))
    assert found is not None
    member = found.members[0]
    assert [a.day for a in member.availability] == list(DAYS)
    assert member.availability[0].hours == ["06-12", "18-24"]
    assert [s.rating for s in member.strengths] == [3, 5]
    assert found.admin == member.id


# --- Share links ---

def test_share_link_round_trip():
    link = build_share_link("AB12CD", "https://example.org/")
    assert link == "https://example.org?join=AB12CD"
    assert parse_join_code(link) == "AB12CD"


def test_parse_join_code_uppercases_and_ignores_missing():
    assert parse_join_code("https://example.org/?join=ab12cd&x=1") == "AB12CD"
    assert parse_join_code("?join=ab12cd") == "AB12CD"
    assert parse_join_code("https://example.org/") is None
    assert parse_join_code("https://example.org/?join=") is None


def test_resolve_launch_link(device):
    family, link = run(device.families.create("Smiths"))

    assert run(device.families.resolve_launch_link(link.lower())) == (family.code, family)
    assert run(device.families.resolve_launch_link("https://x.test?join=NOPE99")) == ("NOPE99", None)
    assert run(device.families.resolve_launch_link("https://x.test")) == (None, None)
