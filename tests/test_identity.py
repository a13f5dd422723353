import pytest

from ffa.compute.identity import DEFAULT_ROSTER, Roster
from ffa.errors import UnknownManagerError


def test_alias_and_roster_hits_are_case_and_space_insensitive():
    assert DEFAULT_ROSTER.canonicalize("  matthew ") == "MATT"
    assert DEFAULT_ROSTER.canonicalize("Patrick") == "PATRICK"


def test_first_token_fallback_checks_aliases_then_roster():
    assert DEFAULT_ROSTER.canonicalize("Patrick Smith") == "PATRICK"
    assert DEFAULT_ROSTER.canonicalize("Matthew Jones") == "MATT"
    assert DEFAULT_ROSTER.canonicalize("henri-2") == "HENRI"


def test_unknown_names_resolve_to_none():
    assert DEFAULT_ROSTER.canonicalize("Zed") is None
    assert DEFAULT_ROSTER.canonicalize("") is None
    assert DEFAULT_ROSTER.canonicalize(None) is None
    assert DEFAULT_ROSTER.canonicalize("123") is None


def test_require_raises_client_error():
    with pytest.raises(UnknownManagerError) as exc:
        DEFAULT_ROSTER.require("nobody")
    assert isinstance(exc.value, ValueError)
    assert exc.value.raw == "nobody"
    assert DEFAULT_ROSTER.require("matthew") == "MATT"


def test_variants_list_identity_first():
    assert DEFAULT_ROSTER.variants_of("matt") == ["MATT", "MATTHEW"]
    assert DEFAULT_ROSTER.variants_of("IAN") == ["IAN"]


def test_by_index_follows_roster_order():
    assert DEFAULT_ROSTER.by_index(0) == "PATRICK"
    assert DEFAULT_ROSTER.by_index(9) == "BENJI"
    assert DEFAULT_ROSTER.by_index(10) is None
    assert DEFAULT_ROSTER.by_index(-1) is None


def test_roster_validation():
    with pytest.raises(ValueError):
        Roster(("ANNA", "anna"))
    with pytest.raises(ValueError):
        Roster(("ANNA",), {"ANNIE": "BEN"})
    r = Roster(("anna", "ben"), {"annie": "Anna"})
    assert r.managers == ("ANNA", "BEN")
    assert "ben" in r and len(r) == 2
    assert r.canonicalize("Annie") == "ANNA"
