# tests/test_config.py
from __future__ import annotations

import pytest

from primetree import runtime
from primetree.config import has_profile, list_all_profiles, load_settings
from primetree.runtime import APPLY, CFG
from primetree.utility import UserInputError, flatten_dotted, parse_number
from primetree.workspace import ensure_workspace_seeded, seed_workspace, workspace_dir


def _write_profile(name: str, text: str) -> None:
    pdir = workspace_dir() / "profiles"
    pdir.mkdir(parents=True, exist_ok=True)
    (pdir / f"{name}.toml").write_text(text, encoding="utf-8")


class TestWorkspace:

    def test_home_from_environment(self, tmp_path):
        assert workspace_dir() == (tmp_path / "home").resolve()

    def test_seeding_copies_packaged_profiles(self):
        root, seeded, copied = ensure_workspace_seeded()
        assert seeded
        assert copied["profiles"] >= 2
        assert (root / "profiles" / "default.toml").exists()
        assert list_all_profiles() == ["default", "trimmed"]

    def test_seeding_keeps_user_edits(self):
        _write_profile("default", "[TREE]\nTRIM = true\n")
        _, seeded, copied = ensure_workspace_seeded()
        assert copied["profiles"] == 1  # only trimmed.toml was missing
        assert load_settings("default").as_dict() == {"TREE": {"TRIM": True}}

    def test_overwrite(self):
        _write_profile("default", "[TREE]\nTRIM = true\n")
        seed_workspace(overwrite=True)
        assert load_settings("default").as_dict()["TREE"]["TRIM"] is False


class TestProfiles:

    def test_packaged_default(self):
        ensure_workspace_seeded()
        s = load_settings(None)
        assert s.name == "default"
        assert s.as_dict()["CACHE"] == {"PATH": "primes.cache", "BOUND": 1_000_000}
        assert "PROFILE" not in s.as_dict()

    def test_missing_profile(self):
        assert not has_profile("nope")
        with pytest.raises(FileNotFoundError):
            load_settings("nope")

    def test_description_fallback(self):
        _write_profile("bare", "[CACHE]\nBOUND = 10\n")
        s = load_settings("bare")
        assert s.name == "bare"
        assert s.description == "(no description)"

    def test_toml_syntax_error(self):
        _write_profile("broken", "[CACHE\nBOUND = 10\n")
        with pytest.raises(UserInputError, match="broken.toml"):
            load_settings("broken")

    @pytest.mark.parametrize("body", [
        "[CACHE]\nBOUND = -1\n",
        "[CACHE]\nBOUND = \"many\"\n",
        "[CACHE]\nBOUND = true\n",
        "[CACHE]\nPATH = 3\n",
        "[TREE]\nTRIM = \"yes\"\n",
        "[BEHAVIOUR]\nDEBUG = 1\n",
    ])
    def test_invalid_values(self, body):
        _write_profile("bad", body)
        with pytest.raises(UserInputError):
            load_settings("bad")


class TestRuntime:

    def test_dotted_lookup(self):
        APPLY({"CACHE": {"BOUND": 42}, "TREE": {"TRIM": True}})
        assert CFG("CACHE.BOUND") == 42
        assert CFG("TREE.TRIM") is True
        assert CFG("TREE") == {"TRIM": True}
        assert CFG("CACHE.PATH", "primes.cache") == "primes.cache"
        assert CFG("NOPE.KEY", 7) == 7
        assert CFG("", 1) == 1

    def test_profile_debug_flag(self):
        _write_profile("loud", "[BEHAVIOUR]\nDEBUG = true\n")
        APPLY(load_settings("loud"))
        assert runtime.current().debug is True
        assert runtime.current().profile_name == "loud"

    def test_reset(self):
        APPLY({"CACHE": {"BOUND": 1}})
        runtime.reset()
        assert CFG("CACHE.BOUND") is None


class TestParsing:

    @pytest.mark.parametrize("token, n", [("0", 0), ("42", 42), ("+7", 7), ("1_000_000", 1_000_000),
                                          (" 12 ", 12), ("18446744073709551615", 2**64 - 1)])
    def test_parse_number(self, token, n):
        assert parse_number(token) == n

    @pytest.mark.parametrize("token", ["", "x", "-1", "1e3", "1__0", "_1", "18446744073709551616"])
    def test_parse_number_rejects(self, token):
        with pytest.raises(UserInputError):
            parse_number(token)

    def test_flatten_dotted(self):
        assert flatten_dotted({"A": {"B": 1, "C": {"D": 2}}, "E": 3}) == {"A.B": 1, "A.C.D": 2, "E": 3}
