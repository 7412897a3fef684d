"""Tests for the plain-data entry points."""

import pytest

from subnetlab import api


class TestCalculateClassful:
    """Tests for api.calculate_classful."""

    def test_success(self):
        """Test table and summary for a class C split."""
        data = api.calculate_classful("192.168.1.0", "subnets", 2, legacy_reserved_subnets=True)
        assert len(data["networks"]) == 4
        assert data["networks"][1]["subnet"] == "192.168.1.64/26"
        assert data["networks"][0]["status"] == "zero-subnet"
        assert data["summary"]["usable_subnets"] == 2
        assert data["truncated"] is False

    def test_limit(self):
        """Test that long tables are truncated."""
        data = api.calculate_classful("172.16.0.0", "hosts", 2, limit=10)
        assert len(data["networks"]) == 10
        assert data["truncated"] is True

    def test_error(self):
        """Test that a host address returns an error dictionary."""
        data = api.calculate_classful("192.168.1.5", "subnets", 2)
        assert data["error"]["code"] == "not_network_address"
        assert data["error"]["corrected_network"] == "192.168.1.0"

    @pytest.mark.parametrize("kind,value", [("networks", 2), ("subnets", 0)])
    def test_bad_requirement(self, kind, value):
        """Test that bad requirement kinds and values are reported."""
        data = api.calculate_classful("192.168.1.0", kind, value)
        assert data["error"]["code"] == "invalid_format"


class TestCalculateVlsm:
    """Tests for api.calculate_vlsm."""

    def test_success(self):
        """Test dictionary requirements."""
        data = api.calculate_vlsm("192.168.1.0/24", [
            {"name": "Sales", "hosts": 50},
            {"name": "Engineering", "hosts": 100},
        ])
        assert [row["name"] for row in data["networks"]] == ["Engineering", "Sales"]
        assert data["networks"][0]["subnet"] == "192.168.1.0/25"
        assert data["summary"]["total_allocated"] == 192

    def test_default_names(self):
        """Test that unnamed requirements are numbered."""
        data = api.calculate_vlsm("10.0.0.0/24", [{"hosts": 10}, {"hosts": 20}])
        assert {row["name"] for row in data["networks"]} == {"Subnet 1", "Subnet 2"}

    def test_error(self):
        """Test a malformed base network."""
        data = api.calculate_vlsm("10.0.0.0/40", [{"hosts": 10}])
        assert data["error"]["code"] == "invalid_format"


class TestFindSummaryRoute:
    """Tests for api.find_summary_route."""

    def test_success(self):
        """Test a /22 summary."""
        data = api.find_summary_route(["192.168.0.0", "192.168.1.0", "192.168.2.0", "192.168.3.0"])
        assert data == {"network": "192.168.0.0", "prefix": 22, "mask": "255.255.252.0"}

    def test_empty(self):
        """Test that an empty list has no summary."""
        assert api.find_summary_route([]) is None

    def test_invalid_address(self):
        """Test that bad addresses return an error dictionary."""
        data = api.find_summary_route(["192.168.0.0", "192.168.300.0"])
        assert data["error"]["code"] == "invalid_format"

    def test_non_string_address(self):
        """Test that non-string entries return an error dictionary."""
        data = api.find_summary_route(["10.0.0.0", 5])
        assert data["error"]["code"] == "invalid_format"


class TestExercises:
    """Tests for seeded exercise generation and checking."""

    def test_generate_with_seed(self):
        """Test that a seed is returned and reproduces the exercise."""
        first = api.generate_exercise("summarization", "medium", seed=99)
        second = api.generate_exercise("summarization", "medium", seed=99)
        assert first == second
        assert first["seed"] == 99
        assert set(first) == {"kind", "difficulty", "problem", "solution", "feedback", "seed"}

    def test_generate_without_seed(self):
        """Test that a random seed is chosen and reported."""
        data = api.generate_exercise("next-network")
        assert 0 <= data["seed"] <= api.MAX_SEED
        assert api.generate_exercise("next-network", seed=data["seed"]) == data

    def test_check_correct(self):
        """Test that the returned solution checks as correct."""
        exercise = api.generate_exercise("identify-network", "hard", seed=5)
        check = api.check_exercise("identify-network", "hard", 5, exercise["solution"])
        assert check["correct"] is True
        assert check["solution"] == exercise["solution"]

    def test_check_wrong(self):
        """Test that wrong answers are reported per field."""
        check = api.check_exercise("next-network", "easy", 5, {"next_network": "0.0.0.0"})
        assert check["correct"] is False
        assert check["fields"] == {"next_network": False}

    def test_generate_unknown_kind(self):
        """Test that an unknown kind returns an error dictionary."""
        data = api.generate_exercise("bogus", "easy", seed=1)
        assert data["error"]["code"] == "invalid_format"
        assert "bogus" in data["error"]["reason"]
        assert "vlsm-scenario" in data["error"]["suggestion"]

    def test_check_unknown_difficulty(self):
        """Test that an unknown difficulty returns an error dictionary."""
        data = api.check_exercise("summarization", "expert", 1, {})
        assert data["error"]["code"] == "invalid_format"
        assert "expert" in data["error"]["requested"]
        assert "easy, medium, hard" in data["error"]["suggestion"]
