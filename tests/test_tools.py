"""Tests for the JSON tools exposed in the UI and over MCP."""

import json

from subnetlab import tools


def load(text):
    return json.loads(text)


class TestIpInfo:
    """Tests for the ip_info tool."""

    def test_decimal(self):
        """Test decimal address with a CIDR mask."""
        data = load(tools.ip_info("192.168.1.10", "/24"))
        assert data["network_address"] == "192.168.1.0"
        assert data["total_hosts"] == 254

    def test_binary_address(self):
        """Test binary address with a dotted mask."""
        data = load(tools.ip_info("11000000.10101000.00000001.00001010", "255.255.255.192"))
        assert data["ip_decimal"] == "192.168.1.10"
        assert data["subnet_mask_cidr"] == "/26"

    def test_invalid_mask(self):
        """Test that a non-contiguous mask is an error."""
        data = load(tools.ip_info("10.0.0.1", "255.0.255.0"))
        assert "error" in data


class TestClassfulCalculator:
    """Tests for the classful_calculator tool."""

    def test_success(self):
        """Test a class B host split."""
        data = load(tools.classful_calculator("172.16.0.0", "hosts", "500"))
        assert data["summary"]["new_prefix"] == 23

    def test_not_a_number(self):
        """Test a non-numeric requirement."""
        data = load(tools.classful_calculator("172.16.0.0", "hosts", "many"))
        assert "error" in data

    def test_row_limit(self, monkeypatch):
        """Test that the configured row limit applies."""
        monkeypatch.setattr(tools.config, "MAX_RESULT_ROWS", 3)
        data = load(tools.classful_calculator("10.0.0.0", "subnets", "1000"))
        assert len(data["networks"]) == 3
        assert data["truncated"] is True


class TestVlsmCalculator:
    """Tests for the vlsm_calculator tool."""

    def test_with_names(self):
        """Test comma-separated hosts and names."""
        data = load(tools.vlsm_calculator("192.168.1.0/24", "100, 50, 10", "A,B"))
        assert [row["name"] for row in data["networks"]] == ["A", "B", "Subnet 3"]

    def test_bad_hosts(self):
        """Test non-numeric host counts."""
        data = load(tools.vlsm_calculator("192.168.1.0/24", "100,lots"))
        assert "error" in data


class TestSummaryRoute:
    """Tests for the summary_route tool."""

    def test_newline_separated(self):
        """Test newline separated input."""
        data = load(tools.summary_route("10.0.0.0\n10.0.1.0\n"))
        assert data["network"] == "10.0.0.0"
        assert data["prefix"] == 23

    def test_empty(self):
        """Test blank input."""
        assert "error" in load(tools.summary_route("  "))


class TestExerciseTools:
    """Tests for generate_exercise and check_exercise tools."""

    def test_round_trip(self):
        """Test generating and then checking a seeded exercise."""
        exercise = load(tools.generate_exercise("calculate-mask", "medium", "17"))
        check = load(tools.check_exercise("calculate-mask", "medium", "17",
                                          json.dumps(exercise["solution"])))
        assert check["correct"] is True

    def test_unknown_kind(self):
        """Test an unknown exercise kind."""
        assert "error" in load(tools.generate_exercise("bogus", "easy", ""))

    def test_answers_not_json(self):
        """Test answers that are not a JSON object."""
        assert "error" in load(tools.check_exercise("next-network", "easy", "1", "[1, 2]"))
        assert "error" in load(tools.check_exercise("next-network", "easy", "1", "{oops"))
