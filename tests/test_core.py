"""Tests for address parsing, masks, classes and the Network block type."""

import pytest

from subnetlab.core import (
    MAX_ADDRESS,
    AddressClass,
    CalculationError,
    ErrorCode,
    InsufficientSpace,
    InvalidFormat,
    Network,
    NotContiguousMask,
    NotNetworkAddress,
    analyze_address,
    binary_to_address,
    ceil_log2,
    class_of,
    default_mask,
    format_address,
    format_binary,
    ip_to_binary,
    mask_to_prefix,
    next_network,
    parse_address,
    parse_cidr,
    parse_mask,
    prefix_to_mask,
)


class TestParseAddress:
    """Tests for dotted-quad parsing and formatting."""

    @pytest.mark.parametrize("text", ["0.0.0.0", "10.1.2.3", "192.168.1.10", "255.255.255.255"])
    def test_round_trip(self, text):
        """Test that formatting a parsed address gives the original text."""
        assert format_address(parse_address(text)) == text

    def test_value(self):
        """Test the integer value of a parsed address."""
        assert parse_address("192.168.1.1") == 0xC0A80101

    @pytest.mark.parametrize("text", [
        "", "1.2.3", "1.2.3.4.5", "256.0.0.1", "1..2.3", "a.b.c.d", "192.168.01.1", " 1.2.3.4x",
    ])
    def test_invalid(self, text):
        """Test that malformed addresses are rejected."""
        with pytest.raises(InvalidFormat):
            parse_address(text)

    def test_non_string(self):
        """Test that only strings are parsed."""
        with pytest.raises(InvalidFormat):
            parse_address(3232235777)

    def test_format_out_of_range(self):
        """Test that values beyond 32 bits cannot be formatted."""
        with pytest.raises(InvalidFormat):
            format_address(MAX_ADDRESS + 1)

    def test_errors_are_value_errors(self):
        """Test that engine errors can be caught as ValueError."""
        with pytest.raises(ValueError):
            parse_address("300.1.1.1")


class TestMasks:
    """Tests for prefix and mask conversions."""

    @pytest.mark.parametrize("prefix", range(33))
    def test_prefix_mask_round_trip(self, prefix):
        """Test that every prefix survives the trip through its mask."""
        assert mask_to_prefix(prefix_to_mask(prefix)) == prefix

    def test_known_masks(self):
        """Test a few well-known masks."""
        assert prefix_to_mask(0) == 0
        assert format_address(prefix_to_mask(24)) == "255.255.255.0"
        assert format_address(prefix_to_mask(26)) == "255.255.255.192"
        assert prefix_to_mask(32) == MAX_ADDRESS

    @pytest.mark.parametrize("mask", ["255.0.255.0", "255.255.255.1", "0.255.255.255"])
    def test_non_contiguous(self, mask):
        """Test that masks with holes are rejected."""
        with pytest.raises(NotContiguousMask):
            mask_to_prefix(parse_address(mask))

    @pytest.mark.parametrize("text,expected", [
        ("/24", 24), ("24", 24), ("255.255.255.0", 24), (" /30 ", 30), ("0", 0), ("/32", 32),
    ])
    def test_parse_mask(self, text, expected):
        """Test mask parsing in CIDR, bare number and dotted formats."""
        assert parse_mask(text) == expected

    @pytest.mark.parametrize("text", ["/33", "abc", "", "024", "/-1"])
    def test_parse_mask_invalid(self, text):
        """Test that invalid prefix strings are rejected."""
        with pytest.raises(InvalidFormat):
            parse_mask(text)

    def test_prefix_out_of_range(self):
        """Test that prefixes outside 0..32 are rejected."""
        with pytest.raises(InvalidFormat):
            prefix_to_mask(33)


class TestParseCidr:
    """Tests for a.b.c.d/p parsing."""

    def test_valid(self):
        """Test a plain CIDR string."""
        assert parse_cidr("10.0.0.0/8") == (parse_address("10.0.0.0"), 8)

    def test_host_bits_allowed(self):
        """Test that parse_cidr does not require a network address."""
        assert parse_cidr("192.168.1.77/24") == (parse_address("192.168.1.77"), 24)

    @pytest.mark.parametrize("text", ["10.0.0.0", "10.0.0.0/33", "10.0.0.0/8/8", "10.0.0/8", "10.0.0.0/"])
    def test_invalid(self, text):
        """Test malformed CIDR strings."""
        with pytest.raises(InvalidFormat):
            parse_cidr(text)


class TestAddressClass:
    """Tests for classful address classification."""

    @pytest.mark.parametrize("text,expected", [
        ("0.0.0.0", AddressClass.A),
        ("10.0.0.0", AddressClass.A),
        ("127.0.0.1", AddressClass.A),
        ("128.0.0.0", AddressClass.B),
        ("191.255.0.0", AddressClass.B),
        ("192.0.0.0", AddressClass.C),
        ("223.1.1.0", AddressClass.C),
        ("224.0.0.1", AddressClass.D),
        ("239.255.255.255", AddressClass.D),
        ("240.0.0.0", AddressClass.E),
        ("255.255.255.255", AddressClass.E),
    ])
    def test_class_of(self, text, expected):
        """Test the first-octet class boundaries."""
        assert class_of(parse_address(text)) is expected

    def test_default_masks(self):
        """Test that only A, B and C have default masks."""
        assert format_address(default_mask(AddressClass.A)) == "255.0.0.0"
        assert format_address(default_mask(AddressClass.B)) == "255.255.0.0"
        assert format_address(default_mask(AddressClass.C)) == "255.255.255.0"
        assert default_mask(AddressClass.D) is None
        assert default_mask(AddressClass.E) is None


class TestCeilLog2:
    """Tests for the exact integer log."""

    @pytest.mark.parametrize("n,expected", [
        (1, 0), (2, 1), (3, 2), (4, 2), (5, 3), (8, 3), (9, 4), (2 ** 24, 24), (2 ** 24 + 1, 25),
    ])
    def test_values(self, n, expected):
        """Test powers of two and their neighbours."""
        assert ceil_log2(n) == expected

    def test_zero(self):
        """Test that zero has no logarithm."""
        with pytest.raises(ValueError):
            ceil_log2(0)


class TestNetwork:
    """Tests for the Network block type."""

    def test_properties(self):
        """Test derived values of a /26."""
        network = Network.from_cidr("192.168.1.64/26")
        assert format_address(network.mask) == "255.255.255.192"
        assert format_address(network.wildcard) == "0.0.0.63"
        assert format_address(network.broadcast) == "192.168.1.127"
        assert network.block_size == 64
        assert network.usable_hosts == 62
        assert format_address(network.first_usable) == "192.168.1.65"
        assert format_address(network.last_usable) == "192.168.1.126"
        assert network.host_range == "192.168.1.65 - 192.168.1.126"
        assert str(network) == "192.168.1.64/26"

    @pytest.mark.parametrize("prefix", [0, 8, 17, 24, 30, 31, 32])
    def test_identities(self, prefix):
        """Test that mask and wildcard partition the address space."""
        network = Network.containing(parse_address("172.20.33.44"), prefix)
        assert network.mask | network.wildcard == MAX_ADDRESS
        assert network.mask & network.wildcard == 0
        assert network.broadcast - network.address + 1 == network.block_size
        assert network.block_size == 2 ** (32 - prefix)

    @pytest.mark.parametrize("prefix", [31, 32])
    def test_no_usable_range(self, prefix):
        """Test that /31 and /32 have no usable host range."""
        network = Network.containing(parse_address("10.0.0.0"), prefix)
        assert network.first_usable is None
        assert network.last_usable is None
        assert network.host_range is None
        assert network.usable_hosts == 0

    def test_host_bits_set(self):
        """Test that a host address cannot be used as a network."""
        with pytest.raises(NotNetworkAddress) as excinfo:
            Network.from_cidr("192.168.1.77/24")
        error = excinfo.value
        assert error.code is ErrorCode.NOT_NETWORK_ADDRESS
        assert error.corrected == Network(parse_address("192.168.1.0"), 24)
        assert "192.168.1.0/24" in error.suggestion

    def test_calculation_error_reports_correction(self):
        """Test that the typed error carries the corrected network."""
        with pytest.raises(NotNetworkAddress) as excinfo:
            Network.from_cidr("10.1.2.3/8")
        data = CalculationError.from_exception(excinfo.value).to_dict()
        assert data["code"] == "not_network_address"
        assert data["corrected_network"] == "10.0.0.0"
        assert data["corrected_prefix"] == 8
        assert "10.0.0.0/8" in data["message"]

    def test_contains_and_overlaps(self):
        """Test membership and overlap checks."""
        a = Network.from_cidr("10.0.0.0/24")
        b = Network.from_cidr("10.0.0.128/25")
        c = Network.from_cidr("10.0.1.0/24")
        assert a.contains(parse_address("10.0.0.255"))
        assert not a.contains(parse_address("10.0.1.0"))
        assert a.overlaps(b) and b.overlaps(a)
        assert not a.overlaps(c)

    def test_ordering(self):
        """Test that networks sort by address then prefix."""
        nets = [Network.from_cidr("10.0.1.0/24"), Network.from_cidr("10.0.0.0/24")]
        assert sorted(nets)[0].cidr == "10.0.0.0/24"

    def test_to_dict(self):
        """Test the table row of a network."""
        row = Network.from_cidr("192.168.1.0/30").to_dict()
        assert row["subnet"] == "192.168.1.0/30"
        assert row["first_host"] == "192.168.1.1"
        assert row["last_host"] == "192.168.1.2"
        assert row["usable_hosts"] == 2


class TestNextNetwork:
    """Tests for the following same-size block."""

    def test_simple(self):
        """Test the next /26."""
        assert next_network(Network.from_cidr("192.168.1.64/26")).cidr == "192.168.1.128/26"

    def test_carry(self):
        """Test that the increment carries into the next octet."""
        assert next_network(Network.from_cidr("172.16.254.0/23")).cidr == "172.17.0.0/23"

    def test_end_of_space(self):
        """Test that the last block has no successor."""
        with pytest.raises(InsufficientSpace):
            next_network(Network.from_cidr("255.255.255.252/30"))


class TestBinary:
    """Tests for binary helpers."""

    def test_ip_to_binary(self):
        """Test dotted binary output."""
        assert ip_to_binary(parse_address("192.168.1.10")) == \
            "11000000.10101000.00000001.00001010"

    def test_format_binary_nibbles(self):
        """Test nibble grouping."""
        assert format_binary(prefix_to_mask(30)) == \
            "1111 1111.1111 1111.1111 1111.1111 1100"

    def test_binary_to_address(self):
        """Test binary input with dots and spaces."""
        assert format_address(binary_to_address("11000000.10101000.0000 0001.00001010")) == \
            "192.168.1.10"

    def test_binary_invalid(self):
        """Test that short or non-binary input is rejected."""
        with pytest.raises(InvalidFormat):
            binary_to_address("1100.1010")


class TestAnalyzeAddress:
    """Tests for the IP info report."""

    def test_host_in_class_c(self):
        """Test a typical host address."""
        info = analyze_address(parse_address("192.168.1.10"), 24)
        assert info["network_address"] == "192.168.1.0"
        assert info["broadcast_address"] == "192.168.1.255"
        assert info["first_host"] == "192.168.1.1"
        assert info["last_host"] == "192.168.1.254"
        assert info["total_hosts"] == 254
        assert info["subnet_mask_decimal"] == "255.255.255.0"
        assert info["subnet_mask_cidr"] == "/24"
        assert info["wildcard_mask"] == "0.0.0.255"
        assert info["address_class"] == "C"

    def test_point_to_point(self):
        """Test that both /31 addresses are hosts."""
        info = analyze_address(parse_address("10.0.0.1"), 31)
        assert info["total_hosts"] == 2
        assert info["first_host"] == "10.0.0.0"
        assert info["last_host"] == "10.0.0.1"

    def test_single_host(self):
        """Test a /32 host route."""
        info = analyze_address(parse_address("10.0.0.7"), 32)
        assert info["total_hosts"] == 1
        assert info["first_host"] == info["last_host"] == "10.0.0.7"
