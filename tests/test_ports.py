import logging

from portwho.ports import parse_ports


def test_single_ports_keep_order():
    assert parse_ports(["8080", "3000", "5432"]) == [8080, 3000, 5432]


def test_ranges():
    assert parse_ports(["3000-3003"]) == [3000, 3001, 3002, 3003]


def test_mixed_and_comma_separated():
    assert parse_ports(["22,80", "8000-8001"]) == [22, 80, 8000, 8001]


def test_duplicates_are_kept():
    assert parse_ports(["3000", "3000"]) == [3000, 3000]


def test_invalid_items_skipped(caplog):
    with caplog.at_level(logging.WARNING, logger="portwho"):
        ports = parse_ports(["abc", "0", "70000", "5-3", "1-2-3", "443"])
    assert ports == [443]
    assert "Skipping invalid port: abc" in caplog.text
    assert "Skipping invalid port range: 5-3" in caplog.text


def test_nothing_valid():
    assert parse_ports(["", "x"]) == []
