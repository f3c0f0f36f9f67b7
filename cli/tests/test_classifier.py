import logging

from edgecert_core import CdnConfig, DnsSnapshot, ProxyVerdict, load_cdn_config
from edgecert_core.classifier import classify, classify_with_reason

CDN = CdnConfig(
    name="cloudflare",
    nameserver_suffixes=("cloudflare.com",),
    ip_ranges=("104.16.0.0/13", "172.64.0.0/13", "2606:4700::/32"),
)


def test_nameserver_suffix_wins_regardless_of_a_records() -> None:
    snapshot = DnsSnapshot(
        nameservers=frozenset({"ns1.cloudflare.com"}),
        a_records=frozenset({"203.0.113.9", "198.51.100.4"}),
    )

    verdict, rule = classify_with_reason(snapshot, CDN)

    assert verdict is ProxyVerdict.PROXIED_BY_KNOWN_CDN
    assert rule is not None and rule.startswith("nameserver")


def test_nameserver_match_ignores_case_and_trailing_dot() -> None:
    snapshot = DnsSnapshot(nameservers=frozenset({"Kate.NS.Cloudflare.com."}))
    assert classify(snapshot, CDN) is ProxyVerdict.PROXIED_BY_KNOWN_CDN


def test_nameserver_suffix_requires_label_boundary() -> None:
    snapshot = DnsSnapshot(nameservers=frozenset({"ns1.notcloudflare.com"}), a_records=frozenset({"203.0.113.9"}))
    assert classify(snapshot, CDN) is ProxyVerdict.DIRECT_NOT_PROXIED


def test_cdn_ip_range_detected_without_nameserver_match() -> None:
    snapshot = DnsSnapshot(
        nameservers=frozenset({"ns1.myregistrar.com"}),
        a_records=frozenset({"104.21.3.4"}),
    )

    verdict, rule = classify_with_reason(snapshot, CDN)

    assert verdict is ProxyVerdict.PROXIED_BY_KNOWN_CDN
    assert rule == "address 104.21.3.4 in 104.16.0.0/13"


def test_ipv6_cdn_range_detected() -> None:
    snapshot = DnsSnapshot(a_records=frozenset({"2606:4700:3031::6815:1234"}))
    assert classify(snapshot, CDN) is ProxyVerdict.PROXIED_BY_KNOWN_CDN


def test_no_signal_is_direct() -> None:
    snapshot = DnsSnapshot(
        nameservers=frozenset({"ns1.myregistrar.com"}),
        a_records=frozenset({"203.0.113.9", "not-an-ip"}),
    )
    assert classify(snapshot, CDN) is ProxyVerdict.DIRECT_NOT_PROXIED


def test_empty_snapshot_is_direct() -> None:
    assert classify(DnsSnapshot(), CDN) is ProxyVerdict.DIRECT_NOT_PROXIED


def test_rule_order_visible_in_debug_log(caplog) -> None:
    snapshot = DnsSnapshot(
        nameservers=frozenset({"ns1.cloudflare.com"}),
        a_records=frozenset({"104.21.3.4"}),
    )
    with caplog.at_level(logging.DEBUG, logger="edgecert_core.classifier"):
        classify(snapshot, CDN)

    assert "nameserver rule" in caplog.text
    assert "IP range rule" not in caplog.text


def test_packaged_cloudflare_table_matches_known_edge_ip() -> None:
    cdn = load_cdn_config()
    snapshot = DnsSnapshot(a_records=frozenset({"172.67.10.20"}))
    assert cdn.name == "cloudflare"
    assert classify(snapshot, cdn) is ProxyVerdict.PROXIED_BY_KNOWN_CDN
