import pytest

from edgecert_core import ConfigurationError, load_cdn_config
from edgecert_core.cdn_config import from_toml


def test_packaged_table_has_suffixes_and_ranges() -> None:
    cdn = load_cdn_config()
    assert cdn.nameserver_suffixes == ("cloudflare.com",)
    assert "104.16.0.0/13" in cdn.ip_ranges


def test_user_file_replaces_packaged_table(tmp_path) -> None:
    path = tmp_path / "cdn.toml"
    path.write_text(
        'name = "fastly"\nnameserver_suffixes = ["NS.Fastly.net."]\nip_ranges = ["151.101.0.0/16"]\n',
        encoding="utf-8",
    )

    cdn = load_cdn_config(str(path))

    assert cdn.name == "fastly"
    assert cdn.nameserver_suffixes == ("ns.fastly.net",)
    assert cdn.ip_ranges == ("151.101.0.0/16",)


def test_missing_file_is_configuration_error(tmp_path) -> None:
    with pytest.raises(ConfigurationError, match="not found"):
        load_cdn_config(str(tmp_path / "nope.toml"))


def test_invalid_toml_is_configuration_error(tmp_path) -> None:
    path = tmp_path / "cdn.toml"
    path.write_text("name = [", encoding="utf-8")
    with pytest.raises(ConfigurationError, match="not valid TOML"):
        load_cdn_config(str(path))


def test_invalid_cidr_rejected() -> None:
    with pytest.raises(ConfigurationError, match="invalid CIDR"):
        from_toml({"nameserver_suffixes": ["x.com"], "ip_ranges": ["300.0.0.0/8"]})


def test_empty_lists_rejected() -> None:
    with pytest.raises(ConfigurationError, match="no nameserver suffixes"):
        from_toml({"name": "empty", "nameserver_suffixes": [], "ip_ranges": []})
