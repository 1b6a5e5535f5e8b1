import pytest

from apps.nginx_manager.settings import (
    DEFAULTS,
    load_config,
    save_config,
    reconcile_config,
    validate_config,
    is_localhost_only,
    get_port,
)


def test_missing_file_yields_defaults(tmp_path):
    record, warnings = load_config(tmp_path / "config.env")
    assert record == DEFAULTS
    assert warnings == []


def test_empty_file_yields_defaults(tmp_path):
    path = tmp_path / "config.env"
    path.write_text("")
    record, warnings = load_config(path)
    assert record == DEFAULTS
    assert warnings == []


def test_fresh_environment_scenario(tmp_path):
    record, _ = load_config(tmp_path / "config.env")
    assert record["EXTERNAL_HTTP_PORT"] == "7000"
    assert record["EXTERNAL_HTTPS_PORT"] == "8443"
    assert record["DATA_BASE_DIR"] == "./dockernpm-data"
    assert record["LOCALHOST_ONLY"] == "false"
    assert not is_localhost_only(record)


def test_partial_file_keeps_value_and_fills_defaults(tmp_path):
    path = tmp_path / "config.env"
    path.write_text("EXTERNAL_HTTP_PORT=9000\n")
    record, _ = load_config(path)
    assert record["EXTERNAL_HTTP_PORT"] == "9000"
    for key, value in DEFAULTS.items():
        if key != "EXTERNAL_HTTP_PORT":
            assert record[key] == value


def test_comments_are_ignored(tmp_path):
    path = tmp_path / "config.env"
    path.write_text("# EXTERNAL_HTTP_PORT=1234\nNGINX_HTTP_PORT=8080\n")
    record, _ = load_config(path)
    assert record["EXTERNAL_HTTP_PORT"] == "7000"
    assert record["NGINX_HTTP_PORT"] == "8080"


def test_values_are_not_coerced_or_interpolated(tmp_path):
    path = tmp_path / "config.env"
    path.write_text(
        "EXTERNAL_HTTP_PORT=07000\n"
        "DATA_BASE_DIR=/srv/npm/$HOME/data\n"
        "DATABASE_PATH=C:\\data\\npm.db\n"
    )
    record, _ = load_config(path)
    assert record["EXTERNAL_HTTP_PORT"] == "07000"
    assert record["DATA_BASE_DIR"] == "/srv/npm/$HOME/data"
    assert record["DATABASE_PATH"] == "C:\\data\\npm.db"


def test_save_load_round_trip(tmp_path):
    path = tmp_path / "config.env"
    record = dict(DEFAULTS)
    record.update({
        "EXTERNAL_HTTP_PORT": "0900",
        "DATA_BASE_DIR": "../shared/npm-data",
        "LOCALHOST_ONLY": "true",
        "EXTRA_SETTING": "kept",
    })
    save_config(path, record)
    loaded, _ = load_config(path)
    assert loaded == record

    save_config(path, loaded)
    again, _ = load_config(path)
    assert again == record


def test_round_trip_is_independent_of_key_order(tmp_path):
    path = tmp_path / "config.env"
    reversed_record = dict(reversed(list(DEFAULTS.items())))
    save_config(path, reversed_record)
    loaded, _ = load_config(path)
    assert loaded == reversed_record


def test_undecodable_file_is_treated_as_empty_with_warning(tmp_path):
    path = tmp_path / "config.env"
    path.write_bytes(b"\xff\xfe\x00EXTERNAL_HTTP_PORT=\xff\xff\n")
    record, warnings = load_config(path)
    assert record == DEFAULTS
    assert len(warnings) == 1
    assert "rebuilding" in warnings[0]


def test_invalid_value_is_kept_but_warned(tmp_path):
    path = tmp_path / "config.env"
    path.write_text("EXTERNAL_HTTP_PORT=abc\n")
    record, warnings = load_config(path)
    assert record["EXTERNAL_HTTP_PORT"] == "abc"
    assert any("EXTERNAL_HTTP_PORT" in w for w in warnings)


def test_reconcile_creates_file(tmp_path):
    path = tmp_path / "config.env"
    result = reconcile_config(path)
    assert result["created"] is True
    assert result["backfilled"] == []
    assert path.exists()
    loaded, _ = load_config(path)
    assert loaded == DEFAULTS


def test_reconcile_backfills_missing_keys(tmp_path):
    path = tmp_path / "config.env"
    path.write_text("EXTERNAL_HTTP_PORT=9000\n")
    result = reconcile_config(path)
    assert result["created"] is False
    assert "EXTERNAL_HTTPS_PORT" in result["backfilled"]
    assert "EXTERNAL_HTTP_PORT" not in result["backfilled"]

    text = path.read_text()
    assert "EXTERNAL_HTTP_PORT=9000" in text
    assert "LOCALHOST_ONLY=false" in text


def test_reconcile_leaves_complete_file_untouched(tmp_path):
    path = tmp_path / "config.env"
    lines = [f"{k}={v}" for k, v in DEFAULTS.items()]
    original = "# hand written\n" + "\n".join(lines) + "\n"
    path.write_text(original)

    result = reconcile_config(path)
    assert result["backfilled"] == []
    assert path.read_text() == original


def test_localhost_only_parsing():
    assert is_localhost_only({"LOCALHOST_ONLY": "true"})
    assert is_localhost_only({"LOCALHOST_ONLY": " TRUE "})
    assert not is_localhost_only({"LOCALHOST_ONLY": "false"})
    assert not is_localhost_only({"LOCALHOST_ONLY": "yes"})
    assert not is_localhost_only({})


def test_validate_config_reports_bad_ports_and_dir():
    record = dict(DEFAULTS, NGINX_HTTPS_PORT="70000", DATA_BASE_DIR="  ")
    errors = validate_config(record)
    assert len(errors) == 2
    assert any(e.startswith("NGINX_HTTPS_PORT") for e in errors)
    assert any(e.startswith("DATA_BASE_DIR") for e in errors)
    assert validate_config(DEFAULTS) == []


def test_get_port():
    assert get_port(DEFAULTS, "EXTERNAL_HTTP_PORT") == 7000
    assert get_port({}, "NGINX_HTTPS_PORT") == 443


@pytest.mark.parametrize("value", [
    "/srv/npm #2",
    "'quoted'",
    '"dq"',
    "a\\nb",
    "C:\\data\\",
    " padded ",
    "it's",
    "a\\'b",
    "",
])
def test_awkward_values_round_trip(tmp_path, value):
    path = tmp_path / "config.env"
    record = dict(DEFAULTS, DATA_BASE_DIR=value, EXTRA_SETTING=value)
    save_config(path, record)
    loaded, _ = load_config(path)
    assert loaded["DATA_BASE_DIR"] == value
    assert loaded["EXTRA_SETTING"] == value


def test_only_awkward_values_are_quoted(tmp_path):
    path = tmp_path / "config.env"
    save_config(path, dict(DEFAULTS))
    assert "DATA_BASE_DIR=./dockernpm-data\n" in path.read_text()

    save_config(path, dict(DEFAULTS, DATA_BASE_DIR="/srv/npm #2"))
    assert "DATA_BASE_DIR='/srv/npm #2'\n" in path.read_text()


def test_malformed_lines_are_reported(tmp_path):
    path = tmp_path / "config.env"
    path.write_text("EXTERNAL_HTTP_PORT 9000\nNGINX_HTTP_PORT=8080\nthis is junk\n")

    record, warnings = load_config(path)

    assert record["EXTERNAL_HTTP_PORT"] == "7000"
    assert record["NGINX_HTTP_PORT"] == "8080"
    assert "line 1 of config.env is not KEY=VALUE; ignored" in warnings
    assert "line 3 of config.env is not KEY=VALUE; ignored" in warnings


def test_key_without_value_is_reported(tmp_path):
    path = tmp_path / "config.env"
    path.write_text("EXTERNAL_HTTP_PORT\n")
    _, warnings = load_config(path)
    assert warnings == ["line 1 of config.env is not KEY=VALUE; ignored"]


def test_reconcile_rebuilds_malformed_file_with_warning(tmp_path):
    path = tmp_path / "config.env"
    complete = "\n".join(f"{k}={v}" for k, v in DEFAULTS.items())
    path.write_text(complete + "\nthis is junk\n")

    result = reconcile_config(path)

    assert any("is not KEY=VALUE" in w for w in result["warnings"])
    assert "junk" not in path.read_text()
    assert load_config(path) == (DEFAULTS, [])
