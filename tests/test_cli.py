import argparse

import pytest

from cc import cli
from cc.repository import MappingStore


def test_ls_prints_all_mappings(store: MappingStore, db_path, capsys):
    first = store.put("https://example.com/1")
    second = store.put("https://example.com/2")

    assert cli.main(["ls", str(db_path)]) == 0

    out = capsys.readouterr().out.splitlines()
    assert out[0] == f"2 mappings found in {db_path}:"
    assert out[1:] == [
        f"  {first} -> https://example.com/1",
        f"  {second} -> https://example.com/2",
    ]


def test_ls_singular(store: MappingStore, db_path, capsys):
    store.put("https://example.com")
    cli.main(["ls", str(db_path)])
    assert capsys.readouterr().out.startswith(f"1 mapping found in {db_path}:")


def test_ls_missing_database(tmp_path, capsys):
    path = tmp_path / "nope.db"
    assert cli.main(["ls", str(path)]) == 1
    assert "does not exist" in capsys.readouterr().err
    # ls не должен создавать файл
    assert not path.exists()


def test_serve_passes_options_to_server(monkeypatch, db_path, tmp_path):
    index = tmp_path / "index.html"
    index.write_text("hi", encoding="utf-8")
    calls = []
    monkeypatch.setattr(cli, "run", lambda *args: calls.append(args))

    assert cli.main(["serve", str(db_path), "--url", "0.0.0.0:9000", "--index", str(index)]) == 0

    store, host, port, served_index = calls[0]
    assert (host, port, served_index) == ("0.0.0.0", 9000, index)
    assert store.path == db_path
    # База создаётся при старте
    assert db_path.is_file()


def test_serve_default_address(monkeypatch, db_path):
    calls = []
    monkeypatch.setattr(cli, "run", lambda *args: calls.append(args))
    cli.main(["serve", str(db_path)])
    assert calls[0][1:] == ("127.0.0.1", 8080, None)


def test_serve_missing_index(monkeypatch, db_path, tmp_path, capsys):
    monkeypatch.setattr(cli, "run", lambda *args: pytest.fail("server must not start"))
    assert cli.main(["serve", str(db_path), "--index", str(tmp_path / "gone.html")]) == 1
    assert "index file does not exist" in capsys.readouterr().err


@pytest.mark.parametrize("value", ["8080", ":8080", "host:port", "host:70000"])
def test_parse_address_rejects(value):
    with pytest.raises(argparse.ArgumentTypeError):
        cli.parse_address(value)


def test_parse_address_ipv6():
    assert cli.parse_address("[::1]:8080") == ("::1", 8080)
