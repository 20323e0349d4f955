import json

from typer.testing import CliRunner

from hashtree_cli.__main__ import app
from tests.vectors import BLAKE2B_EMPTY, BLAKE2B_RAW_31_ROOT, SHA256_HEX_COLON_ROOT

runner = CliRunner()
LETTERS = list("ABCDEFG")
BLAKE = ["--hash", "blake2b-256", "--raw", "--separator", "0x31"]
SHA_HEX = ["--hash", "sha256", "--hex", "--separator", ":"]


def test_root_vectors():
    r = runner.invoke(app, ["root", *BLAKE, *LETTERS])
    assert r.exit_code == 0, r.output
    assert r.stdout.strip() == BLAKE2B_RAW_31_ROOT

    r = runner.invoke(app, ["root", *SHA_HEX, *LETTERS])
    assert r.stdout.strip() == SHA256_HEX_COLON_ROOT

    r = runner.invoke(app, ["root", *BLAKE])
    assert r.stdout.strip() == BLAKE2B_EMPTY


def test_root_from_file(tmp_path):
    f = tmp_path / "leaves.txt"
    f.write_text("\n".join(LETTERS) + "\n")
    r = runner.invoke(app, ["root", *BLAKE, "--from-file", str(f)])
    assert r.exit_code == 0, r.output
    assert r.stdout.strip() == BLAKE2B_RAW_31_ROOT


def test_bad_options():
    r = runner.invoke(app, ["root", "--hash", "nope", "A"])
    assert r.exit_code != 0
    r = runner.invoke(app, ["root", "--separator", "0x1ff", "A"])
    assert r.exit_code != 0


def test_prove_and_verify(tmp_path):
    r = runner.invoke(app, ["prove", *SHA_HEX, "D", *LETTERS])
    assert r.exit_code == 0, r.output
    doc = json.loads(r.stdout)
    assert len(doc["steps"]) == 5
    assert doc["root"] == SHA256_HEX_COLON_ROOT

    path = tmp_path / "proof.json"
    path.write_text(r.stdout)
    ok = runner.invoke(app, ["verify", str(path), "--root", SHA256_HEX_COLON_ROOT])
    assert ok.exit_code == 0, ok.output
    assert "True" in ok.stdout

    bad = runner.invoke(app, ["verify", str(path), "--root", BLAKE2B_RAW_31_ROOT])
    assert bad.exit_code == 1


def test_prove_to_file(tmp_path):
    out = tmp_path / "nested" / "d.json"
    r = runner.invoke(app, ["prove", *BLAKE, "--out", str(out), "D", *LETTERS])
    assert r.exit_code == 0, r.output
    assert json.loads(out.read_text())["leaf"] == "D"
    assert runner.invoke(app, ["verify", str(out)]).exit_code == 0


def test_prove_missing_leaf():
    r = runner.invoke(app, ["prove", "Z", *LETTERS])
    assert r.exit_code == 1
    assert "unable to find leaf" in r.stdout


def test_verify_tampered(tmp_path):
    r = runner.invoke(app, ["prove", *BLAKE, "B", *LETTERS])
    doc = json.loads(r.stdout)
    digest = doc["steps"][1]["digest"]
    doc["steps"][1]["digest"] = ("f" if digest[0] != "f" else "e") + digest[1:]
    path = tmp_path / "bad.json"
    path.write_text(json.dumps(doc))
    r = runner.invoke(app, ["verify", str(path)])
    assert r.exit_code == 1
    assert "False" in r.stdout


def test_bulk_proofs(tmp_path):
    out_dir = tmp_path / "proofs"
    r = runner.invoke(app, ["proofs", *BLAKE, "--out-dir", str(out_dir), *LETTERS])
    assert r.exit_code == 0, r.output
    files = sorted(out_dir.glob("*.json"))
    assert [p.name for p in files] == [f"{i}.json" for i in range(7)]
    for p, letter in zip(files, LETTERS):
        assert json.loads(p.read_text())["leaf"] == letter
        assert runner.invoke(app, ["verify", str(p), "--root", BLAKE2B_RAW_31_ROOT]).exit_code == 0


def test_show():
    r = runner.invoke(app, ["show", *BLAKE, *LETTERS])
    assert r.exit_code == 0, r.output
    assert BLAKE2B_RAW_31_ROOT in r.stdout


def test_bad_key_hex_is_a_usage_error(tmp_path):
    r = runner.invoke(app, ["prove", *BLAKE, "--out", str(tmp_path / "p.json"), "A", *LETTERS])
    assert r.exit_code == 0, r.output
    r = runner.invoke(app, ["verify", str(tmp_path / "p.json"), "--key-hex", "zz"])
    assert r.exit_code == 2
    assert not isinstance(r.exception, ValueError)


def test_bad_log_level_is_a_usage_error():
    r = runner.invoke(app, ["--log-level", "bogus", "root", "A"])
    assert r.exit_code == 2
    assert not isinstance(r.exception, ValueError)
