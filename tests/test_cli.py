from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

import pytest
import yaml

from qeinput.cli.main import main
from qeinput.pw import input as pwi
from qeinput.pw.serialize import make_k_points

from _utils import FE_SCF_TEXT, check_cli_or_skip, make_fe_scf

CASES = Path(__file__).parent / "cases" / "gen_cli"
FE_YAML = CASES / "fe_scf" / "input" / "pw.yaml"


def discover():
    return sorted(p for p in CASES.iterdir() if (p / "case.yaml").exists())


@pytest.mark.parametrize("case_dir", discover(), ids=lambda p: p.name)
def test_gen_cli(case_dir: Path, tmp_path_cwd: Path, update_gold: bool):
    """
    Expects case.yaml like:
      command: [gen, pw]
      inputs:  [pw.yaml]
      args:    [-c, pw.yaml, ...]
      output:  o.pw.in
      gold:    pw.in
    """
    cfg = yaml.safe_load((case_dir / "case.yaml").read_text(encoding="utf-8"))

    for name in cfg["inputs"]:
        shutil.copy(case_dir / "input" / name, tmp_path_cwd / name)

    rc = main(cfg["command"] + cfg["args"] + ["-o", cfg["output"]])
    assert rc == 0

    out_path = tmp_path_cwd / cfg["output"]
    assert out_path.exists(), f"Expected output file not found: {out_path}"

    gold_path = case_dir / "gold" / cfg["gold"]
    if update_gold:
        gold_path.parent.mkdir(parents=True, exist_ok=True)
        existed = gold_path.exists()
        shutil.copy(out_path, gold_path)
        print(f"[{'UPDATED' if existed else 'CREATED'} GOLD] {gold_path}")
        return

    new_txt = out_path.read_text(encoding="utf-8")
    gold_txt = gold_path.read_text(encoding="utf-8")
    assert new_txt == gold_txt, f"Input file mismatch for case {case_dir.name}"


def test_gen_pw_stdout(tmp_path_cwd: Path, capsys):
    shutil.copy(FE_YAML, "pw.yaml")
    assert main(["gen", "pw", "-c", "pw.yaml"]) == 0
    assert capsys.readouterr().out == FE_SCF_TEXT + "\n"


def test_gen_pw_refuses_overwrite(tmp_path_cwd: Path):
    shutil.copy(FE_YAML, "pw.yaml")
    Path("pw.in").write_text("keep", encoding="utf-8")

    with pytest.raises(SystemExit) as exc:
        main(["gen", "pw", "-c", "pw.yaml", "-o", "pw.in"])
    assert exc.value.code == 2
    assert Path("pw.in").read_text(encoding="utf-8") == "keep"

    assert main(["gen", "pw", "-c", "pw.yaml", "-o", "pw.in", "--overwrite"]) == 0
    assert Path("pw.in").read_text(encoding="utf-8") == FE_SCF_TEXT


def _broken_fe_yaml() -> str:
    text = FE_YAML.read_text(encoding="utf-8")
    return text.replace("alat: 3", "alat: 0").replace("ecutrho: 240", "ecutrho: -1")


def test_gen_pw_reports_all_errors(tmp_path_cwd: Path, capsys):
    Path("pw.yaml").write_text(_broken_fe_yaml(), encoding="utf-8")

    assert main(["gen", "pw", "-c", "pw.yaml", "-o", "pw.in"]) == 1
    assert not Path("pw.in").exists()

    err = capsys.readouterr().err.splitlines()
    assert [l for l in err if l.startswith("error: ")] == [
        "error: Lattice constant `alat` must be positive; got 0 instead.",
        "error: Charge density cutoff energy `ecutrho` must be positive; got -1 instead.",
    ]


def test_gen_pw_missing_config(tmp_path_cwd: Path):
    with pytest.raises(SystemExit) as exc:
        main(["gen", "pw", "-c", "nope.yaml"])
    assert exc.value.code == 2


def test_gen_pw_kshift_requires_kpts(tmp_path_cwd: Path):
    shutil.copy(FE_YAML, "pw.yaml")
    with pytest.raises(SystemExit):
        main(["gen", "pw", "-c", "pw.yaml", "--kshift", "1,1,1"])


def test_check_pw(tmp_path_cwd: Path, capsys):
    shutil.copy(FE_YAML, "good.yaml")
    Path("bad.yaml").write_text(_broken_fe_yaml(), encoding="utf-8")

    assert main(["check", "pw", "-c", "good.yaml"]) == 0
    assert capsys.readouterr().out == "OK\n"

    assert main(["check", "pw", "-c", "bad.yaml"]) == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert captured.err.count("error: ") == 2


def test_gen_bands_bad_filband(tmp_path_cwd: Path, capsys):
    # "\udcff" is how a raw 0xff byte survives surrogateescape decoding
    Path("bands.yaml").write_text('lsym: true\nfilband: "bands\\uDCFF.dat"\n', encoding="utf-8")
    assert main(["gen", "bands", "-c", "bands.yaml"]) == 1
    assert "error: `filband` is not valid UTF-8" in capsys.readouterr().err


def test_kgrid(capsys):
    assert main(["kgrid", "2", "1", "2"]) == 0
    assert capsys.readouterr().out == (
        "K_POINTS crystal\n"
        "4\n"
        "0 0 0 0.25\n"
        "0 0 0.5 0.25\n"
        "0.5 0 0 0.25\n"
        "0.5 0 0.5 0.25\n"
    )


def test_kgrid_rejects_zero():
    with pytest.raises(SystemExit):
        main(["kgrid", "2", "0", "2"])


def test_installed_entry_point(tmp_path_cwd: Path):
    cli = ["qei", "gen", "pw"]
    check_cli_or_skip(cli)

    shutil.copy(FE_YAML, "pw.yaml")
    args = cli + ["-c", "pw.yaml", "-o", "pw.in"]
    try:
        subprocess.run(args, text=True, capture_output=True, check=True)
    except subprocess.CalledProcessError as e:
        pytest.fail(
            f"CLI failed (code {e.returncode}).\n"
            f"CMD: {' '.join(args)}\n"
            f"STDOUT:\n{e.stdout}\n\nSTDERR:\n{e.stderr}"
        )
    assert Path("pw.in").read_text(encoding="utf-8") == FE_SCF_TEXT


def test_kgrid_matches_rendered_uniform_card(capsys):
    assert main(["kgrid", "3", "2", "1"]) == 0
    card = make_k_points(make_fe_scf(k_points=pwi.CrystalUniform(nk=(3, 2, 1))))
    assert capsys.readouterr().out == card + "\n"
