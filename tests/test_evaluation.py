import json
import sys
from pathlib import Path

import numpy as np
import pytest

_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from spnlab.cipher.cryptanalysis import (
    avalanche_key,
    avalanche_plaintext,
    evaluate_cipher,
    flip_bit,
    hamming_distance,
    sbox_ddt,
    sbox_ddt_max,
    sbox_lat,
    sbox_lat_max_abs,
)
from spnlab.cipher.sbox import FieldSBox
from spnlab.evaluation import (
    analyze_sbox,
    build_report,
    component_tables,
    compute_sac,
    run_all_roundtrips,
    run_block_roundtrip,
    run_mode_roundtrip,
)
from spnlab.utils.repro import make_run_dir, read_json, write_json
from spnlab.errors import ErrorKind, InvalidArgumentError, OutOfRangeError


# ---------------------------------------------------------------------------
# Cryptanalysis primitives
# ---------------------------------------------------------------------------

def test_bit_helpers():
    assert hamming_distance(0x00FF, 0x0F0F) == 8
    assert flip_bit(0x0000, 15) == 0x8000
    with pytest.raises(OutOfRangeError) as excinfo:
        flip_bit(0, 16)
    assert excinfo.value.kind is ErrorKind.RANGE
    with pytest.raises(IndexError):
        flip_bit(0, -1)


def test_sbox_is_affine():
    table = FieldSBox(4).table()
    ddt = sbox_ddt(table)
    assert ddt[0, 0] == 16
    assert sbox_ddt_max(table) == 16
    assert sbox_lat_max_abs(table) == 16
    with pytest.raises(InvalidArgumentError):
        sbox_ddt(table[:8])
    with pytest.raises(InvalidArgumentError):
        sbox_lat(table + table)


def test_avalanche_is_deterministic():
    a = avalanche_plaintext(trials=20, seed=7)
    b = avalanche_plaintext(trials=20, seed=7)
    assert a == b
    assert 0.0 < a["mean"] <= 1.0
    assert 0.0 <= avalanche_key(trials=20, seed=7)["mean"] <= 1.0
    summary = evaluate_cipher(trials=10)
    assert summary["block_size_bits"] == 16
    assert summary["rounds"] == 5


# ---------------------------------------------------------------------------
# Evaluation harness
# ---------------------------------------------------------------------------

def test_block_roundtrip_is_perfect():
    result = run_block_roundtrip(num_vectors=200, seed=3)
    assert result.is_perfect
    assert result.success_rate == 1.0
    assert "PASS" in result.summary()


@pytest.mark.parametrize("mode", ["ECB", "CBC", "CTR"])
def test_mode_roundtrip_is_perfect(mode):
    result = run_mode_roundtrip(mode, num_messages=20, max_blocks=40, seed=5)
    assert result.target == mode
    assert result.is_perfect


def test_run_all_roundtrips():
    results = run_all_roundtrips(num_vectors=30, seed=11)
    assert [r.target for r in results] == ["block", "ECB", "CBC", "CTR"]
    assert all(r.is_perfect for r in results)


def test_plaintext_sac_is_key_independent():
    # an affine cipher maps each input-bit flip to one fixed output difference
    result = compute_sac(input_type="plaintext", trials=8, seed=1)
    assert len(result.flip_matrix) == 16
    assert all(len(row) == 16 for row in result.flip_matrix)
    assert {p for row in result.flip_matrix for p in row} <= {0.0, 1.0}
    assert not result.passes_sac


def test_key_sac_shape():
    calls = []
    result = compute_sac(input_type="key", trials=4, seed=1, progress_callback=lambda i, n: calls.append(i))
    assert calls == list(range(16))
    assert len(result.per_input_bit_mean) == 16
    assert 0.0 <= result.min_bit_prob <= result.max_bit_prob <= 1.0
    with pytest.raises(ValueError):
        compute_sac(input_type="iv")


def test_analyze_sbox():
    result = analyze_sbox()
    assert result.is_bijective
    assert result.ddt_max == 16
    assert result.lat_max_abs == 16
    assert result.differential_uniformity == "poor"
    assert result.linearity == "poor"
    assert result.fixed_points == [8]


def test_component_tables():
    tables = component_tables(0x1234)
    assert tables["sbox"]["forward"][0] == 14
    assert tables["permutation"]["forward"][0] == 7
    assert tables["key_schedule"]["round_keys"] == ["0x2345", "0x68AC", "0xE6F5", "0xB837", "0x948C"]
    assert tables["key_schedule"]["inverse_round_keys"][-1] == "0x1234"


def test_build_report(tmp_path):
    steps = []
    report = build_report(
        num_vectors=20,
        sac_trials=2,
        seed=9,
        progress_callback=lambda name, i, n: steps.append(name),
    )
    assert steps == ["roundtrip", "sac:plaintext", "sac:key", "sbox"]
    assert report.failing_targets() == []

    data = report.to_dict()
    assert data["summary"]["roundtrip_all_pass"] is True
    assert data["sbox"]["fixed_points"] == [8]
    json.dumps(data)
    assert "Roundtrip Tests: 4/4 targets pass" in report.to_summary()

    paths = make_run_dir(tmp_path, "unit test")
    write_json(paths.report_json, data)
    assert read_json(paths.report_json)["tables"]["key_schedule"]["master_key"] == "0x1234"
    assert paths.run_dir.name.endswith("unit_test")


def test_write_json_converts_numpy(tmp_path):
    table = FieldSBox(4).table()
    paths = make_run_dir(tmp_path, "ddt")
    write_json(paths.tables_json, {"ddt": sbox_ddt(table), "max": np.int64(16), "mean": np.float64(0.5)})
    data = read_json(paths.tables_json)
    assert data["max"] == 16
    assert data["mean"] == 0.5
    assert len(data["ddt"]) == 16 and data["ddt"][0][0] == 16
