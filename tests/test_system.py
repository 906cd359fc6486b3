import numpy as np
import pandas as pd
import pytest

from metal_ior.fresnel import complex_fresnel_rgb
from metal_ior.materials import MaterialLib, MetalPreset, CHANNELS
from metal_ior.optimization import find_ior
from metal_ior.system import PresetDriver

SUBSET = [MaterialLib.get_preset(name) for name in ("Gold", "Silver", "Copper", "Chromium")]


@pytest.fixture
def driver(coarse_settings):
    return PresetDriver(SUBSET, settings=coarse_settings)


def test_records_follow_table_order(driver):
    records = driver.run(verbose=False)
    assert [r.name for r in records] == ["Gold", "Silver", "Copper", "Chromium"]
    assert driver.records == records


def test_records_match_fitter(driver, coarse_settings):
    records = driver.run(verbose=False)
    gold = SUBSET[0]
    fit = find_ior(gold.n, gold.k, coarse_settings)
    assert records[0].ior == fit.ior
    assert records[0].production_rmse == fit.production_rmse
    assert records[0].reference_rmse == fit.reference_rmse
    np.testing.assert_allclose(records[0].grazing, 1.0)
    assert np.all(records[0].base < 1.0)


def test_table_is_not_mutated(driver):
    before = [(p.name, p.n.copy(), p.k.copy()) for p in driver.presets]
    driver.run(verbose=False)
    for (name, n, k), preset in zip(before, driver.presets):
        assert preset.name == name
        np.testing.assert_array_equal(preset.n, n)
        np.testing.assert_array_equal(preset.k, k)
    assert driver.presets[0] is SUBSET[0]


def test_parallel_matches_sequential(coarse_settings):
    sequential = PresetDriver(SUBSET, settings=coarse_settings).run(verbose=False)
    parallel = PresetDriver(SUBSET, settings=coarse_settings, max_workers=3).run(verbose=False)
    for a, b in zip(sequential, parallel):
        assert a.name == b.name
        assert a.ior == b.ior
        assert a.production_rmse == b.production_rmse
        assert a.reference_rmse == b.reference_rmse


def test_default_table(coarse_settings):
    driver = PresetDriver(settings=coarse_settings)
    assert len(driver.presets) == len(MaterialLib.PRESETS)


def test_verbose_progress(driver, capsys):
    driver.run(verbose=True)
    out = capsys.readouterr().out
    assert "--- Fitting 4 metal presets ---" in out
    assert "--- Fitting IOR for Chromium ---" in out


def test_sample_curves(driver, coarse_settings):
    record = driver.run(verbose=False)[0]
    df = driver.sample_curves(record)
    assert len(df) == coarse_settings.report_samples - 1
    assert {"cos", "physical_r", "production_g", "reference_b"} <= set(df.columns)
    assert df["cos"].between(0, 1, inclusive="neither").all()


def test_report_errors(driver):
    records = driver.run(verbose=False)
    for rec in records:
        production, reference = driver.report_errors(rec)
        assert np.isfinite(production) and production >= 0
        assert np.isfinite(reference) and reference >= 0


def test_same_named_presets_keep_their_own_curves(coarse_settings):
    gold, lead = MaterialLib.get_preset("Gold"), MaterialLib.get_preset("Lead")
    table = [MetalPreset("Sample", gold.n, gold.k), MetalPreset("Sample", lead.n, lead.k)]
    driver = PresetDriver(table, settings=coarse_settings)
    records = driver.run(verbose=False)

    for rec, source in zip(records, (gold, lead)):
        df = driver.sample_curves(rec)
        physical = df[[f"physical_{c}" for c in CHANNELS]].values
        np.testing.assert_allclose(physical, complex_fresnel_rgb(source.n, source.k, df["cos"].values))


def test_report_records_from_another_driver(coarse_settings):
    source = PresetDriver(SUBSET[:1], settings=coarse_settings)
    gold_records = source.run(verbose=False)
    other = PresetDriver([MaterialLib.get_preset("Silver")], settings=coarse_settings)
    df = other.to_dataframe(gold_records)
    assert list(df["name"]) == ["Gold"]
    assert df["production_error"].iloc[0] == pytest.approx(source.report_errors(gold_records[0])[0])


def test_sample_curves_resolution(driver, coarse_settings):
    record = driver.run(verbose=False)[0]
    np.testing.assert_array_equal(driver.sample_curves(record)["cos"].values, coarse_settings.report_grid())
    assert len(driver.sample_curves(record, samples=10)) == 9


def test_dataframe_and_csv(driver, tmp_path):
    driver.run(verbose=False)
    df = driver.to_dataframe()
    assert list(df["name"]) == ["Gold", "Silver", "Copper", "Chromium"]
    for column in ("base_r", "reflection_b", "ior", "srgb_hex", "production_rmse", "reference_error"):
        assert column in df.columns
    assert (df["reflection_r"] == 255).all()
    assert df["srgb_hex"].str.match(r"^#[0-9a-f]{6}$").all()

    path = tmp_path / "out" / "metal_presets.csv"
    written = driver.write_csv(path)
    loaded = pd.read_csv(path)
    assert len(loaded) == len(written) == 4
    np.testing.assert_allclose(loaded["ior"], written["ior"])
