import matplotlib.pyplot as plt
import pytest

from metal_ior import visualization
from metal_ior.materials import MaterialLib
from metal_ior.system import PresetDriver
from metal_ior.visualization import Draw


@pytest.fixture
def fitted(coarse_settings):
    driver = PresetDriver([MaterialLib.get_preset("Gold"), MaterialLib.get_preset("Zinc")],
                          settings=coarse_settings)
    driver.run(verbose=False)
    return driver


def test_draw_curves(fitted):
    fig = Draw.draw_curves(fitted, fitted.records[0], show_plot=False)
    ax = fig.axes[0]
    assert len(ax.lines) == 9
    assert "Gold" in ax.get_title()
    labels = [t.get_text() for t in ax.get_legend().get_texts()]
    assert labels == ["Production", "Reference", "Physical"]


def test_draw_curves_on_existing_axes(fitted):
    fig, ax = plt.subplots()
    assert Draw.draw_curves(fitted, fitted.records[1], ax=ax, show_plot=False) is fig


def test_save_all(fitted, tmp_path):
    paths = Draw.save_all(fitted, tmp_path / "plots")
    assert [p.name for p in paths] == ["gold.png", "zinc.png"]
    assert all(p.stat().st_size > 0 for p in paths)


def test_interactive_session(fitted, monkeypatch, capsys):
    displayed = []
    monkeypatch.setattr(visualization, "display", displayed.append)
    monkeypatch.setattr(plt, "show", lambda: None)
    ui = Draw.interactive_session(fitted)
    assert displayed == [ui]


def test_interactive_session_without_records(coarse_settings, capsys):
    driver = PresetDriver(settings=coarse_settings)
    assert Draw.interactive_session(driver) is None
    assert "Warning" in capsys.readouterr().out
