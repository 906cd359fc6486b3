import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import pytest

from metal_ior.elements import FitSettings


@pytest.fixture
def coarse_settings():
    return FitSettings(ior_step=0.01, angle_samples=50, report_samples=200)


@pytest.fixture(autouse=True)
def _close_figures():
    yield
    plt.close("all")
