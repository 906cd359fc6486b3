import numpy as np
import matplotlib.pyplot as plt

from .elements import FitSettings, FitResult
from .fresnel import complex_fresnel_rgb, approximate, reference_approx
from .materials import sanitize_nk

# Largest squared distance between two colors in [0,1]^3. Non-finite samples count as this.
MAX_SAMPLE_ERROR = 3.0


def _plot_results(x_data, y_data, best_x, title, xlabel, ylabel):
    """Helper to generate clean, toolbar-free plots."""
    fig, ax = plt.subplots(figsize=(6, 3))
    ax.plot(x_data, y_data, '-', color='C0')
    ax.axvline(best_x, color='r', linestyle='--', label='Best IOR')
    ax.set_title(title); ax.set_xlabel(xlabel); ax.set_ylabel(ylabel)
    ax.grid(True); ax.legend(); fig.tight_layout()
    if hasattr(fig.canvas, 'toolbar_visible'):
        fig.canvas.toolbar_visible = fig.canvas.header_visible = fig.canvas.footer_visible = False
    plt.show()
    return fig


def sample_errors(model_colors, physical_colors):
    """Squared color distance per angle sample, with non-finite samples replaced by MAX_SAMPLE_ERROR."""
    with np.errstate(invalid="ignore", over="ignore"):
        err = np.sum((np.asarray(model_colors) - np.asarray(physical_colors)) ** 2, axis=-1)
    return np.where(np.isfinite(err), err, MAX_SAMPLE_ERROR)


def curve_rmse(model_colors, physical_colors, count=None):
    """
    Root-mean-square color distance between two sampled curves.
    count overrides the normalization (the report divides by the number of divisions).
    """
    err = sample_errors(model_colors, physical_colors)
    count = err.shape[-1] if count is None else count
    return float(np.sqrt(np.sum(err, axis=-1) / count))


def error_landscape(n, k, settings=None):
    """
    Accumulated squared error of the production approximation against the
    physical curve for every IOR candidate.

    Returns:
        (np.ndarray, np.ndarray): IOR grid and the matching error sums.
    """
    settings = FitSettings() if settings is None else settings
    iors = settings.ior_grid()
    cos_vals = settings.angle_grid()

    base = complex_fresnel_rgb(n, k, 1.0)
    grazing = complex_fresnel_rgb(n, k, 0.0)
    physical = complex_fresnel_rgb(n, k, cos_vals)

    sums = np.empty(len(iors))
    for start in range(0, len(iors), settings.chunk_size):
        chunk = iors[start:start + settings.chunk_size]
        model = approximate(base, grazing, chunk[:, None], cos_vals)
        sums[start:start + len(chunk)] = np.sum(sample_errors(model, physical), axis=-1)

    return iors, sums


def find_ior(n, k, settings=None, name="sample", verbose=False, show_plot=False):
    """
    Finds the IOR whose production-approximation curve is closest (least squares
    over the interior view angles) to the physical reflectance of (n, k).

    Every candidate of the uniform grid is evaluated; the first candidate with
    the smallest error wins, so the result is reproducible.
    """
    settings = FitSettings() if settings is None else settings
    n = sanitize_nk(n, "n", name)
    k = sanitize_nk(k, "k", name)

    if verbose:
        print(f"--- Fitting IOR for {name} ---")

    iors, sums = error_landscape(n, k, settings)
    best_idx = int(np.argmin(sums))
    best_ior, best_sum = float(iors[best_idx]), float(sums[best_idx])

    cos_vals = settings.angle_grid()
    physical = complex_fresnel_rgb(n, k, cos_vals)
    reference = reference_approx(complex_fresnel_rgb(n, k, 1.0), complex_fresnel_rgb(n, k, 0.0), cos_vals)

    result = FitResult(
        ior=best_ior,
        production_rmse=float(np.sqrt(best_sum / len(cos_vals))),
        reference_rmse=curve_rmse(reference, physical),
        error_sum=best_sum,
    )

    if verbose:
        print(f"✅ Best IOR: {result.ior:.3f} (RMSE: {result.production_rmse:.6f}, "
              f"reference RMSE: {result.reference_rmse:.6f})")
    if show_plot:
        _plot_results(iors, sums, best_ior, f"{name} IOR Fit", "IOR", "Sum of Squared Error")

    return result
