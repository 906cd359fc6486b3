from dataclasses import dataclass
import numpy as np

from .materials import MaterialLib


class FitConfigurationError(ValueError):
    """Raised before a sweep starts when the IOR grid or angle sampling is unusable."""


@dataclass(frozen=True)
class FitSettings:
    """
    Sampling configuration for the IOR search.

    Attributes:
        search:
            ior_min (float): First IOR candidate. Must be > 1.
            ior_max (float): Exclusive upper bound of the candidates.
            ior_step (float): Spacing of the candidate grid.

        sampling:
            angle_samples (int): Divisions of the cosine range. The fit uses the
                interior cosines i/angle_samples for i = 1 .. angle_samples-1.
            report_samples (int): Same, for the denser curves used in reports and plots.

        performance:
            chunk_size (int): Number of IOR candidates evaluated per vectorized batch.
    """
    # --- SEARCH ---
    ior_min: float = 1.001
    ior_max: float = 10.0
    ior_step: float = 0.001

    # --- SAMPLING ---
    angle_samples: int = 200
    report_samples: int = 1600

    # --- PERFORMANCE ---
    chunk_size: int = 500

    def __post_init__(self):
        """Rejects configurations that cannot produce a minimum."""
        for label in ("ior_min", "ior_max", "ior_step"):
            if not np.isfinite(getattr(self, label)):
                raise FitConfigurationError(f"Error: {label} must be finite.")

        if self.ior_min <= 1.0:
            raise FitConfigurationError(f"Error: ior_min={self.ior_min} must be greater than 1.")
        if self.ior_step <= 0:
            raise FitConfigurationError(f"Error: ior_step={self.ior_step} must be positive.")
        if self.ior_max <= self.ior_min:
            raise FitConfigurationError(
                f"Error: empty IOR grid (ior_min={self.ior_min}, ior_max={self.ior_max})."
            )
        if self.angle_samples < 2:
            raise FitConfigurationError(
                f"Error: angle_samples={self.angle_samples} leaves no interior angle to compare."
            )
        if self.report_samples < 2:
            raise FitConfigurationError(f"Error: report_samples={self.report_samples} must be >= 2.")
        if self.chunk_size < 1:
            raise FitConfigurationError(f"Error: chunk_size={self.chunk_size} must be >= 1.")

    def ior_grid(self):
        """Uniform candidates ior_min, ior_min+step, ... strictly below ior_max."""
        count = int(np.floor((self.ior_max - self.ior_min) / self.ior_step)) + 1
        grid = self.ior_min + self.ior_step * np.arange(count)
        # Rounding can land the last index on ior_max itself
        return grid[grid < self.ior_max - 1e-9 * self.ior_step]

    def angle_grid(self):
        return np.arange(1, self.angle_samples) / float(self.angle_samples)

    def report_grid(self):
        return np.arange(1, self.report_samples) / float(self.report_samples)


@dataclass(frozen=True)
class FitResult:
    """Outcome of one IOR search. error_sum is the winning accumulated squared error."""
    ior: float
    production_rmse: float
    reference_rmse: float
    error_sum: float


@dataclass(frozen=True, eq=False)
class PresetRecord:
    """
    One line of the preset report.

    Attributes:
        name (str): Preset name.
        base (np.ndarray): Reflectance at normal incidence (cos = 1).
        grazing (np.ndarray): Reflectance at grazing incidence (cos = 0).
        ior (float): Fitted IOR for the production approximation.
        production_rmse (float): RMS deviation of the production curve from the physical one.
        reference_rmse (float): Same for the reference (artist-friendly) approximation.
        n (np.ndarray): Refractive index the record was fitted from.
        k (np.ndarray): Extinction coefficient the record was fitted from.
    """
    name: str
    base: np.ndarray
    grazing: np.ndarray
    ior: float
    production_rmse: float
    reference_rmse: float
    n: np.ndarray
    k: np.ndarray

    @property
    def base_srgb_hex(self):
        return MaterialLib.to_hex(self.base)

    def as_row(self):
        """Flat dict for tabular reports. Colors are floored to 0-255 like a color picker shows them."""
        row = {"name": self.name}
        for prefix, color in (("base", self.base), ("reflection", self.grazing)):
            for channel, value in zip(("r", "g", "b"), color):
                row[f"{prefix}_{channel}"] = int(np.floor(value * 255.0))
        row["ior"] = self.ior
        row["srgb_hex"] = self.base_srgb_hex
        row["production_rmse"] = self.production_rmse
        row["reference_rmse"] = self.reference_rmse
        return row
