from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
import numpy as np
import pandas as pd

from .elements import FitSettings, PresetRecord
from .fresnel import complex_fresnel_rgb, approximate, reference_approx
from .materials import MaterialLib, CHANNELS
from .optimization import find_ior, curve_rmse


class PresetDriver:
    """
    Runs the IOR fit over a table of metal presets and collects one record per
    preset, in table order. The table itself is never modified.
    """
    def __init__(self, presets=None, settings: FitSettings = None, max_workers: int = None):
        self.presets = tuple(MaterialLib.PRESETS if presets is None else presets)
        self.settings = FitSettings() if settings is None else settings
        self.max_workers = max_workers
        self.records = ()

    def fit_preset(self, preset, verbose=False) -> PresetRecord:
        """Fits a single preset."""
        fit = find_ior(preset.n, preset.k, self.settings, name=preset.name, verbose=verbose)
        return PresetRecord(
            name=preset.name,
            base=complex_fresnel_rgb(preset.n, preset.k, 1.0),
            grazing=complex_fresnel_rgb(preset.n, preset.k, 0.0),
            ior=fit.ior,
            production_rmse=fit.production_rmse,
            reference_rmse=fit.reference_rmse,
            n=preset.n,
            k=preset.k,
        )

    def run(self, verbose=True):
        """Fits every preset. With max_workers > 1 presets are fitted concurrently; order is kept."""
        if verbose:
            print(f"--- Fitting {len(self.presets)} metal presets ---")

        if self.max_workers and self.max_workers > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                records = tuple(executor.map(lambda p: self.fit_preset(p, verbose=False), self.presets))
            if verbose:
                for rec in records:
                    print(f"   {rec.name:<10} IOR={rec.ior:.3f}  error={rec.production_rmse:.6f}  "
                          f"reference={rec.reference_rmse:.6f}")
        else:
            records = tuple(self.fit_preset(p, verbose=verbose) for p in self.presets)

        self.records = records
        return records

    # ------------------------------------------------------------------
    #   REPORTING
    # ------------------------------------------------------------------

    def sample_curves(self, record, samples=None):
        """
        Physical, production and reference curves of one record at report resolution.
        Returns a DataFrame with a 'cos' column and '<model>_<channel>' columns.
        """
        if samples is None:
            cos_vals = self.settings.report_grid()
        else:
            cos_vals = np.arange(1, samples) / float(samples)

        curves = {
            "physical": complex_fresnel_rgb(record.n, record.k, cos_vals),
            "production": approximate(record.base, record.grazing, record.ior, cos_vals),
            "reference": reference_approx(record.base, record.grazing, cos_vals),
        }
        data = {"cos": cos_vals}
        for model, colors in curves.items():
            for i, channel in enumerate(CHANNELS):
                data[f"{model}_{channel}"] = colors[:, i]
        return pd.DataFrame(data)

    def report_errors(self, record, samples=None):
        """
        RMS errors of both approximations over the dense report curve. The sum runs
        over the interior samples and is normalized by the number of divisions.
        """
        samples = self.settings.report_samples if samples is None else samples
        df = self.sample_curves(record, samples)
        physical = df[[f"physical_{c}" for c in CHANNELS]].values
        production = df[[f"production_{c}" for c in CHANNELS]].values
        reference = df[[f"reference_{c}" for c in CHANNELS]].values
        return curve_rmse(production, physical, count=samples), curve_rmse(reference, physical, count=samples)

    def to_dataframe(self, records=None):
        records = self.records if records is None else records
        rows = []
        for rec in records:
            row = rec.as_row()
            row["production_error"], row["reference_error"] = self.report_errors(rec)
            rows.append(row)
        return pd.DataFrame(rows)

    def write_csv(self, path, records=None):
        """Writes the preset report as CSV and returns the written DataFrame."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        df = self.to_dataframe(records)
        df.to_csv(path, index=False)
        return df
