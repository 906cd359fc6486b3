from pathlib import Path
import matplotlib.pyplot as plt
import ipywidgets as widgets
from IPython.display import display

from .materials import MaterialLib, CHANNELS


class Draw:
    """
    Static helper class for plotting reflectance curves with Matplotlib.
    Production curve solid, reference curve short-dashed, physical curve long-dashed.
    """

    LINE_STYLES = {
        "production": "-",
        "reference": (0, (2, 2)),
        "physical": (0, (8, 4)),
    }

    @staticmethod
    def draw_curves(driver, record, ax=None, show_plot=True, samples=None):
        """Plots the three reflectance curves of one fitted preset against the view cosine."""
        if ax is None:
            fig, ax = plt.subplots(figsize=(6, 4.5))
        else:
            fig = ax.figure

        df = driver.sample_curves(record, samples)
        for model, style in Draw.LINE_STYLES.items():
            for channel in CHANNELS:
                ax.plot(df["cos"], df[f"{model}_{channel}"], linestyle=style,
                        color=MaterialLib.get_color(channel), linewidth=1.2,
                        label=model.capitalize() if channel == "r" else None)

        ax.set_xlim(0, 1); ax.set_ylim(0, 1)
        ax.set_xlabel("cos(theta)"); ax.set_ylabel("Reflectance")
        ax.set_title(f"{record.name}  (IOR {record.ior:.3f})")
        ax.grid(True, alpha=0.3); ax.legend(loc="lower left")

        if show_plot:
            plt.show()
        return fig

    @staticmethod
    def save_all(driver, out_dir, records=None, dpi=150):
        """Saves one PNG per record. Returns the written paths."""
        out_dir = Path(out_dir)
        out_dir.mkdir(parents=True, exist_ok=True)
        records = driver.records if records is None else records

        paths = []
        for rec in records:
            fig = Draw.draw_curves(driver, rec, show_plot=False)
            path = out_dir / f"{rec.name.lower()}.png"
            fig.savefig(path, dpi=dpi)
            plt.close(fig)
            paths.append(path)
        return paths

    @staticmethod
    def interactive_session(driver, records=None):
        """Notebook browser: pick a preset with a slider and see its curves."""
        records = driver.records if records is None else records
        if not records:
            print("Warning: no fitted presets. Run the driver first.")
            return None

        def update_view(preset_idx):
            rec = records[preset_idx]
            Draw.draw_curves(driver, rec, show_plot=True)
            print(f"Base {rec.base_srgb_hex} | IOR {rec.ior:.3f} | "
                  f"error {rec.production_rmse:.6f} | reference {rec.reference_rmse:.6f}")

        s_preset = widgets.IntSlider(min=0, max=len(records) - 1, step=1, value=0, description='Preset:')
        ui = widgets.interactive(update_view, preset_idx=s_preset)
        display(ui)
        return ui
