from dataclasses import dataclass
import numpy as np

CHANNELS = ("r", "g", "b")

# Replacement for infinite n/k components.
MAX_INDEX = 1.0e3


def sanitize_nk(values, label="n", name="sample"):
    """
    Normalizes one n or k triplet at the input boundary.

    Non-finite components are replaced (NaN -> 0, inf -> MAX_INDEX) and negative
    components are clamped to 0, each with a warning. A wrong shape is a defect
    in the preset data and raises.
    """
    arr = np.array(values, dtype=float).reshape(-1)
    if arr.shape != (3,):
        raise ValueError(f"Error '{name}': {label} must have one value per channel (got {arr.size}).")

    if not np.all(np.isfinite(arr)):
        print(f"Warning '{name}': non-finite {label} values {arr.tolist()} replaced.")
        arr = np.nan_to_num(arr, nan=0.0, posinf=MAX_INDEX, neginf=0.0)

    if np.any(arr < 0):
        print(f"Warning '{name}': negative {label} values {arr.tolist()} clamped to 0.")
        arr = np.maximum(arr, 0.0)

    arr.setflags(write=False)
    return arr


@dataclass(frozen=True, eq=False)
class MetalPreset:
    """
    A named metal with its complex refractive index sampled at three wavelengths.

    Attributes:
        name (str): Display name of the metal.
        n (np.ndarray): Real part of the refractive index for red/green/blue.
        k (np.ndarray): Extinction coefficient for red/green/blue.
    """
    name: str
    n: np.ndarray
    k: np.ndarray

    def __post_init__(self):
        object.__setattr__(self, "n", sanitize_nk(self.n, "n", self.name))
        object.__setattr__(self, "k", sanitize_nk(self.k, "k", self.name))


class MaterialLib:
    """
    Central repository for metal presets (n, k at 0.65/0.55/0.45 um).
    Values sampled from https://refractiveindex.info.
    """

    PRESETS = (
        MetalPreset("Silver",   (0.052225, 0.059582, 0.040000), (4.4094, 3.5974, 2.6484)),
        MetalPreset("Gold",     (0.15557, 0.42415, 1.3831),     (3.6024, 2.4721, 1.9155)),
        MetalPreset("Copper",   (0.23780, 1.0066, 1.2404),      (3.6264, 2.5823, 2.3929)),
        MetalPreset("Aluminum", (1.5580, 1.0152, 0.63324),      (7.7124, 6.6273, 5.4544)),
        MetalPreset("Chromium", (3.1071, 3.1812, 2.3230),       (3.3314, 3.3291, 3.1350)),
        MetalPreset("Lead",     (2.5750, 2.5444, 2.1038),       (4.1612, 4.1823, 4.1890)),
        MetalPreset("Platinum", (0.47475, 0.46521, 0.63275),    (6.3329, 5.1073, 3.7481)),
        MetalPreset("Titanium", (0.25300, 0.28822, 0.52181),    (5.2796, 4.2122, 3.0367)),
        MetalPreset("Tungsten", (0.92074, 1.3437, 2.2323),      (6.8595, 5.2293, 5.1461)),
        MetalPreset("Iron",     (1.8247, 1.2246, 1.0205),       (7.6326, 5.9377, 4.3952)),
        MetalPreset("Vanadium", (0.43109, 0.60711, 0.91187),    (5.5575, 4.5217, 3.6035)),
        MetalPreset("Zinc",     (1.2338, 0.92943, 0.67767),     (5.8730, 4.9751, 4.0122)),
        MetalPreset("Nickel",   (1.3726, 1.0753, 1.1336),       (6.6273, 5.1763, 3.7544)),
        MetalPreset("Mercury",  (2.0733, 1.5523, 1.0606),       (5.3383, 4.6510, 3.8628)),
        MetalPreset("Cobalt",   (2.2371, 2.0524, 1.7365),       (4.2357, 3.8242, 3.2745)),
    )

    @staticmethod
    def names():
        return [p.name for p in MaterialLib.PRESETS]

    @staticmethod
    def get_preset(name):
        """Case-insensitive lookup. Raises KeyError for unknown metals."""
        key = name.strip().lower() if name else ""
        for preset in MaterialLib.PRESETS:
            if preset.name.lower() == key:
                return preset
        raise KeyError(f"Metal preset '{name}' not found. Available: {', '.join(MaterialLib.names())}")

    @staticmethod
    def get_color(channel):
        """Returns a Matplotlib color string for a wavelength channel."""
        return {"r": "tab:red", "g": "tab:green", "b": "tab:blue"}.get(channel, "lightgray")

    @staticmethod
    def encode_srgb(color):
        """Linear [0,1] color -> sRGB display encoding."""
        c = np.clip(np.asarray(color, dtype=float), 0.0, 1.0)
        return np.where(c <= 0.0031308, 12.92 * c, 1.055 * np.power(c, 1.0 / 2.4) - 0.055)

    @staticmethod
    def to_hex(color):
        """Linear color -> '#rrggbb' in web sRGB, for picking colors in a DCC color picker."""
        srgb = MaterialLib.encode_srgb(color)
        r, g, b = (int(v) for v in np.floor(srgb * 255.0 + 0.5))
        return f"#{r:02x}{g:02x}{b:02x}"
