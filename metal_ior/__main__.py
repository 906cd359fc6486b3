"""Command line interface: fit IOR values for the metal presets and write a CSV report."""
import argparse
from dataclasses import replace
from pathlib import Path

from .elements import FitSettings
from .materials import MaterialLib
from .system import PresetDriver
from .visualization import Draw


def parse_args(argv=None) -> argparse.Namespace:
    defaults = FitSettings()
    parser = argparse.ArgumentParser(description="Fit renderer IOR values that match measured metal reflectance")
    parser.add_argument("--csv", type=Path, default=Path("metal_presets.csv"), help="Output CSV report")
    parser.add_argument("--plots", type=Path, default=None, help="Directory for reflectance curve plots")
    parser.add_argument("--presets", nargs="+", default=None, help="Subset of presets to fit (default: all)")
    parser.add_argument("--step", type=float, default=defaults.ior_step, help="IOR grid spacing")
    parser.add_argument("--angles", type=int, default=defaults.angle_samples, help="Angle divisions for the fit")
    parser.add_argument("--workers", type=int, default=None, help="Fit presets on this many threads")
    parser.add_argument("--quiet", action="store_true", help="Suppress progress output")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    settings = replace(FitSettings(), ior_step=args.step, angle_samples=args.angles)

    presets = None
    if args.presets:
        presets = [MaterialLib.get_preset(name) for name in args.presets]

    driver = PresetDriver(presets, settings=settings, max_workers=args.workers)
    records = driver.run(verbose=not args.quiet)
    driver.write_csv(args.csv, records)
    if not args.quiet:
        print(f"✅ Report written to {args.csv}")

    if args.plots is not None:
        paths = Draw.save_all(driver, args.plots, records)
        if not args.quiet:
            print(f"✅ {len(paths)} plots written to {args.plots}")
    return records


if __name__ == "__main__":
    main()
