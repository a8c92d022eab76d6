"""
Speed Reconstruction Simulation Main Script
===========================================

CLI-driven main script for studying how a speed signal sent every 105 ms is
reconstructed every 20 ms by linear extrapolation from the last two samples.

Use-cases (selectable via CLI or run all):
    1. Single run: speed/distance charts, metrics and jerk harness parameters
    2. Duration sweep: peak deviation and stabilization time vs ramp duration
    3. Jerk sweep: peak deviation vs Bezier jerk factor
    4. Scenario table: metrics for every row of data/scenarios.csv

To add new use-cases, define a new function and add to the USE_CASES dict.
CLI Usage Examples:

# Run the default single_run case with config/baseline.json
python scripts/main.py

# Override the ramp from the command line
python scripts/main.py --start-speed 0 --end-speed 30 --duration 1000

# Same ramp as a jerk-limited Bezier S-curve
python scripts/main.py --end-speed 30 --duration 1000 --jerk

# Run all use-cases and generate a PDF report
python scripts/main.py --usecase all --pdf-report

# Change logging verbosity
python scripts/main.py --loglevel DEBUG

NOTE:
- All config files should be placed in the config/ directory at the project base.
- Scenario tables should be in data/scenarios.csv.
- Results and PDF reports are auto-named and stored in the results/ directory.
"""

import argparse
import logging
import json
from pathlib import Path
import datetime
import sys

import numpy as np
from fpdf import FPDF

from motion_profile import MotionProfile, ValidationError
from simulator import simulate
from jerk import format_harness_block
from analysis import (
    sweep_duration, sweep_jerk_factor, sweep_duration_end_speed,
    analyze_scenarios_from_csv,
)
from plotter import (
    plot_speed_reconstruction,
    plot_distance_and_speed,
    plot_duration_sweep,
    plot_jerk_factor_sweep,
    plot_duration_end_speed_heatmap,
    plot_scenario_deviation_bar,
)
# =============================
# DEFAULT RUN SETTINGS
# =============================
DEFAULT_SETTINGS = {
    "base_dir": Path(__file__).resolve().parents[1],
    "config": "baseline.json",
    "usecase": ["single_run"],
    "pdf_report": False,
    "loglevel": "INFO",
}


# =======================
# 1. CONFIGURATION UTILS
# =======================

def load_config(config_path: Path) -> dict:
    """Load and validate a JSON configuration file."""
    try:
        with open(config_path, "r") as f:
            config = json.load(f)
    except FileNotFoundError:
        logging.error(f"Config file not found: {config_path}")
        sys.exit(1)
    except json.JSONDecodeError:
        logging.error(f"Config file is not valid JSON: {config_path}")
        sys.exit(1)
    if "profile" not in config:
        logging.error(f"Config file has no 'profile' section: {config_path}")
        sys.exit(1)
    return config

def setup_dirs(base_dir: Path) -> dict:
    """Create and return all working subdirectories."""
    dirs = {
        "config": base_dir / "config",
        "results": base_dir / "results",
        "single_run": base_dir / "results" / "single_run",
        "sweeps": base_dir / "results" / "sweeps",
        "data": base_dir / "data",
    }
    for d in dirs.values():
        d.mkdir(parents=True, exist_ok=True)
    return dirs

# ==============================
# 2. EXPERIMENT UTILITY FUNCTIONS
# ==============================

def build_profile(config: dict, overrides: dict) -> MotionProfile:
    """Create a motion profile from the config 'profile' section and CLI overrides."""
    section = dict(config["profile"])
    section.update({k: v for k, v in overrides.items() if v is not None})
    return MotionProfile(
        name=config.get("name", "Vehicle"),
        start_speed=float(section.get("start_speed", 0)),
        end_speed=float(section.get("end_speed", 100)),
        duration_ms=float(section.get("duration_ms", 1000)),
        use_jerk=bool(section.get("use_jerk", False)),
        initial_jerk_factor=float(section.get("initial_jerk_factor", 0.3)),
        final_jerk_factor=float(section.get("final_jerk_factor", 0.3)),
        color="green" if section.get("use_jerk") else "blue",
    )

def print_metrics(result):
    p = result.profile
    m = result.metrics
    print(f"\n[{p.name} RAMP]")
    print(f"  Start Speed      : {p.start_speed:.2f} km/h")
    print(f"  End Speed        : {p.end_speed:.2f} km/h")
    print(f"  Duration         : {p.duration_ms:.0f} ms")
    print(f"  Sender / Receiver: {p.sender_interval_ms:g} ms / {p.receiver_interval_ms:g} ms")
    print(f"  Profile          : {'Bezier S-curve' if p.use_jerk else 'Linear'}")

    print(f"\n[{p.name} RECONSTRUCTION METRICS]")
    print(f"  Acceleration     : {m.acceleration_kmh_per_ms:.4f} km/h/ms "
          f"({m.acceleration_kmh_per_s:.2f} km/h/s, {m.acceleration:.2f} m/s²)")
    if m.accelerating:
        print(f"  Max Overshoot    : {m.max_overshoot:.2f} km/h ({m.deviation_percent:.2f}% of end speed)")
    else:
        print(f"  Max Undershoot   : {m.max_undershoot:.2f} km/h ({m.deviation_percent:.2f}% of start speed)")
    print(f"  Duration Distance: {m.duration_distance:.3f} m")
    print(f"  Total Distance   : {m.total_distance:.3f} m")
    if m.stabilized:
        print(f"  Stabilization    : {m.stabilization_time:.0f} ms after {m.stabilization_distance:.3f} m")
    else:
        print("  Stabilization    : not reached within the simulated horizon")
    if result.jerk is not None:
        print(f"  Jerk A / Jerk B  : {m.jerk_a:.4f} / {m.jerk_b:.4f} m/s³")
        print("\n[PHYSICAL JERK MOTION PARAMETERS]")
        print(format_harness_block(p, result.jerk))
    print()

# ==========================
# 3. USE-CASE IMPLEMENTATION
# ==========================

def usecase_single_run(config, dirs, params):
    """Simulate one ramp, print its metrics and chart the reconstruction."""
    logging.info("Running use-case: Single Run")
    result = simulate(params["profile"])
    print_metrics(result)

    csv_path = dirs["single_run"] / "reconstruction.csv"
    result.to_frame().to_csv(csv_path, index=False)
    logging.info(f"Receiver-rate series saved to: {csv_path}")

    plot_speed_reconstruction(result, dirs["single_run"])
    plot_distance_and_speed(result, dirs["single_run"])

def usecase_duration_sweep(config, dirs, params):
    """Sweep ramp duration, and duration x end speed, for the configured ramp."""
    logging.info("Running use-case: Duration Sweep")
    profile = params["profile"]
    duration_range = np.linspace(*config.get("duration_sweep", [200, 3000, 15]))
    durations, deviations, stab_times = sweep_duration(profile, duration_range)
    plot_duration_sweep(durations, deviations, stab_times, profile.name, profile.color, dirs["sweeps"])

    end_speed_range = np.linspace(*config.get("end_speed_sweep", [10, 150, 15]))
    D, E, Z = sweep_duration_end_speed(profile, duration_range, end_speed_range)
    plot_duration_end_speed_heatmap(D, E, Z, profile.name, dirs["sweeps"])

def usecase_jerk_sweep(config, dirs, params):
    """Sweep the Bezier jerk factors for the configured ramp."""
    logging.info("Running use-case: Jerk Factor Sweep")
    profile = params["profile"]
    factor_range = np.linspace(*config.get("jerk_factor_sweep", [0.05, 1.0, 20]))
    factors, deviations = sweep_jerk_factor(profile, factor_range)
    plot_jerk_factor_sweep(factors, deviations, profile.name, "green", dirs["sweeps"])

def usecase_scenario_table(config, dirs, params):
    """Simulate every scenario of data/scenarios.csv and chart the deviations."""
    logging.info("Running use-case: Scenario Table Analysis")
    csv_path = dirs["data"] / "scenarios.csv"
    if not csv_path.exists():
        logging.error(f"Scenario table not found: {csv_path}")
        return
    scenarios = analyze_scenarios_from_csv(csv_path)
    if scenarios.empty:
        logging.warning("Scenario table produced no valid scenarios")
        return
    out_path = dirs["results"] / "scenario_metrics.csv"
    scenarios.to_csv(out_path, index=False)
    logging.info(f"Scenario metrics saved to: {out_path}")
    plot_scenario_deviation_bar(scenarios, dirs["sweeps"])

# Register use-cases
USE_CASES = {
    "single_run": usecase_single_run,
    "duration_sweep": usecase_duration_sweep,
    "jerk_sweep": usecase_jerk_sweep,
    "scenario_table": usecase_scenario_table,
}

# ========================
# 4. REPORT GENERATION
# ========================

CHART_SECTIONS = {
    "single_run": "Single Run Charts",
    "sweeps": "Sweep and Scenario Charts",
}

def report_inputs(config_path, profile) -> dict:
    """Ramp inputs as label -> text, in report order."""
    inputs = {
        "Config File": Path(config_path).name,
        "Start Speed (km/h)": f"{profile.start_speed:g}",
        "End Speed (km/h)": f"{profile.end_speed:g}",
        "Duration (ms)": f"{profile.duration_ms:g}",
        "Sender / Receiver Interval (ms)": f"{profile.sender_interval_ms:g} / {profile.receiver_interval_ms:g}",
        "Profile": "Bezier S-curve" if profile.use_jerk else "Linear",
    }
    if profile.use_jerk:
        inputs["Initial / Final Jerk Factor"] = f"{profile.initial_jerk_factor:g} / {profile.final_jerk_factor:g}"
    return inputs

def report_metrics(result) -> dict:
    """Reconstruction metrics as label -> text, in report order."""
    m = result.metrics
    if m.accelerating:
        deviation_label = "Max Overshoot (km/h)"
        deviation = f"{m.max_overshoot:.3f} ({m.deviation_percent:.2f}% of end speed)"
    else:
        deviation_label = "Max Undershoot (km/h)"
        deviation = f"{m.max_undershoot:.3f} ({m.deviation_percent:.2f}% of start speed)"
    metrics = {
        "Acceleration (m/s^2)": f"{m.acceleration:.3f}",
        "Acceleration (km/h/s)": f"{m.acceleration_kmh_per_s:.2f}",
        deviation_label: deviation,
        "Duration Distance (m)": f"{m.duration_distance:.3f}",
        "Total Distance (m)": f"{m.total_distance:.3f}",
        "Stabilization Time (ms)": f"{m.stabilization_time:.0f}" if m.stabilized else "not reached",
        "Stabilization Distance (m)": f"{m.stabilization_distance:.3f}" if m.stabilized else "not reached",
    }
    if result.jerk is not None:
        metrics["Jerk A / Jerk B (m/s^3)"] = f"{m.jerk_a:.4f} / {m.jerk_b:.4f}"
    return metrics

def _pdf_table(pdf, title, rows):
    pdf.set_font("Helvetica", "B", 13)
    pdf.cell(0, 9, title, new_x="LMARGIN", new_y="NEXT")
    pdf.set_font("Helvetica", size=10)
    for label, value in rows.items():
        pdf.cell(75, 7, label, border=1)
        pdf.cell(0, 7, str(value), border=1, new_x="LMARGIN", new_y="NEXT")
    pdf.ln(4)

def generate_pdf_report(result, config_path, dirs, output_pdf_path):
    """One page of inputs and metrics, then one page per chart grouped by use-case."""
    pdf = FPDF()
    pdf.set_auto_page_break(auto=True, margin=15)
    pdf.add_page()
    pdf.set_font("Helvetica", "B", 16)
    pdf.cell(0, 10, f"Speed Reconstruction Report: {result.profile.name}",
             new_x="LMARGIN", new_y="NEXT", align="C")
    pdf.set_font("Helvetica", "I", 9)
    pdf.cell(0, 6, f"Generated {datetime.datetime.now().strftime('%Y-%m-%d %H:%M:%S')}",
             new_x="LMARGIN", new_y="NEXT", align="C")
    pdf.ln(4)

    _pdf_table(pdf, "Ramp Inputs", report_inputs(config_path, result.profile))
    _pdf_table(pdf, "Reconstruction Metrics", report_metrics(result))

    if result.jerk is not None:
        pdf.set_font("Helvetica", "B", 13)
        pdf.cell(0, 9, "Jerk Harness Initializer", new_x="LMARGIN", new_y="NEXT")
        pdf.set_font("Courier", size=9)
        pdf.multi_cell(0, 5, format_harness_block(result.profile, result.jerk))

    for key, heading in CHART_SECTIONS.items():
        charts = sorted(Path(dirs[key]).glob("*.png"))
        for i, img_path in enumerate(charts):
            pdf.add_page()
            if i == 0:
                pdf.set_font("Helvetica", "B", 14)
                pdf.cell(0, 10, heading, new_x="LMARGIN", new_y="NEXT")
            pdf.set_font("Helvetica", "B", 11)
            caption = img_path.stem.replace("_", " ").capitalize()
            pdf.cell(0, 8, caption, new_x="LMARGIN", new_y="NEXT", align="C")
            pdf.image(str(img_path), x=15, w=180)
    pdf.output(str(output_pdf_path))
    print(f"PDF report saved to: {output_pdf_path}")

# ================
# 5. MAIN ENTRYPOINT
# ================

def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Speed reconstruction simulation: sender/receiver extrapolation study"
    )
    run = parser.add_argument_group("run options")
    run.add_argument("--base-dir", default=str(DEFAULT_SETTINGS["base_dir"]),
                     help="Project base directory holding config/, data/ and results/")
    run.add_argument("--config", default=DEFAULT_SETTINGS["config"],
                     help="Config file name inside config/")
    run.add_argument("--usecase", nargs="*", choices=list(USE_CASES) + ["all"],
                     default=DEFAULT_SETTINGS["usecase"],
                     help="Use-case(s) to run (default: single_run)")
    run.add_argument("--pdf-report", action="store_true", default=DEFAULT_SETTINGS["pdf_report"],
                     help="Write a PDF with inputs, metrics and every chart")
    run.add_argument("--loglevel", default=DEFAULT_SETTINGS["loglevel"],
                     choices=["DEBUG", "INFO", "WARNING", "ERROR"], type=str.upper,
                     help="Logging level")

    ramp = parser.add_argument_group("ramp overrides", "Replace values from the config 'profile' section")
    ramp.add_argument("--start-speed", type=float, help="Start speed (km/h)")
    ramp.add_argument("--end-speed", type=float, help="End speed (km/h)")
    ramp.add_argument("--duration", type=float, help="Ramp duration (ms)")
    ramp.add_argument("--jerk", action="store_true", default=None,
                      help="Use the jerk-limited Bezier S-curve instead of the linear ramp")
    return parser.parse_args(argv)

def main(argv=None):
    args = parse_args(argv)

    logging.basicConfig(level=getattr(logging, args.loglevel.upper()), format="%(levelname)s: %(message)s")
    base_dir = Path(args.base_dir)
    dirs = setup_dirs(base_dir)
    config_path = dirs["config"] / args.config
    config = load_config(config_path)

    overrides = dict(
        start_speed=args.start_speed,
        end_speed=args.end_speed,
        duration_ms=args.duration,
        use_jerk=args.jerk,
    )
    profile = build_profile(config, overrides)
    try:
        profile.validate()
    except ValidationError as exc:
        logging.error(f"Invalid profile: {exc}")
        sys.exit(1)

    params = dict(profile=profile)

    if "all" in args.usecase:
        run_cases = USE_CASES.values()
    else:
        run_cases = [USE_CASES[uc] for uc in args.usecase]
    for fn in run_cases:
        fn(config, dirs, params)

    if args.pdf_report:
        config_name = config.get("name", "simulation")
        generate_pdf_report(
            simulate(profile),
            config_path,
            dirs,
            dirs["results"] / f"{config_name}_simulation_report.pdf",
        )

if __name__ == "__main__":
    main()
