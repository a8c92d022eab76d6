import matplotlib.pyplot as plt
import numpy as np


def plot_speed_reconstruction(result, out_dir):
    """Actual, received (step) and interpolated speed against time."""
    p = result.profile
    df = result.to_frame()
    plt.figure(figsize=(10, 6))
    plt.plot(df["time_ms"], df["actual_kmh"], label="Actual Speed (Continuous)", color="#2563eb", lw=2)
    plt.plot(
        df["time_ms"], df["received_kmh"],
        label=f"Received Speed ({p.sender_interval_ms:g}ms)",
        color="#9333ea", lw=2, drawstyle="steps-post",
    )
    plt.plot(
        df["time_ms"], df["interpolated_kmh"],
        label=f"Interpolated Speed ({p.receiver_interval_ms:g}ms)",
        color="#10b981", lw=2,
    )
    plt.axhline(p.end_speed, color="red", ls="--", lw=1, label="End Speed")
    plt.axvline(p.duration_ms, color="grey", ls=":", lw=1)
    if result.metrics.stabilized:
        plt.axvline(result.metrics.stabilization_time, color="black", ls=":", lw=1, alpha=0.7)
        plt.text(
            result.metrics.stabilization_time, p.end_speed, " stabilized",
            ha="left", va="bottom", fontsize=8,
        )
    plt.ylim(result.axis.min_value, result.axis.max_value)
    plt.xlabel("Time (ms)")
    plt.ylabel("Speed (km/h)")
    plt.title(f"Speed Reconstruction ({p.name})")
    plt.legend()
    plt.grid(True, which='both')
    plt.tight_layout()
    plt.savefig(out_dir / "speed_reconstruction.png")
    plt.show()
    plt.close()


def plot_distance_and_speed(result, out_dir):
    p = result.profile
    time = np.array([d.time for d in result.distance_points])
    distance = np.array([d.distance for d in result.distance_points])
    speed = np.array([d.interpolated_speed for d in result.distance_points])

    fig, ax = plt.subplots(figsize=(10, 6))
    ax.plot(time, distance, color=p.color, lw=2, label="Distance")
    ax.set_xlabel("Time (ms)")
    ax.set_ylabel("Distance (m)")
    ax2 = ax.twinx()
    ax2.plot(time, speed, color="#10b981", lw=1, ls="--", label="Interpolated Speed")
    ax2.set_ylabel("Speed (km/h)")

    m = result.metrics
    ax.axvline(p.duration_ms, color="grey", ls=":", lw=1)
    ax.text(p.duration_ms, m.duration_distance, f" {m.duration_distance:.2f} m", va="bottom", fontsize=8)
    if m.stabilized:
        ax.scatter([m.stabilization_time], [m.stabilization_distance], color="black", zorder=5)

    handles = ax.get_legend_handles_labels()[0] + ax2.get_legend_handles_labels()[0]
    labels = ax.get_legend_handles_labels()[1] + ax2.get_legend_handles_labels()[1]
    ax.legend(handles, labels, loc="upper left")
    ax.set_title(f"Distance and Interpolated Speed vs. Time ({p.name})")
    plt.tight_layout()
    plt.savefig(out_dir / "distance_and_speed.png")
    plt.show()
    plt.close(fig)


def plot_duration_sweep(durations, deviations, stabilization_times, label, color, out_dir):
    fig, ax = plt.subplots(figsize=(10, 6))
    ax.plot(durations, deviations, label=f"{label} peak deviation", color=color, marker='o')
    ax.set_xlabel("Ramp Duration (ms)")
    ax.set_ylabel("Peak Deviation (km/h)")
    ax2 = ax.twinx()
    ax2.plot(durations, stabilization_times, color="grey", ls="--", marker='x', label="Stabilization time")
    ax2.set_ylabel("Stabilization Time (ms)")
    ax.set_title("Ramp Duration vs. Reconstruction Overshoot")
    ax.grid(True, which='both')
    ax.legend(loc="upper right")
    plt.tight_layout()
    plt.savefig(out_dir / "duration_sweep.png")
    plt.show()
    plt.close(fig)


def plot_jerk_factor_sweep(factors, deviations, label, color, out_dir):
    plt.figure(figsize=(10, 6))
    plt.plot(factors, deviations, label=label, color=color, marker='o')
    plt.xlabel("Jerk Factor (initial = final)")
    plt.ylabel("Peak Deviation (km/h)")
    plt.title("Jerk Factor vs. Reconstruction Overshoot")
    plt.legend()
    plt.grid(True, which='both')
    plt.tight_layout()
    plt.savefig(out_dir / "jerk_factor_sweep.png")
    plt.show()
    plt.close()


def plot_duration_end_speed_heatmap(D, E, Z, label, out_dir, fname="duration_end_speed_heatmap.png"):
    fig, ax = plt.subplots(figsize=(10, 8))
    mesh = ax.pcolormesh(D, E, Z, cmap='viridis', shading='auto')
    ax.set_xlabel('Ramp Duration (ms)')
    ax.set_ylabel('End Speed (km/h)')
    ax.set_title(f'Peak Deviation vs Duration and End Speed ({label})')
    fig.colorbar(mesh, ax=ax, label='Peak Deviation (km/h)')
    plt.tight_layout()
    plt.savefig(out_dir / fname)
    plt.show()
    plt.close(fig)


def plot_scenario_deviation_bar(scenarios, out_dir):
    """Overshoot/undershoot per scenario, sorted by total deviation."""
    deviation = scenarios["Overshoot (km/h)"] + scenarios["Undershoot (km/h)"]
    order = np.argsort(deviation.to_numpy())
    ordered = scenarios.iloc[order]
    labels = list(ordered["Name"])
    edge_colors = ["green" if j else "blue" for j in ordered["Use Jerk"]]

    fig, ax = plt.subplots(figsize=(max(10, len(labels) * 0.7), 7))
    ind = np.arange(len(labels))
    ax.bar(ind, ordered["Overshoot (km/h)"], label="Overshoot", color="#E64A19",
           edgecolor=edge_colors, linewidth=2)
    ax.bar(ind, ordered["Undershoot (km/h)"], bottom=ordered["Overshoot (km/h)"],
           label="Undershoot", color="#1976D2", edgecolor=edge_colors, linewidth=2)
    for idx, (dev, pct) in enumerate(zip(deviation.to_numpy()[order], ordered["Deviation (%)"])):
        ax.text(idx, dev + max(dev * 0.01, 0.05), f"{pct:.1f}%", ha='center', va='bottom', fontweight='bold')
    ax.set_xticks(ind)
    ax.set_xticklabels(labels, rotation=90, ha='center', fontsize=8)
    ax.set_ylabel("Peak Deviation (km/h)")
    ax.set_title("Scenario Comparison: Reconstruction Overshoot / Undershoot")
    ax.legend(title="Deviation", bbox_to_anchor=(1.01, 1), loc='upper left')
    plt.tight_layout()
    plt.savefig(out_dir / "scenario_deviation.png")
    plt.show()
    plt.close(fig)
