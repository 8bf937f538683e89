"""Console reports for calibration, bonus pricing and batch statistics."""

import pandas as pd

from src.game_manager.game_initializer import SimulationContext
from src.game_manager.round_state import SimulationMode
from src.results_pipeline.statistics import SimulationStatistics
from src.simulation_engine.models import BonusType

_RULE = "-" * 50


def crash_probability_report(context: SimulationContext) -> str:
    """Calibrated crash probability per step, the tail and the diagnostics."""
    dist = context.distribution
    df = pd.DataFrame(
        {
            "Step": range(1, dist.total_steps + 1),
            "Probability (%)": [p * 100 for p in dist.step_probabilities],
        }
    )
    total = (sum(dist.step_probabilities) + dist.tail_probability) * 100
    lines = [
        "Crash Probabilities by Step:",
        df.to_string(index=False, float_format=lambda v: f"{v:.7f}"),
        f"Crash at Step {dist.beyond_range_step}: {dist.tail_probability * 100:.7f}%",
        _RULE,
        f"Sum of Probabilities: {total:.2f}%",
        f"Initial Expected Return: {dist.initial_expected_payout:.4f}",
        f"Scaling Factor: {dist.scaling_factor:.6f}",
        f"Calculated RTP: {dist.realized_rtp * 100:.2f}% "
        f"(Target: {dist.target_rtp * 100:.2f}%, drift {dist.rtp_drift * 100:+.2f} pp)",
    ]
    return "\n".join(lines)


def bonus_cost_report(context: SimulationContext) -> str:
    """Bonus price at every step; ``N/A`` where a bonus cannot be bought."""
    sampler = context.jump_sampler

    def fmt(cost):
        return "N/A" if cost is None else f"${cost:.2f}"

    df = pd.DataFrame(
        {
            "Step": range(context.total_steps),
            **{
                f"{bonus_type.display_name} Bonus Cost": [
                    fmt(sampler.bonus_cost(step, bonus_type))
                    for step in range(context.total_steps)
                ]
                for bonus_type in BonusType
            },
        }
    )
    return "\n".join(["Bonus Costs by Step:", df.to_string(index=False), _RULE])


def statistics_report(
    stats: SimulationStatistics,
    mode: SimulationMode,
    description: str = "",
) -> str:
    """Batch totals, mode RTP, speed-mode split and the per-step table."""
    s = stats.summary()
    lines = ["Simulation Statistics:"]
    if description:
        lines.append(description)
    lines += [
        f"Total Rounds: {s['rounds']}",
        f"Total Winnings: ${s['total_winnings']:.2f}",
        f"Total Cost: ${s['total_cost']:.2f}",
        f"Net Profit: ${s['net_profit']:.2f}",
        f"Average Step Reached: {s['average_final_step']:.2f}",
        f"Crashes: {s['crashes']} ({s['crash_pct']:.2f}%)",
        f"Cash Outs: {s['cash_outs']} ({s['cash_out_pct']:.2f}%)",
        f"Reached Top: {s['reached_top']} ({s['reached_top_pct']:.2f}%)",
        f"Bonus Activations: {s['bonus_activations']} "
        f"({s['redistributions']} crash points redistributed)",
        "",
        f"{mode.value.capitalize()} Mode RTP: {s['rtp']:.2f}% "
        f"(Winnings: ${s['total_winnings']:.2f}, Cost: ${s['total_cost']:.2f})",
        "",
        "Speed Mode Distribution:",
        stats.speed_mode_table().to_string(index=False, float_format=lambda v: f"{v:.7f}"),
        "",
        "Per-Step Statistics:",
        stats.per_step_table().to_string(
            index=False, na_rep="N/A", float_format=lambda v: f"{v:.7f}"
        ),
    ]
    return "\n".join(lines)
