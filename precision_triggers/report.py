"""
Convergence history chart: max uncertainty/threshold ratio per trigger check.
"""
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt


def plot_trigger_history(evaluations, path, title="Trigger convergence"):
    """Save a chart of worst ratio vs batch.

    Args:
        evaluations: list of EvaluationResult (or their to_dict() form)
        path: output image path
    """
    rows = [e if isinstance(e, dict) else e.to_dict() for e in evaluations]
    batches = [r['batch'] for r in rows]
    ratios = [r['worst_ratio'] for r in rows]

    fig, ax = plt.subplots(figsize=(7, 4))
    ax.plot(batches, ratios, "o-", color="#1a365d", label="max unc./thresh.")
    ax.axhline(1.0, color="#c53030", ls="--", lw=1, label="threshold")

    for r in rows:
        if r.get('predicted_batches') is not None:
            ax.annotate(f"-> {r['predicted_batches']}", (r['batch'], r['worst_ratio']),
                        textcoords="offset points", xytext=(4, 6), fontsize=8)

    ax.set_xlabel("Batch")
    ax.set_ylabel("Uncertainty / threshold")
    ax.set_title(title)
    ax.grid(True, alpha=0.3)
    ax.legend()
    fig.tight_layout()
    fig.savefig(path, dpi=150)
    plt.close(fig)
    return path
