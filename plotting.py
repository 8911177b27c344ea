## @file plotting.py
## @brief Visualization of page wear at the end of a run.

import matplotlib
matplotlib.use('Agg') # no display needed, the figure is only saved
import matplotlib.pyplot as plt # type: ignore

import numpy as np


def plot_results(engine, path: str) -> None:
    ##
    # @brief Plot per-page wear for every node, and wear growth over iterations.
    #
    # @param engine A SimulationEngine that has finished running
    # @param path File the figure is saved to
    #
    # The left panel shows total_writes per physical page of each node. The
    # right panel (write and time modes) shows the most-worn page after each
    # iteration against the cell write endurance.
    ##
    has_history = bool(engine.history)
    fig, axes = plt.subplots(1, 2 if has_history else 1, figsize=(14 if has_history else 8, 6))
    wear_ax = axes[0] if has_history else axes

    pages = np.arange(engine.memory_page_count)
    for node, memory in enumerate(engine.memories):
        wear_ax.plot(pages, memory.total_writes, label=f'Node {node}')
    wear_ax.axhline(engine.cell_write_endurance, color='r', linestyle='--', label='Cell write endurance')
    wear_ax.set_xlabel('Physical Page')
    wear_ax.set_ylabel('Total Writes')
    wear_ax.set_title('Page Wear at End of Simulation')
    wear_ax.grid(True)
    wear_ax.legend()

    if has_history:
        iterations = [x[0] for x in engine.history]
        max_wear = [x[2] for x in engine.history]
        history_ax = axes[1]
        history_ax.plot(iterations, max_wear, 'g-', label='Most-worn page')
        history_ax.axhline(engine.cell_write_endurance, color='r', linestyle='--', label='Cell write endurance')
        history_ax.set_xlabel('Iteration')
        history_ax.set_ylabel('Total Writes')
        history_ax.set_title(f'Wear Growth ({engine.remaps} remaps)')
        history_ax.grid(True)
        history_ax.legend()

    # Add simulation parameters as text
    param_text = (
        f"Simulation Parameters:\n"
        f"Mode: {engine.mode.value}\n"
        f"Nodes: {engine.node_count}\n"
        f"Pages per memory: {engine.memory_page_count}\n"
        f"Cell write endurance: {engine.cell_write_endurance}\n"
    )
    for node, memory in enumerate(engine.memories):
        summary = memory.wear_summary()
        param_text += (
            f"Node {node} wear: min {summary['min_total_writes']}, "
            f"max {summary['max_total_writes']}, mean {summary['mean_total_writes']:.1f}\n"
        )
    fig.text(0.02, 0.98, param_text, fontsize=8, va='top')

    fig.savefig(path, bbox_inches='tight')
    plt.close(fig)
