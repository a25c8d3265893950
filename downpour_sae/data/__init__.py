"""Sample loading, result dumps and checkpoints."""

from .samples import load_lines, parse_lines, samples_to_matrix, load_samples_table, partition_columns
from .dump import dump_matrix, dump_layer_result, loss_history_frame
from .checkpoint import save_stack, load_stack, stack_state_dict

__all__ = [
    "load_lines",
    "parse_lines",
    "samples_to_matrix",
    "load_samples_table",
    "partition_columns",
    "dump_matrix",
    "dump_layer_result",
    "loss_history_frame",
    "save_stack",
    "load_stack",
    "stack_state_dict",
]
