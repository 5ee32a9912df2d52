from .actions import can_act, apply_action, pay_requisitions
from .bordereaux import compile_requisitions, pending_compilation
from .escalation import (
    SweepResult,
    get_escalation_delays,
    run_escalation_sweep,
    set_escalation_delay,
)
from .requisitions import create_requisition, replace_line_items
from .transitions import ROUTES, TransitionResult, apply

__all__ = [
    "ROUTES",
    "SweepResult",
    "TransitionResult",
    "apply",
    "apply_action",
    "can_act",
    "compile_requisitions",
    "create_requisition",
    "get_escalation_delays",
    "pay_requisitions",
    "pending_compilation",
    "replace_line_items",
    "run_escalation_sweep",
    "set_escalation_delay",
]
