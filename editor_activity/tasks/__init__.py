"""Background tasks for application maintenance."""
from editor_activity.tasks.liveness_sweep import liveness_sweep_cycle, run_liveness_sweep

__all__ = ['liveness_sweep_cycle', 'run_liveness_sweep']
