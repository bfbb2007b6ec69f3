from listings.migrations.step import MigrationStep, StepResult, StepStatus, run_step, run_steps

__all__ = ["MigrationStep", "StepResult", "StepStatus", "run_step", "run_steps"]
