from dataclasses import dataclass

from .base_config import BaseConfig, check_multiplier, check_positive


@dataclass
class ScoringConfig(BaseConfig):
    """Parameters of the default scorers."""

    # Peak scores
    intensity_multiplier: float = 1.0

    # Peak pair scores
    relative_loss_size_multiplier: float = 0.5

    # Mass deviation of fragment peaks
    mass_error_sd_ppm: float = 5.0
    mass_error_sd_absolute: float = 0.001

    # Loss priors. Loss masses are modelled log-normally.
    common_loss_bonus: float = 1.0
    loss_size_log_mean: float = 4.0
    loss_size_log_sd: float = 0.8
    loss_size_multiplier: float = 1.0

    # Multiplier for the isotope score. Set to 0 to disable isotope scoring.
    isotope_multiplier: float = 1.0

    def __post_init__(self):
        super().__post_init__()
        for name in ('intensity_multiplier', 'relative_loss_size_multiplier', 'common_loss_bonus',
                     'loss_size_multiplier', 'isotope_multiplier'):
            check_multiplier(name, getattr(self, name))
        for name in ('mass_error_sd_ppm', 'mass_error_sd_absolute', 'loss_size_log_sd'):
            check_positive(name, getattr(self, name))
