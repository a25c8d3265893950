"""
Configuration classes for downpour_sae package.
"""

from enum import Enum
from pydantic import BaseModel, Field, field_validator
from typing import List, Optional

from .errors import ConfigurationError


class LearningMethod(str, Enum):
    """Distributed optimisation strategies."""
    DBGD = "dbgd"      # distributed batch gradient descent
    DSGD = "dsgd"      # downpour stochastic gradient descent
    MBDSGD = "mbdsgd"  # mini-batch downpour stochastic gradient descent

    @classmethod
    def parse(cls, name: str) -> "LearningMethod":
        """
        Resolve a learning method name.

        Args:
            name: One of "dbgd", "dsgd", "mbdsgd"

        Returns:
            The matching LearningMethod

        Raises:
            ConfigurationError: If the name is not a known method
        """
        if isinstance(name, cls):
            return name
        try:
            return cls(str(name).lower())
        except ValueError:
            raise ConfigurationError(
                f"Learning method '{name}' is not supported. "
                f"Available methods: {[m.value for m in cls]}"
            ) from None


# Read/update batch sizes used when the option is left unset (<= 0)
DEFAULT_SYNC_BATCH = {
    LearningMethod.DBGD: 1,
    LearningMethod.DSGD: 10,
    LearningMethod.MBDSGD: 4,
}


class SAEConfig(BaseModel):
    """Configuration for stacked sparse autoencoder training."""
    visible_size: int = Field(gt=0)
    hidden_layer_sizes: List[int]
    learning_method: LearningMethod = LearningMethod.DBGD
    rounds: int = Field(default=1, ge=0)
    learning_rate: float = 0.1  # alpha
    weight_decay: float = Field(default=0.0, ge=0.0)  # lambda
    sparsity_target: float = Field(default=0.05, gt=0.0, lt=1.0)
    sparsity_weight: float = Field(default=0.0, ge=0.0)  # beta
    mini_batch_size: int = Field(default=10, gt=0)
    read_batch: int = 0
    update_batch: int = 0
    staleness_bound: int = Field(default=0, ge=0)
    bounded_staleness_enabled: bool = False
    debug_logging: bool = False
    seed: int = 0
    show_progress: bool = False

    @field_validator("learning_method", mode="before")
    @classmethod
    def _parse_method(cls, v):
        return LearningMethod.parse(v)

    @field_validator("hidden_layer_sizes")
    @classmethod
    def _check_hidden(cls, v: List[int]) -> List[int]:
        if not v:
            raise ConfigurationError("hidden_layer_sizes must name at least one layer")
        if any(size <= 0 for size in v):
            raise ConfigurationError(f"hidden layer sizes must be positive, got {v}")
        return v

    @property
    def layer_sizes(self) -> List[int]:
        """[visible_size, hidden_size_1, ..., hidden_size_k]"""
        return [self.visible_size] + list(self.hidden_layer_sizes)

    @property
    def n_layers(self) -> int:
        return len(self.hidden_layer_sizes)

    @property
    def effective_read_batch(self) -> int:
        if self.read_batch > 0:
            return self.read_batch
        return DEFAULT_SYNC_BATCH[self.learning_method]

    @property
    def effective_update_batch(self) -> int:
        if self.update_batch > 0:
            return self.update_batch
        return DEFAULT_SYNC_BATCH[self.learning_method]


class Paths(BaseModel):
    """File paths configuration."""
    input_dir: str = "data"
    output_dir: str = "output"
    delimiter: str = " "
    checkpoint_path: Optional[str] = "sae_stack.pt"
    loss_history_csv: str = "loss_history.csv"
