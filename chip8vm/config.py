"""Host-side configuration for a CHIP-8 session."""

from flax.struct import dataclass, field

from chip8vm.constants import DEFAULT_CYCLES_PER_SECOND, TIMER_HZ


@dataclass(frozen=True)
class EmulatorConfig:
    """Plain boot parameters handed to the cycle driver.

    Attributes:
        rom_path: Path to the program image
        cycles_per_second: Instruction rate (default: 700)
        timer_hz: Delay/sound timer rate and frame rate (default: 60)
        scale: Window pixels per CHIP-8 pixel
        color_scheme: Rendering colours, see ``create_color_scheme``
        seed: Seed for the CXNN random source
        log_level: Console log level
        trace: Log every fetched instruction at debug level
    """
    rom_path: str = field(pytree_node=False, default=None)
    cycles_per_second: int = field(pytree_node=False, default=DEFAULT_CYCLES_PER_SECOND)
    timer_hz: int = field(pytree_node=False, default=TIMER_HZ)
    scale: int = field(pytree_node=False, default=12)
    color_scheme: str = field(pytree_node=False, default="white")
    seed: int = field(pytree_node=False, default=0)
    log_level: str = field(pytree_node=False, default="INFO")
    trace: bool = field(pytree_node=False, default=False)

    def __post_init__(self):
        if self.cycles_per_second <= 0:
            raise ValueError(f"cycles_per_second must be positive, got {self.cycles_per_second}")
        if self.timer_hz <= 0:
            raise ValueError(f"timer_hz must be positive, got {self.timer_hz}")
        if self.scale <= 0:
            raise ValueError(f"scale must be positive, got {self.scale}")

    @property
    def cycles_per_frame(self) -> int:
        """Number of instructions executed per timer tick, at least one."""
        return max(1, self.cycles_per_second // self.timer_hz)

    def as_dict(self) -> dict:
        return {
            "rom_path": self.rom_path,
            "cycles_per_second": self.cycles_per_second,
            "timer_hz": self.timer_hz,
            "scale": self.scale,
            "color_scheme": self.color_scheme,
            "seed": self.seed,
        }
