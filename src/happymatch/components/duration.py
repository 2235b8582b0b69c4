from dataclasses import dataclass

@dataclass(slots=True)
class Duration:
    value: float
    elapsed: float = 0.0

    @property
    def expired(self) -> bool:
        return self.elapsed >= self.value
